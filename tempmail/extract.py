"""Field extraction from HTML documents and JSON payloads.

Every helper returns ``None`` or an empty list when the target is missing so
that callers decide which error a missing field means.
"""

from typing import Any, List, Optional

from bs4 import BeautifulSoup


def parse_html(text: str) -> BeautifulSoup:
    return BeautifulSoup(text or "", "html.parser")


def extract_attribute(document: BeautifulSoup, element_id: str, attribute_name: str) -> Optional[str]:
    """Value of ``attribute_name`` on the element with id ``element_id``."""
    element = document.find(id=element_id)
    if element is None:
        return None
    value = element.get(attribute_name)
    if isinstance(value, list):
        # bs4 returns multi-valued attributes such as class as lists
        value = " ".join(value)
    return value


def extract_option_values(document: BeautifulSoup, container_id: str) -> List[str]:
    """Value of every option under ``container_id``, in document order.

    An option without a ``value`` attribute submits its text, as browsers do.
    """
    container = document.find(id=container_id)
    if container is None:
        return []
    return [option.get("value", option.get_text(strip=True)) for option in container.find_all("option")]


def extract_json_field(payload: Any, field_name: str) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    value = payload.get(field_name)
    if value is None:
        return None
    return str(value)


def extract_text(document: Any, selector: str) -> Optional[str]:
    """Whitespace-collapsed text of the first element matching a CSS selector."""
    element = document.select_one(selector)
    if element is None:
        return None
    text = " ".join(element.get_text(" ").split())
    return text or None
