"""Endpoints of the service and the header set sent with every request."""

from dataclasses import dataclass
from typing import Dict
from urllib.parse import urlparse

PAGE_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,"
    "image/apng,*/*;q=0.8,application/signed-exchange;v=b3"
)
AJAX_ACCEPT = "application/json, text/javascript, */*; q=0.01"


@dataclass(frozen=True)
class Urls:
    base: str
    language: str = "en"

    @property
    def host(self) -> str:
        return urlparse(self.base).hostname or ""

    @property
    def main_page(self) -> str:
        return f"{self._root}/"

    @property
    def change(self) -> str:
        return f"{self._root}/option/change/"

    @property
    def delete(self) -> str:
        return f"{self._root}/option/delete/"

    @property
    def refresh(self) -> str:
        return f"{self._root}/option/refresh/"

    def view(self, message_id: str) -> str:
        return f"{self._root}/view/{message_id}"

    @property
    def _root(self) -> str:
        return f"{self.base.rstrip('/')}/{self.language}"


def default_headers(host: str, user_agent: str) -> Dict[str, str]:
    """Headers attached to every request, in the order browsers send them."""
    return {
        "Accept": PAGE_ACCEPT,
        "Accept-Language": "en-US,en;q=0.9",
        "User-Agent": user_agent,
        "Host": host,
        "Upgrade-Insecure-Requests": "1",
        "Connection": "keep-alive",
    }


def ajax_headers(referer: str) -> Dict[str, str]:
    return {
        "Accept": AJAX_ACCEPT,
        "Referer": referer,
        "X-Requested-With": "XMLHttpRequest",
    }
