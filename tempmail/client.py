"""Blocking temp mail client.

Typical use::

    with TempMailClient() as client:
        client.start_session()
        domains = client.available_domains()
        client.change("loginexample", domains[0])
        messages = client.inbox.refresh()
        client.delete()
"""

import threading
import time
from typing import Any, Callable, List, Optional

import requests
import structlog
from bs4 import BeautifulSoup

from .challenge import ChallengeSolver
from .config import ClientConfig
from .errors import ChangeRejectedError, DeleteFailedError, NotStartedError, ProvisioningError, TransportError
from .extract import extract_attribute, extract_json_field, extract_option_values, parse_html
from .inbox import Inbox
from .models import MAIL_COOKIE, Session, replace_cookie
from .transport import ChallengeTransport
from .urls import Urls, ajax_headers

logger = structlog.get_logger(__name__)


def resolve_config(config: Optional[ClientConfig], proxy: Optional[str]) -> ClientConfig:
    config = config or ClientConfig()
    if proxy:
        config = config.model_copy(update={"proxy": proxy})
    return config


def ensure_ok(response: Any, url: str) -> None:
    if not 200 <= response.status_code < 300:
        raise TransportError(f"GET {url} returned HTTP {response.status_code}", status_code=response.status_code)


def read_address(document: BeautifulSoup) -> Optional[str]:
    return extract_attribute(document, "mail", "value") or None


def read_provisioned_address(response: Any, url: str) -> str:
    ensure_ok(response, url)
    email = read_address(parse_html(response.text))
    if not email:
        raise ProvisioningError(f"no address found on {url}; the page layout changed or the request was blocked")
    return email


def read_domains(response: Any, url: str) -> List[str]:
    ensure_ok(response, url)
    return extract_option_values(parse_html(response.text), "domain")


def requested_address(login: str, domain: str) -> str:
    # domain options may carry the leading "@"
    return f"{login}{domain}" if domain.startswith("@") else f"{login}@{domain}"


def read_changed_address(response: Any, previous: Optional[str], requested: str) -> str:
    if not 200 <= response.status_code < 300:
        raise ChangeRejectedError(f"change to {requested} answered with HTTP {response.status_code}")
    email = read_address(parse_html(response.text))
    if not email:
        raise ChangeRejectedError(f"change to {requested} was not confirmed by the service")
    if previous and email.lower() == previous.lower() and requested.lower() != previous.lower():
        raise ChangeRejectedError(f"service kept {previous} instead of {requested}")
    return email


def read_regenerated_address(response: Any) -> str:
    if response.status_code != 200:
        raise DeleteFailedError(f"delete answered with HTTP {response.status_code}", status_code=response.status_code)
    try:
        payload = response.json()
    except ValueError:
        payload = None
    email = extract_json_field(payload, "mail")
    if not email:
        raise DeleteFailedError("delete response carried no new address", status_code=response.status_code)
    return email


class TempMailClient:
    """One temporary mailbox identity driven through the service's web pages.

    Operations on an instance are serialised by an instance lock. Nothing
    but ``start_session`` works until a session has been started.
    """

    def __init__(
        self,
        solver: Optional[ChallengeSolver] = None,
        proxy: Optional[str] = None,
        *,
        config: Optional[ClientConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
        http_factory: Callable[[], requests.Session] = requests.Session,
    ):
        self.config = resolve_config(config, proxy)
        self.urls = Urls(self.config.base_url, self.config.language)
        self.inbox = Inbox(self)
        self._solver = solver
        self._sleep = sleep
        self._http_factory = http_factory
        self._session: Optional[Session] = None
        self._transport: Optional[ChallengeTransport] = None
        self._lock = threading.RLock()

    def __enter__(self) -> "TempMailClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def email(self) -> Optional[str]:
        return self._session.email if self._session else None

    @property
    def csrf_token(self) -> Optional[str]:
        return self._session.csrf_token if self._session else None

    def start_session(self) -> str:
        """Start a new session and get a new temporary address."""
        with self._lock:
            session = Session(host=self.urls.host)
            transport = ChallengeTransport(
                session, self.config, self._solver, sleep=self._sleep, http=self._http_factory()
            )
            try:
                response = transport.execute("GET", self.urls.main_page)
                email = read_provisioned_address(response, self.urls.main_page)
            except Exception:
                transport.close()
                raise
            session.email = email
            previous = self._transport
            self._session, self._transport = session, transport
            self.inbox.clear()
            if previous is not None:
                previous.close()
        logger.info("session_started", email=email)
        return email

    def available_domains(self) -> List[str]:
        """Domains offered by the service, fetched once per session."""
        with self._lock:
            session = self._require_session("available_domains")
            if session.available_domains is None:
                response = self._transport.execute("GET", self.urls.change)
                session.available_domains = read_domains(response, self.urls.change)
                logger.info("domains_loaded", count=len(session.available_domains))
            return list(session.available_domains)

    def change(self, login: str, domain: str) -> str:
        """Change the temporary address to login@domain."""
        with self._lock:
            session = self._require_session("change")
            requested = requested_address(login, domain)
            if session.csrf_token is None:
                ensure_ok(self._transport.execute("GET", self.urls.change), self.urls.change)
            response = self._transport.execute(
                "POST",
                self.urls.change,
                headers={"Referer": self.urls.change},
                data={"csrf": session.csrf_token or "", "mail": login, "domain": domain},
            )
            email = read_changed_address(response, session.email, requested)
            previous = session.email
            session.email = email
            self.inbox.clear()
        logger.info("address_changed", previous=previous, email=email)
        return email

    def delete(self) -> str:
        """Delete the temporary address and get a new one."""
        with self._lock:
            session = self._require_session("delete")
            response = self._transport.execute("GET", self.urls.delete, headers=ajax_headers(self.urls.main_page))
            email = read_regenerated_address(response)
            previous = session.email
            replace_cookie(session.cookies, MAIL_COOKIE, email, session.host)
            session.email = email
            self.inbox.clear()
        logger.info("address_regenerated", previous=previous, email=email)
        return email

    def close(self) -> None:
        with self._lock:
            if self._transport is not None:
                self._transport.close()

    def _require_session(self, operation: str) -> Session:
        if self._session is None:
            raise NotStartedError(operation)
        return self._session

    def _fetch_document(self, url: str) -> BeautifulSoup:
        response = self._transport.execute("GET", url)
        ensure_ok(response, url)
        return parse_html(response.text)
