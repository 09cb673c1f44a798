"""Non-blocking temp mail client on top of httpx."""

import asyncio
from typing import Any, Callable, List, Optional

import httpx
import structlog
from bs4 import BeautifulSoup

from .challenge import ChallengeSolver
from .client import (
    ensure_ok,
    read_changed_address,
    read_domains,
    read_provisioned_address,
    read_regenerated_address,
    requested_address,
    resolve_config,
)
from .config import ClientConfig
from .errors import NotStartedError
from .extract import parse_html
from .inbox import AsyncInbox
from .models import MAIL_COOKIE, Session, replace_cookie
from .transport import AsyncChallengeTransport
from .urls import Urls, ajax_headers

logger = structlog.get_logger(__name__)


class AsyncTempMailClient:
    """Async counterpart of :class:`tempmail.client.TempMailClient`.

    Suspends only on network I/O and the clearance delay. Cancelling an
    operation leaves the session as it was before the call.
    """

    def __init__(
        self,
        solver: Optional[ChallengeSolver] = None,
        proxy: Optional[str] = None,
        *,
        config: Optional[ClientConfig] = None,
        sleep: Callable[[float], Any] = asyncio.sleep,
        http_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
    ):
        self.config = resolve_config(config, proxy)
        self.urls = Urls(self.config.base_url, self.config.language)
        self.inbox = AsyncInbox(self)
        self._solver = solver
        self._sleep = sleep
        self._http_factory = http_factory
        self._session: Optional[Session] = None
        self._transport: Optional[AsyncChallengeTransport] = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "AsyncTempMailClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def email(self) -> Optional[str]:
        return self._session.email if self._session else None

    @property
    def csrf_token(self) -> Optional[str]:
        return self._session.csrf_token if self._session else None

    async def start_session(self) -> str:
        async with self._lock:
            session = Session(host=self.urls.host)
            http = self._http_factory() if self._http_factory else None
            transport = AsyncChallengeTransport(session, self.config, self._solver, sleep=self._sleep, http=http)
            try:
                response = await transport.execute("GET", self.urls.main_page)
                email = read_provisioned_address(response, self.urls.main_page)
            except BaseException:
                await transport.aclose()
                raise
            session.email = email
            previous = self._transport
            self._session, self._transport = session, transport
            self.inbox.clear()
            if previous is not None:
                await previous.aclose()
        logger.info("session_started", email=email)
        return email

    async def available_domains(self) -> List[str]:
        async with self._lock:
            session = self._require_session("available_domains")
            if session.available_domains is None:
                response = await self._transport.execute("GET", self.urls.change)
                session.available_domains = read_domains(response, self.urls.change)
                logger.info("domains_loaded", count=len(session.available_domains))
            return list(session.available_domains)

    async def change(self, login: str, domain: str) -> str:
        async with self._lock:
            session = self._require_session("change")
            requested = requested_address(login, domain)
            if session.csrf_token is None:
                ensure_ok(await self._transport.execute("GET", self.urls.change), self.urls.change)
            response = await self._transport.execute(
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

    async def delete(self) -> str:
        async with self._lock:
            session = self._require_session("delete")
            response = await self._transport.execute(
                "GET", self.urls.delete, headers=ajax_headers(self.urls.main_page)
            )
            email = read_regenerated_address(response)
            previous = session.email
            replace_cookie(session.cookies, MAIL_COOKIE, email, session.host)
            session.email = email
            self.inbox.clear()
        logger.info("address_regenerated", previous=previous, email=email)
        return email

    async def aclose(self) -> None:
        if self._transport is not None:
            await self._transport.aclose()

    def _require_session(self, operation: str) -> Session:
        if self._session is None:
            raise NotStartedError(operation)
        return self._session

    async def _fetch_document(self, url: str) -> BeautifulSoup:
        response = await self._transport.execute("GET", url)
        ensure_ok(response, url)
        return parse_html(response.text)
