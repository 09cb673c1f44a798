"""Inbox reader: message list snapshots and message detail pages."""

import asyncio
import time
from typing import TYPE_CHECKING, Callable, Optional, Tuple

import structlog
from bs4 import BeautifulSoup

from .extract import extract_text
from .models import MailMessage, MailSummary

if TYPE_CHECKING:
    from .aio import AsyncTempMailClient
    from .client import TempMailClient

logger = structlog.get_logger(__name__)

Snapshot = Tuple[MailSummary, ...]


def parse_message_list(document: BeautifulSoup) -> Snapshot:
    """Every linked row of the inbox list, in page order (newest first)."""
    container = document.find(id="mails") or document.select_one(".inbox-dataList")
    if container is None:
        return ()
    summaries = []
    for row in container.find_all("li"):
        link = row.select_one("a.viewLink[href]")
        if link is None:
            # placeholder rows such as "Your inbox is empty"
            continue
        message_id = link["href"].rstrip("/").rsplit("/", 1)[-1]
        summaries.append(
            MailSummary(
                id=message_id,
                sender=extract_text(row, ".inboxSenderEmail") or extract_text(row, ".inboxSenderName"),
                subject=extract_text(row, ".inboxSubject"),
                timestamp=extract_text(row, ".inboxDate"),
            )
        )
    return tuple(summaries)


def parse_message(document: BeautifulSoup, message_id: str) -> MailMessage:
    return MailMessage(
        id=message_id,
        sender=extract_text(document, ".from-email") or extract_text(document, ".from-name"),
        subject=extract_text(document, ".user-data-subject h4"),
        timestamp=extract_text(document, ".user-data-time-data"),
        body=extract_text(document, ".inbox-data-content-intro") or "",
    )


class Inbox:
    """Mailbox of a :class:`TempMailClient`'s current address."""

    def __init__(self, client: "TempMailClient"):
        self._client = client
        self._messages: Snapshot = ()

    @property
    def messages(self) -> Snapshot:
        return self._messages

    def clear(self) -> None:
        self._messages = ()

    def refresh(self) -> Snapshot:
        """Fetch the message list and replace the snapshot."""
        with self._client._lock:
            self._client._require_session("Inbox.refresh")
            document = self._client._fetch_document(self._client.urls.refresh)
            snapshot = parse_message_list(document)
            self._messages = snapshot
        logger.debug("inbox_refreshed", email=self._client.email, count=len(snapshot))
        return snapshot

    def read(self, message_id: str) -> MailMessage:
        """Fetch the full message with the given id."""
        with self._client._lock:
            self._client._require_session("Inbox.read")
            document = self._client._fetch_document(self._client.urls.view(message_id))
        return parse_message(document, message_id)

    def wait_for_message(
        self,
        timeout: float = 60,
        interval: float = 5,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> Optional[MailSummary]:
        """Poll until a message newer than the current inbox arrives; None on timeout.

        The inbox is fetched once up front, so mail that arrived before the
        call is not mistaken for a new message.
        """
        known = len(self.refresh())
        deadline = clock() + timeout
        while True:
            if clock() + interval > deadline:
                logger.info("wait_for_message_timeout", timeout=timeout)
                return None
            sleep(interval)
            snapshot = self.refresh()
            if len(snapshot) > known:
                return snapshot[0]
            known = len(snapshot)


class AsyncInbox:
    """Mailbox of an :class:`AsyncTempMailClient`'s current address."""

    def __init__(self, client: "AsyncTempMailClient"):
        self._client = client
        self._messages: Snapshot = ()

    @property
    def messages(self) -> Snapshot:
        return self._messages

    def clear(self) -> None:
        self._messages = ()

    async def refresh(self) -> Snapshot:
        async with self._client._lock:
            self._client._require_session("Inbox.refresh")
            document = await self._client._fetch_document(self._client.urls.refresh)
            snapshot = parse_message_list(document)
            self._messages = snapshot
        logger.debug("inbox_refreshed", email=self._client.email, count=len(snapshot))
        return snapshot

    async def read(self, message_id: str) -> MailMessage:
        async with self._client._lock:
            self._client._require_session("Inbox.read")
            document = await self._client._fetch_document(self._client.urls.view(message_id))
        return parse_message(document, message_id)

    async def wait_for_message(
        self,
        timeout: float = 60,
        interval: float = 5,
        *,
        sleep: Callable[[float], object] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> Optional[MailSummary]:
        known = len(await self.refresh())
        deadline = clock() + timeout
        while True:
            if clock() + interval > deadline:
                logger.info("wait_for_message_timeout", timeout=timeout)
                return None
            await sleep(interval)
            snapshot = await self.refresh()
            if len(snapshot) > known:
                return snapshot[0]
            known = len(snapshot)
