"""Tests for tempmail.inbox."""

from __future__ import annotations

import pytest

from tempmail.errors import TransportError
from tempmail.extract import parse_html
from tempmail.inbox import parse_message, parse_message_list
from tempmail.models import MailMessage, MailSummary

from .conftest import BASE, REFRESH, Reply, inbox_page, message_page

ROWS = [
    {"id": "m2", "sender": "bob@example.net", "name": "Bob", "subject": "Your code", "date": "12:05"},
    {"id": "m1", "sender": "alice@example.net", "name": "Alice", "subject": "Welcome", "date": "12:01"},
]


class TestParseMessageList:
    def test_rows_in_page_order(self):
        snapshot = parse_message_list(parse_html(inbox_page(ROWS)))
        assert snapshot == (
            MailSummary(id="m2", sender="bob@example.net", subject="Your code", timestamp="12:05"),
            MailSummary(id="m1", sender="alice@example.net", subject="Welcome", timestamp="12:01"),
        )

    def test_empty_placeholder_skipped(self):
        assert parse_message_list(parse_html(inbox_page([]))) == ()

    def test_no_list_on_page(self):
        assert parse_message_list(parse_html("<html></html>")) == ()

    def test_sender_name_fallback(self):
        html = (
            '<div id="mails"><ul><li><a class="viewLink" href="/en/view/x9/">'
            '<span class="inboxSenderName">Newsletter</span></a></li></ul></div>'
        )
        (summary,) = parse_message_list(parse_html(html))
        assert summary.id == "x9"
        assert summary.sender == "Newsletter"
        assert summary.subject is None


class TestParseMessage:
    def test_detail_fields(self):
        html = message_page("Your code", "bob@example.net", "2026-10-18 12:05", "Use code 482913 to log in")
        message = parse_message(parse_html(html), "m2")
        assert message == MailMessage(
            id="m2",
            sender="bob@example.net",
            subject="Your code",
            timestamp="2026-10-18 12:05",
            body="Use code 482913 to log in",
        )

    def test_missing_body(self):
        assert parse_message(parse_html("<html></html>"), "m1").body == ""


class TestInbox:
    def test_refresh_replaces_snapshot(self, started_client, adapter):
        adapter.add("GET", REFRESH, Reply(200, inbox_page(ROWS)), Reply(200, inbox_page(ROWS[1:])))

        first = started_client.inbox.refresh()
        second = started_client.inbox.refresh()

        assert [m.id for m in first] == ["m2", "m1"]
        assert [m.id for m in second] == ["m1"]
        assert started_client.inbox.messages is second

    def test_failed_refresh_keeps_snapshot(self, started_client, adapter):
        adapter.add("GET", REFRESH, Reply(200, inbox_page(ROWS)), Reply(500, "oops"))
        snapshot = started_client.inbox.refresh()
        with pytest.raises(TransportError):
            started_client.inbox.refresh()
        assert started_client.inbox.messages == snapshot

    def test_read(self, started_client, adapter):
        adapter.add("GET", f"{BASE}/en/view/m2", Reply(200, message_page("Your code", "bob@example.net", "12:05", "code: AB12CD")))
        message = started_client.inbox.read("m2")
        assert message.subject == "Your code"
        assert message.body == "code: AB12CD"

    def test_wait_returns_newest_message(self, started_client, adapter):
        adapter.add("GET", REFRESH, Reply(200, inbox_page([])), Reply(200, inbox_page(ROWS[1:])))
        naps = []

        summary = started_client.inbox.wait_for_message(timeout=60, interval=5, sleep=naps.append, clock=lambda: 0.0)

        assert summary.id == "m1"
        assert naps == [5]

    def test_wait_times_out(self, started_client, adapter):
        adapter.add("GET", REFRESH, Reply(200, inbox_page([])))
        ticks = iter([0.0, 0.0, 5.0, 10.0])
        naps = []

        summary = started_client.inbox.wait_for_message(timeout=10, interval=5, sleep=naps.append, clock=lambda: next(ticks))

        assert summary is None
        assert adapter.count("GET", REFRESH) == 3
        assert naps == [5, 5]

    def test_wait_ignores_mail_already_in_inbox(self, started_client, adapter):
        adapter.add("GET", REFRESH, Reply(200, inbox_page(ROWS[1:])), Reply(200, inbox_page(ROWS)))
        naps = []

        summary = started_client.inbox.wait_for_message(timeout=60, interval=5, sleep=naps.append, clock=lambda: 0.0)

        assert summary.id == "m2"
        assert naps == [5]
        assert adapter.count("GET", REFRESH) == 2
