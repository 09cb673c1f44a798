"""Shared fixtures: a scripted requests adapter and page builders."""

from __future__ import annotations

from http.client import HTTPMessage
from types import SimpleNamespace

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from tempmail.client import TempMailClient
from tempmail.config import ClientConfig

BASE = "https://temp-mail.org"
MAIN = f"{BASE}/en/"
CHANGE = f"{BASE}/en/option/change/"
DELETE = f"{BASE}/en/option/delete/"
REFRESH = f"{BASE}/en/option/refresh/"

CHALLENGE_BODY = (
    "<html><head><title>Just a moment...</title></head><body>"
    '<script>window._cf_chl_opt={cvId: "2", cType: "managed"};</script>'
    "</body></html>"
)
CHALLENGE_HEADERS = {"Server": "cloudflare", "Content-Type": "text/html"}


def main_page(email: str) -> str:
    return (
        "<html><body><form>"
        f'<input id="mail" type="text" class="emailbox-input" value="{email}" readonly>'
        "</form></body></html>"
    )


def change_page(domains: list[str]) -> str:
    options = "".join(f'<option value="{d}">{d}</option>' for d in domains)
    return f'<html><body><form><select id="domain" name="domain">{options}</select></form></body></html>'


def inbox_page(rows: list[dict]) -> str:
    items = []
    for row in rows:
        items.append(
            "<li>"
            f'<div class="col-box"><a class="viewLink title-subject" href="{BASE}/en/view/{row["id"]}">'
            f'<span class="inboxSenderName">{row.get("name", "")}</span>'
            f'<span class="inboxSenderEmail">{row["sender"]}</span></a></div>'
            f'<div class="col-box"><a class="viewLink" href="{BASE}/en/view/{row["id"]}">'
            f'<span class="inboxSubject subject-title">{row["subject"]}</span></a></div>'
            f'<div class="col-box"><span class="inboxDate">{row.get("date", "")}</span></div>'
            "</li>"
        )
    if not items:
        items.append('<li class="hide"><span>Your inbox is empty</span></li>')
    return f'<html><body><div class="inbox-dataList" id="mails"><ul>{"".join(items)}</ul></div></body></html>'


def message_page(subject: str, sender: str, date: str, body: str) -> str:
    return (
        '<html><body><div class="inbox-data-content">'
        f'<div class="user-data-subject"><h4>{subject}</h4></div>'
        f'<div class="user-data-from"><span class="from-name">Sender</span><span class="from-email">{sender}</span></div>'
        f'<div class="user-data-time-data">{date}</div>'
        f'<div class="inbox-data-content-intro"><p>{body}</p></div>'
        "</div></body></html>"
    )


class Reply:
    """A canned response; ``cookies`` are raw Set-Cookie header values."""

    def __init__(self, status: int = 200, body: str = "", headers: dict | None = None, cookies: list | None = None):
        self.status = status
        self.body = body
        self.headers = headers or {"Content-Type": "text/html"}
        self.cookies = cookies or []

    def build(self, request: requests.PreparedRequest) -> requests.Response:
        response = requests.Response()
        response.status_code = self.status
        response.headers = CaseInsensitiveDict(self.headers)
        response._content = self.body.encode("utf-8")
        response._content_consumed = True
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        response.reason = "OK" if self.status < 400 else "Error"
        message = HTTPMessage()
        for cookie in self.cookies:
            message["Set-Cookie"] = cookie
        response.raw = SimpleNamespace(_original_response=SimpleNamespace(msg=message))
        return response


def challenge_reply() -> Reply:
    return Reply(503, CHALLENGE_BODY, CHALLENGE_HEADERS)


class ScriptedAdapter(BaseAdapter):
    """Serves replies per (method, url); the last reply of a route repeats."""

    def __init__(self):
        super().__init__()
        self.routes: dict[tuple[str, str], list[Reply]] = {}
        self.requests: list[requests.PreparedRequest] = []

    def add(self, method: str, url: str, *replies: Reply) -> None:
        self.routes.setdefault((method, url), []).extend(replies)

    def send(self, request, **kwargs):
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url))
        if not queue:
            raise requests.ConnectionError(f"no route for {request.method} {request.url}")
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        return reply.build(request)

    def close(self):
        pass

    def count(self, method: str, url: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url == url)


class RecordingSolver:
    def __init__(self, clearance: dict | None = None, error: Exception | None = None):
        self.clearance = clearance if clearance is not None else {"cf_clearance": "cleared-token"}
        self.error = error
        self.challenges = []

    def solve(self, challenge, cookies):
        self.challenges.append(challenge)
        if self.error is not None:
            raise self.error
        return self.clearance


@pytest.fixture
def adapter() -> ScriptedAdapter:
    return ScriptedAdapter()


@pytest.fixture
def http_factory(adapter: ScriptedAdapter):
    def _make() -> requests.Session:
        http = requests.Session()
        http.trust_env = False
        http.mount("https://", adapter)
        http.mount("http://", adapter)
        return http

    return _make


@pytest.fixture
def sleeps() -> list:
    return []


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(base_url=BASE, language="en", max_tries=5, clearance_delay_seconds=3.0)


@pytest.fixture
def client_factory(config: ClientConfig, http_factory, sleeps: list):
    def _make(solver=None) -> TempMailClient:
        return TempMailClient(solver, config=config, sleep=sleeps.append, http_factory=http_factory)

    return _make


@pytest.fixture
def client(client_factory) -> TempMailClient:
    return client_factory()


@pytest.fixture
def started_client(client: TempMailClient, adapter: ScriptedAdapter) -> TempMailClient:
    adapter.add("GET", MAIN, Reply(200, main_page("abc123@example.com"), cookies=["csrf=tok123; Path=/"]))
    client.start_session()
    return client
