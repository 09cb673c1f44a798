"""Session state and mailbox data types."""

from dataclasses import dataclass, field
from typing import List, Optional

from requests.cookies import RequestsCookieJar

CSRF_COOKIE = "csrf"
MAIL_COOKIE = "mail"


@dataclass(frozen=True)
class MailSummary:
    """One row of the inbox list."""

    id: str
    sender: Optional[str] = None
    subject: Optional[str] = None
    timestamp: Optional[str] = None


@dataclass(frozen=True)
class MailMessage:
    id: str
    sender: Optional[str] = None
    subject: Optional[str] = None
    timestamp: Optional[str] = None
    body: str = ""


@dataclass
class Session:
    """Identity of one temporary mailbox.

    Owned by a single client; the transport writes clearance cookies into
    ``cookies`` and the client updates everything else.
    """

    host: str
    cookies: RequestsCookieJar = field(default_factory=RequestsCookieJar)
    email: Optional[str] = None
    available_domains: Optional[List[str]] = None

    @property
    def csrf_token(self) -> Optional[str]:
        return get_cookie(self.cookies, CSRF_COOKIE)


def get_cookie(jar: RequestsCookieJar, name: str) -> Optional[str]:
    # jar.get() raises when the same name is stored for several domains
    for cookie in jar:
        if cookie.name == name:
            return cookie.value
    return None


def replace_cookie(jar: RequestsCookieJar, name: str, value: str, domain: str) -> None:
    """Set ``name`` on ``domain``, dropping any copy stored for other domains."""
    for cookie in list(jar):
        if cookie.name == name:
            jar.clear(cookie.domain, cookie.path, cookie.name)
    jar.set(name, value, domain=domain, path="/")
