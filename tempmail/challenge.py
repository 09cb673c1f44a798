"""Anti-bot challenge detection and the solver contract."""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, Mapping, Protocol, Union

from requests.cookies import RequestsCookieJar

CHALLENGE_STATUS_CODES = (403, 429, 503)

# Markers found in Cloudflare interstitial pages
CHALLENGE_MARKERS = (
    "cf_chl_opt",
    "cf-chl",
    "jschl_vc",
    "jschl-answer",
    "challenge-platform",
    "cf-browser-verification",
)


@dataclass(frozen=True)
class Challenge:
    """A challenge response handed to a solver."""

    url: str
    status_code: int
    body: str
    headers: Dict[str, str] = field(default_factory=dict)
    user_agent: str = ""


class ChallengeSolver(Protocol):
    """Turns a challenge into clearance cookies.

    Raise any exception to signal that the challenge could not be solved.
    Solvers used with the async transport may return an awaitable.
    """

    def solve(
        self, challenge: Challenge, cookies: RequestsCookieJar
    ) -> Union[Mapping[str, str], Awaitable[Mapping[str, str]]]:
        ...


def is_challenge(status_code: int, headers: Mapping[str, Any], body: str) -> bool:
    """True when a response is an interstitial challenge page."""
    if status_code not in CHALLENGE_STATUS_CODES:
        return False
    if str(headers.get("cf-mitigated", "")).lower() == "challenge":
        return True
    server = str(headers.get("server", "")).lower()
    if not server.startswith("cloudflare"):
        return False
    return any(marker in (body or "") for marker in CHALLENGE_MARKERS)
