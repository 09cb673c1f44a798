"""HTTP transports that clear anti-bot challenges transparently.

Both variants send a request, hand a detected challenge to the configured
solver, store the clearance cookies and resend the request, at most
``max_tries`` times in total.
"""

import asyncio
import inspect
import time
from typing import Any, Callable, Dict, Mapping, Optional

import httpx
import requests
import structlog

from .challenge import Challenge, ChallengeSolver, is_challenge
from .config import ClientConfig
from .errors import ChallengeUnresolvedError, TransportError
from .models import Session, replace_cookie
from .urls import default_headers

logger = structlog.get_logger(__name__)

Detector = Callable[[int, Mapping[str, Any], str], bool]


class _ChallengeLoop:
    """State and decisions shared by the blocking and async transports."""

    def __init__(
        self,
        session: Session,
        config: ClientConfig,
        solver: Optional[ChallengeSolver] = None,
        detector: Detector = is_challenge,
    ):
        self._session = session
        self._solver = solver
        self._detector = detector
        self._max_tries = config.max_tries
        self._delay = config.clearance_delay_seconds
        self._timeout = config.timeout_seconds
        self._user_agent = config.user_agent
        self._headers = default_headers(session.host, config.user_agent)

    def _needs_clearance(self, response: Any, url: str, attempt: int) -> bool:
        """False for a normal response; raises when the challenge cannot be retried."""
        if not self._detector(response.status_code, response.headers, response.text):
            return False
        logger.warning("challenge_detected", url=url, status_code=response.status_code, attempt=attempt)
        if self._solver is None:
            raise ChallengeUnresolvedError(
                f"challenge received from {url} and no solver is configured",
                response=response,
                attempts=attempt,
            )
        if attempt >= self._max_tries:
            logger.error("challenge_unresolved", url=url, attempts=attempt)
            raise ChallengeUnresolvedError(
                f"challenge from {url} still present after {attempt} attempts",
                response=response,
                attempts=attempt,
            )
        return True

    def _challenge_of(self, response: Any, url: str) -> Challenge:
        return Challenge(
            url=url,
            status_code=response.status_code,
            body=response.text,
            headers=dict(response.headers),
            user_agent=self._user_agent,
        )

    def _solver_failed(self, exc: Exception, response: Any, url: str, attempt: int) -> ChallengeUnresolvedError:
        logger.error("challenge_solver_failed", url=url, attempt=attempt, error=str(exc))
        return ChallengeUnresolvedError(f"challenge solver failed for {url}: {exc}", response=response, attempts=attempt)

    def _apply_clearance(self, clearance: Optional[Mapping[str, str]]) -> None:
        for name, value in (clearance or {}).items():
            replace_cookie(self._session.cookies, name, value, self._session.host)
        logger.info("challenge_cleared", cookies=sorted(clearance or {}), delay=self._delay)


class ChallengeTransport(_ChallengeLoop):
    """Blocking transport built on a ``requests.Session``."""

    def __init__(
        self,
        session: Session,
        config: ClientConfig,
        solver: Optional[ChallengeSolver] = None,
        *,
        detector: Detector = is_challenge,
        sleep: Callable[[float], None] = time.sleep,
        http: Optional[requests.Session] = None,
    ):
        super().__init__(session, config, solver, detector)
        self._sleep = sleep
        self._http = http if http is not None else requests.Session()
        self._http.cookies = session.cookies
        self._http.headers.update(self._headers)
        if config.proxy:
            self._http.proxies = {"http": config.proxy, "https": config.proxy}

    def execute(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        attempt = 0
        while True:
            attempt += 1
            response = self._send(method, url, headers, data)
            if not self._needs_clearance(response, url, attempt):
                return response
            try:
                clearance = self._solver.solve(self._challenge_of(response, url), self._session.cookies)
            except Exception as exc:
                raise self._solver_failed(exc, response, url, attempt) from exc
            self._apply_clearance(clearance)
            self._sleep(self._delay)

    def _send(self, method, url, headers, data) -> requests.Response:
        try:
            return self._http.request(method, url, headers=headers, data=data, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.error("request_failed", method=method, url=url, error=str(exc))
            raise TransportError(f"{method} {url} failed: {exc}") from exc

    def close(self) -> None:
        self._http.close()


class AsyncChallengeTransport(_ChallengeLoop):
    """Non-blocking transport built on ``httpx.AsyncClient``.

    Cancelling the awaiting task aborts the in-flight request or the
    clearance delay, and no further attempt is made.
    """

    def __init__(
        self,
        session: Session,
        config: ClientConfig,
        solver: Optional[ChallengeSolver] = None,
        *,
        detector: Detector = is_challenge,
        sleep: Callable[[float], Any] = asyncio.sleep,
        http: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(session, config, solver, detector)
        self._sleep = sleep
        if http is None:
            http = httpx.AsyncClient(
                timeout=httpx.Timeout(config.timeout_seconds),
                follow_redirects=True,
                proxy=config.proxy,
            )
        self._http = http
        self._http.cookies = session.cookies
        self._http.headers.update(self._headers)

    async def execute(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        attempt = 0
        while True:
            attempt += 1
            response = await self._send(method, url, headers, data)
            if not self._needs_clearance(response, url, attempt):
                return response
            try:
                clearance = self._solver.solve(self._challenge_of(response, url), self._session.cookies)
                if inspect.isawaitable(clearance):
                    clearance = await clearance
            except Exception as exc:
                raise self._solver_failed(exc, response, url, attempt) from exc
            self._apply_clearance(clearance)
            await self._sleep(self._delay)

    async def _send(self, method, url, headers, data) -> httpx.Response:
        try:
            return await self._http.request(method, url, headers=headers, data=data)
        except httpx.HTTPError as exc:
            logger.error("request_failed", method=method, url=url, error=str(exc))
            raise TransportError(f"{method} {url} failed: {exc}") from exc

    async def aclose(self) -> None:
        await self._http.aclose()
