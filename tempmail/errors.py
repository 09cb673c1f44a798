"""Error kinds raised by the temp mail client."""

from typing import Any, Optional


class TempMailError(Exception):
    """Base class for every error raised by this package."""


class NotStartedError(TempMailError):
    """An operation was attempted before start_session()."""

    def __init__(self, operation: str):
        super().__init__(f"{operation} requires an active session, call start_session() first")
        self.operation = operation


class ProvisioningError(TempMailError):
    """The provisioning page did not contain an address."""


class ChangeRejectedError(TempMailError):
    """The service did not confirm the requested address."""


class DeleteFailedError(TempMailError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ChallengeUnresolvedError(TempMailError):
    """The anti-bot challenge could not be cleared.

    ``response`` is the last challenge response received and ``attempts`` the
    number of times the request was sent.
    """

    def __init__(self, message: str, response: Any = None, attempts: int = 0):
        super().__init__(message)
        self.response = response
        self.attempts = attempts


class TransportError(TempMailError):
    """Network failure or an unexpected, non-challenge HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
