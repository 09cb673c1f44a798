"""Client for temporary mailbox sites protected by an anti-bot challenge layer."""

from .aio import AsyncTempMailClient
from .challenge import Challenge, ChallengeSolver, is_challenge
from .client import TempMailClient
from .config import ClientConfig
from .errors import (
    ChallengeUnresolvedError,
    ChangeRejectedError,
    DeleteFailedError,
    NotStartedError,
    ProvisioningError,
    TempMailError,
    TransportError,
)
from .models import MailMessage, MailSummary, Session

__all__ = [
    "AsyncTempMailClient",
    "Challenge",
    "ChallengeSolver",
    "ChallengeUnresolvedError",
    "ChangeRejectedError",
    "ClientConfig",
    "DeleteFailedError",
    "MailMessage",
    "MailSummary",
    "NotStartedError",
    "ProvisioningError",
    "Session",
    "TempMailClient",
    "TempMailError",
    "TransportError",
    "is_challenge",
]
