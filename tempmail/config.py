"""Configuration loaded from environment variables.

Every field can be overridden through its env var, e.g.
``TEMPMAIL_MAX_TRIES=3`` or ``TEMPMAIL_PROXY=http://127.0.0.1:8080``.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/75.0.3770.142 Safari/537.36"
)


class ClientConfig(BaseSettings):
    """Target site and challenge handling settings."""

    model_config = {"env_prefix": "TEMPMAIL_"}

    base_url: str = Field(default="https://temp-mail.org", description="Scheme and host of the service")
    language: str = Field(default="en", description="Language segment of every page path")
    max_tries: int = Field(default=5, ge=1, description="Maximum sends of one request while a challenge persists")
    clearance_delay_seconds: float = Field(
        default=3.0,
        ge=0,
        description="Wait before resending a request after a challenge was solved",
    )
    timeout_seconds: float = Field(default=30.0, gt=0, description="HTTP request timeout")
    proxy: Optional[str] = Field(default=None, description="Outbound proxy URL")
    user_agent: str = Field(default=DEFAULT_USER_AGENT)


class LoggingConfig(BaseSettings):
    model_config = {"env_prefix": "TEMPMAIL_LOG_"}

    json_logs: bool = Field(default=False, description="Emit JSON lines instead of console output")
    level: str = Field(default="INFO")


class WebConfig(BaseSettings):
    """Settings of the Flask HTTP API."""

    model_config = {"env_prefix": "TEMPMAIL_WEB_"}

    secret_key: str = Field(default="dev-secret-key-change-me", description="Flask session signing key")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=5000)
    debug: bool = Field(default=False)
    max_clients: int = Field(default=100, ge=1, description="Live mailbox clients kept before the oldest is closed")
