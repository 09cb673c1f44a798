"""Log output for the CLI and the HTTP API.

Events from this package are structlog events. Records from the libraries
underneath (urllib3, httpx, werkzeug) are plain stdlib records; both go
through the same processors and end up on one handler, so a run prints a
single consistent stream.
"""

import logging
import sys
from typing import IO, List, Optional

import structlog

from .config import LoggingConfig

# Chatty at INFO; only shown when the configured level is DEBUG.
LIBRARY_LOGGERS = ("urllib3", "httpx", "httpcore", "werkzeug")

_PRE_CHAIN: List[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def setup_logging(config: Optional[LoggingConfig] = None, *, stream: Optional[IO[str]] = None) -> logging.Handler:
    """Routes every log record to ``stream`` (stderr by default).

    Stderr keeps the interactive menu on stdout readable. Any handler already
    on the root logger is replaced, so calling this twice is harmless.
    Returns the installed handler.
    """
    config = config or LoggingConfig()
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {config.level!r}")

    renderer = (
        structlog.processors.JSONRenderer()
        if config.json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(level)

    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
    return handler
