"""
Logging configuration.

Services log through structlog (`structlog.get_logger()` with keyword
context). Request-scoped values such as the request id are bound with
`structlog.contextvars` by the middleware and merged into every event.

Usage:
    from flagsync.core.logging import configure_logging

    configure_logging(settings)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from flagsync.core.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure stdlib logging and structlog from LOG_LEVEL / LOG_FORMAT."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    # Third-party stdlib loggers (uvicorn, httpx) share the same stream
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    renderer: Any
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
