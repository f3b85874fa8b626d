from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional, TextIO, cast

import structlog
from structlog.dev import ConsoleRenderer
from structlog.stdlib import BoundLogger
from structlog.types import Processor

from flexiring.version import __version__ as FLEXIRING_VERSION


def _coerce_level(level: str | int) -> int:
    """Translate a string/int level into the numeric logging level."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, str):
            raise ValueError(f"Invalid log level: {level}")
        return int(resolved)
    return int(level)


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def configure_logging(
    level: str | int = "INFO",
    json_output: bool = True,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Route structlog through the stdlib logging module.

    Args:
        level: Root log level name or number.
        json_output: Render JSON lines instead of the console format.
        stream: Destination stream (default: stderr, so CLI output stays clean).
    """
    numeric_level = _coerce_level(level)
    renderer = structlog.processors.JSONRenderer() if json_output else ConsoleRenderer()
    shared_processors = _shared_processors()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)
    logging.captureWarnings(True)


def configure_logging_from_env() -> None:
    """Configure logging from ``FLEXIRING_LOG_LEVEL`` and ``FLEXIRING_LOG_JSON``."""
    configure_logging(
        level=os.getenv("FLEXIRING_LOG_LEVEL", "INFO"),
        json_output=os.getenv("FLEXIRING_LOG_JSON", "true").lower() == "true",
    )


def get_logger(name: str) -> BoundLogger:
    """Return a structlog logger with service name and version bound."""
    service_name = os.getenv("SERVICE_NAME", "flexiring")
    version = os.getenv("APP_VERSION", FLEXIRING_VERSION)
    # initial values keep the proxy lazy so configure_logging applies later
    return cast(
        BoundLogger,
        structlog.get_logger(name, service_name=service_name, version=version),
    )


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind contextual data (e.g. ring name, request id) for a block."""
    if not kwargs:
        yield
        return
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield
