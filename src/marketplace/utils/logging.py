"""Logging configuration for the marketplace.

Everything goes to stdout through structlog. Lines carry whatever request
context the API has bound (principal, role, path). Production and staging
emit JSON lines; other environments get the colored console renderer.
"""

import logging
import os
import sys

import structlog

logger = structlog.get_logger(__name__)

# Suppress noisy library loggers
logging.getLogger("protean").setLevel(logging.WARNING)

_JSON_ENVIRONMENTS = ("production", "staging")


def _environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def configure_logging(level: str | None = None) -> None:
    """Route stdlib and structlog output to stdout at ``level``.

    ``level`` defaults to ``LOG_LEVEL``, else DEBUG in development and INFO
    everywhere else.
    """
    environment = _environment()
    level = (level or os.getenv("LOG_LEVEL") or ("DEBUG" if environment == "development" else "INFO")).upper()

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if environment in _JSON_ENVIRONMENTS:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.RichTracebackFormatter(max_frames=2))
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logger.debug("Logging configured", environment=environment, level=level)


def bind_request_context(**kwargs) -> None:
    """Attach ``kwargs`` to every log line until the request ends."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
