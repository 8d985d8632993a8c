"""Structured logging configuration using structlog.

Every event carries the service name, version and environment. Request
handlers bind the caller's owner id into the context, so catalog events
(suggestions, rule writes, SKU allocations) can be traced per owner
without passing it to every ``logger`` call.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from orcasmart import __version__
from orcasmart.config import settings

_NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "asyncpg")


def add_service_context(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Stamp service identity on an event without overriding bound values."""
    event_dict.setdefault("service", settings.log_service_name)
    event_dict.setdefault("version", __version__)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def bind_request_context(owner_id: str | None = None, **values: Any) -> None:
    """Bind per-request values (owner id, path) for the current task."""
    context = {k: v for k, v in values.items() if v is not None}
    if owner_id:
        context["owner_id"] = owner_id
    structlog.contextvars.clear_contextvars()
    if context:
        structlog.contextvars.bind_contextvars(**context)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def setup_logging() -> None:
    """Configure structlog for the application.

    JSON lines in staging/prod, coloured console output in dev. Standard
    library logging goes to stdout at the same level.
    """
    use_json = settings.log_json and settings.environment != "dev"
    level = logging.getLevelName(settings.log_level)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_context,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if use_json:
        renderer: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=[*shared_processors, *renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (usually __name__)
        **initial_context: Initial context to bind to the logger

    Returns:
        Bound structlog logger
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
