"""Bounded retry for atomic store operations under contention."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError

from orcasmart.catalog.errors import TransientStoreError
from orcasmart.config import settings
from orcasmart.infra.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# PostgreSQL serialization_failure and deadlock_detected
_TRANSIENT_SQLSTATES = frozenset({"40001", "40P01"})
_TRANSIENT_MESSAGES = ("database is locked", "database table is locked")


def is_transient(exc: BaseException) -> bool:
    """Tell whether a store error is caused by contention and worth retrying."""
    if not isinstance(exc, DBAPIError):
        return False
    if exc.connection_invalidated:
        return True

    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _TRANSIENT_SQLSTATES:
        return True

    message = str(orig).lower()
    return any(fragment in message for fragment in _TRANSIENT_MESSAGES)


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    name: str,
    attempts: int | None = None,
    backoff_seconds: float | None = None,
) -> T:
    """Run ``operation`` and retry it on transient store errors.

    Each attempt must open its own transaction so a retry starts from a
    clean state.

    Args:
        operation: Zero-argument coroutine factory
        name: Operation name for logs
        attempts: Maximum attempts (defaults to settings)
        backoff_seconds: Base delay, doubled after each failure

    Returns:
        The operation result

    Raises:
        TransientStoreError: If every attempt failed with a transient error
    """
    attempts = attempts or settings.store_retry_attempts
    delay = settings.store_retry_backoff_seconds if backoff_seconds is None else backoff_seconds

    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except DBAPIError as e:
            if not is_transient(e):
                raise
            if attempt == attempts:
                logger.error(
                    "Store operation failed after retries",
                    operation=name,
                    attempts=attempts,
                    error=str(e),
                )
                raise TransientStoreError(
                    f"{name} failed after {attempts} attempts: {e.orig}"
                ) from e

            logger.warning(
                "Transient store error, retrying",
                operation=name,
                attempt=attempt,
                error=str(e),
            )
            await asyncio.sleep(delay * (2 ** (attempt - 1)))

    raise AssertionError("unreachable")
