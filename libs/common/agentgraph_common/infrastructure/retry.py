"""Retry helper for transient SQLite lock contention."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import OperationalError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_MARKERS = ("database is locked", "database is busy", "sqlite_busy")


def is_transient_lock_error(error: BaseException) -> bool:
    """Return True for SQLite ``locked``/``busy`` errors worth retrying."""
    if not isinstance(error, OperationalError):
        return False
    message = str(error).lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)


async def retry_on_lock(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 0.1,
    operation_name: str = "operation",
) -> T:
    """Run ``operation``, retrying transient lock errors with exponential backoff.

    Waits ``base_delay * 2**attempt`` seconds between attempts. Non-transient
    errors, and the last transient one, propagate unchanged.
    """
    for attempt in range(max_attempts):
        try:
            return await operation()
        except OperationalError as e:
            if not is_transient_lock_error(e) or attempt == max_attempts - 1:
                raise
            delay = base_delay * (2**attempt)
            logger.warning(
                "Transient database lock during %s, retrying",
                operation_name,
                extra={"attempt": attempt + 1, "max_attempts": max_attempts, "delay": delay},
            )
            await asyncio.sleep(delay)
    raise RuntimeError("unreachable")
