"""Bounded retry for idempotent store reads.

Only reads are eligible: an append or a state transition is never replayed,
because its preconditions must be re-validated from scratch by the caller.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError

from config.settings import settings
from src.cw_common.errors import TransientStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient(exc: BaseException) -> bool:
    """Lock timeouts, serialization failures, dropped connections."""
    if isinstance(exc, TransientStoreError):
        return True
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


async def retry_read(
    func: Callable[[], Awaitable[T]],
    max_attempts: int | None = None,
    initial_delay: float | None = None,
    max_delay: float = 1.0,
    reset: Callable[[], Awaitable[None]] | None = None,
) -> T:
    """Await *func* up to *max_attempts* times with jittered exponential backoff.

    Non-transient exceptions propagate immediately. After the last attempt the
    failure is re-raised as TransientStoreError so no driver detail leaks out.

    *reset* runs before each retry. Pass the session's rollback: PostgreSQL
    rejects every statement in a transaction after one has failed.
    """
    attempts = max_attempts if max_attempts is not None else settings.STORE_READ_RETRY_ATTEMPTS
    delay = initial_delay if initial_delay is not None else settings.STORE_READ_RETRY_DELAY
    name = getattr(func, "__name__", "read")

    for attempt in range(1, attempts + 1):
        try:
            return await func()
        except Exception as e:
            if not is_transient(e):
                raise
            if attempt >= attempts:
                logger.error("Max read attempts (%d) reached for %s", attempts, name)
                raise TransientStoreError() from e
            actual_delay = delay * (0.5 + random.random())
            logger.warning(
                "Read attempt %d/%d failed for %s (%s), retrying in %.3fs",
                attempt,
                attempts,
                name,
                type(e).__name__,
                actual_delay,
            )
            if reset is not None:
                await reset()
            await asyncio.sleep(actual_delay)
            delay = min(delay * 2, max_delay)

    raise TransientStoreError()
