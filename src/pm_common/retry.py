"""Caller-side bounded retry for StoreUnavailableError.

Only StoreUnavailableError is retried; every other AppError is a domain
decision and propagates on the first attempt. The core never falls back to
cached or fabricated data when the store stays down.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from config.settings import settings
from src.pm_common.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_store_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int | None = None,
    initial_delay: float | None = None,
    max_delay: float | None = None,
) -> T:
    """Run ``operation`` retrying StoreUnavailableError with exponential backoff."""
    attempts = max_attempts or settings.STORE_RETRY_ATTEMPTS
    delay = settings.STORE_RETRY_INITIAL_DELAY if initial_delay is None else initial_delay
    ceiling = settings.STORE_RETRY_MAX_DELAY if max_delay is None else max_delay

    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except StoreUnavailableError as e:
            if attempt == attempts:
                logger.error("Store still unavailable after %d attempts", attempts)
                raise
            logger.warning(
                "Store unavailable (attempt %d/%d): %s. Retrying in %.2fs",
                attempt, attempts, e.message, delay,
            )
            await asyncio.sleep(delay)
            delay = min(delay * 2, ceiling)
    raise AssertionError("unreachable")  # pragma: no cover
