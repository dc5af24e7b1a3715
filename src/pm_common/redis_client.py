"""Redis connection for the transaction status cache.

Pools, positions and the transaction log live in PostgreSQL. Redis only
holds short-lived tx:{hash} status snapshots; resolved statuses are also
written to user_transactions.
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from config.settings import settings
from src.pm_common.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Shared client; the underlying connection pool is created lazily."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )
    return _client


async def check_redis() -> None:
    """Startup check. Raises StoreUnavailableError if Redis does not answer PING."""
    client = await get_redis()
    try:
        await client.ping()
    except (RedisConnectionError, RedisTimeoutError) as e:
        raise StoreUnavailableError("Redis unavailable") from e
    logger.info("Redis reachable at %s", settings.REDIS_URL.rsplit("@", 1)[-1])


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
