"""Redis-backed status cache for in-flight simulated transactions.

Key pattern: "tx:{tx_hash}" -> JSON snapshot of the TransactionHandle,
expiring after TX_STATUS_TTL_SECONDS. The cache is what poll() reads; the
user_transactions table remains the durable history.
"""

import json
from collections.abc import Awaitable, Callable
from datetime import datetime
from decimal import Decimal

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from src.pm_common.errors import StoreUnavailableError
from src.pm_transaction.domain.models import TransactionHandle

_KEY_PREFIX = "tx:"


def _handle_to_json(handle: TransactionHandle) -> str:
    return json.dumps({
        "tx_hash": handle.tx_hash,
        "kind": handle.kind,
        "from_address": handle.from_address,
        "to_address": handle.to_address,
        "amount": str(handle.amount),
        "status": handle.status,
        "timestamp": handle.timestamp.isoformat(),
        "resolved_at": handle.resolved_at.isoformat() if handle.resolved_at else None,
        "error": handle.error,
    })


def _handle_from_json(raw: str) -> TransactionHandle:
    data = json.loads(raw)
    return TransactionHandle(
        tx_hash=data["tx_hash"],
        kind=data["kind"],
        from_address=data["from_address"],
        to_address=data["to_address"],
        amount=Decimal(data["amount"]),
        status=data["status"],
        timestamp=datetime.fromisoformat(data["timestamp"]),
        resolved_at=datetime.fromisoformat(data["resolved_at"]) if data["resolved_at"] else None,
        error=data["error"],
    )


class RedisTransactionStatusCache:
    def __init__(
        self,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]],
        ttl_seconds: int,
    ) -> None:
        self._redis_factory = redis_factory
        self._ttl = ttl_seconds

    async def put(self, handle: TransactionHandle) -> None:
        redis = await self._redis_factory()
        try:
            await redis.set(_KEY_PREFIX + handle.tx_hash, _handle_to_json(handle), ex=self._ttl)
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise StoreUnavailableError("Transaction status cache unavailable") from e

    async def get(self, tx_hash: str) -> TransactionHandle | None:
        redis = await self._redis_factory()
        try:
            raw = await redis.get(_KEY_PREFIX + tx_hash)
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise StoreUnavailableError("Transaction status cache unavailable") from e
        return _handle_from_json(raw) if raw else None
