"""SimulatedTransactionSubmitter — stands in for a wallet/contract call.

submit() returns a pending handle with a fresh 0x-prefixed hash and has no
side effects, so a caller that rolls back simply drops the handle. start()
is called once the caller has committed: it caches the pending handle and
spawns a background asyncio task that sleeps a bounded random delay, then
resolves the transaction to confirmed, or to failed with probability
failure_rate. The outcome is written to the status cache and handed to
on_resolved.

Nothing here is retried: a failed simulated transaction stays failed.
The rng and sleep function are injectable so tests can run deterministically.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import replace

from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import TransactionKind, TransactionStatus
from src.pm_common.errors import AppError
from src.pm_transaction.domain.models import TransactionHandle, TransactionPayload
from src.pm_transaction.domain.repository import TransactionStatusCacheProtocol

logger = logging.getLogger(__name__)

ResolvedCallback = Callable[[TransactionHandle], Awaitable[None]]

SIMULATED_FAILURE_REASON = "Simulated chain rejection"


class SimulatedTransactionSubmitter:
    def __init__(
        self,
        cache: TransactionStatusCacheProtocol,
        contract_address: str,
        min_delay: float = 1.0,
        max_delay: float = 4.0,
        failure_rate: float = 0.05,
        rng: random.Random | None = None,
        on_resolved: ResolvedCallback | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if not (0 <= min_delay <= max_delay):
            raise ValueError(f"Invalid delay bounds: [{min_delay}, {max_delay}]")
        if not (0.0 <= failure_rate <= 1.0):
            raise ValueError(f"failure_rate must be within [0, 1], got {failure_rate}")
        self._cache = cache
        self._contract_address = contract_address
        self._min_delay = min_delay
        self._max_delay = max_delay
        self._failure_rate = failure_rate
        self._rng = rng or random.Random()
        self._on_resolved = on_resolved
        self._sleep = sleep
        self._pending: set[asyncio.Task[TransactionHandle]] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def _new_tx_hash(self) -> str:
        return f"0x{self._rng.getrandbits(256):064x}"

    async def submit(
        self, kind: TransactionKind, payload: TransactionPayload
    ) -> TransactionHandle:
        handle = TransactionHandle(
            tx_hash=self._new_tx_hash(),
            kind=kind.value,
            from_address=payload.from_address,
            to_address=payload.to_address or self._contract_address,
            amount=payload.amount,
            status=TransactionStatus.PENDING.value,
            timestamp=utc_now(),
            payload=payload,
        )
        logger.debug("Transaction prepared: kind=%s hash=%s", handle.kind, handle.tx_hash)
        return handle

    async def start(self, handle: TransactionHandle) -> None:
        """Begin resolving a handle whose log row has been committed."""
        try:
            await self._cache.put(handle)
        except AppError:
            # The committed log row still reports pending until resolution lands.
            logger.warning("Status cache unavailable for %s", handle.tx_hash)

        task = asyncio.create_task(self._resolve(handle))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

        logger.info(
            "Transaction submitted: kind=%s hash=%s from=%s amount=%s",
            handle.kind, handle.tx_hash, handle.from_address, handle.amount,
        )

    async def poll(self, tx_hash: str) -> TransactionHandle | None:
        return await self._cache.get(tx_hash)

    async def _resolve(self, handle: TransactionHandle) -> TransactionHandle:
        await self._sleep(self._rng.uniform(self._min_delay, self._max_delay))

        failed = self._rng.random() < self._failure_rate
        resolved = replace(
            handle,
            status=(TransactionStatus.FAILED if failed else TransactionStatus.CONFIRMED).value,
            resolved_at=utc_now(),
            error=SIMULATED_FAILURE_REASON if failed else None,
        )
        try:
            await self._cache.put(resolved)
            if self._on_resolved is not None:
                await self._on_resolved(resolved)
        except AppError:
            # Background task: nobody awaits it, so the failure is reported here.
            logger.exception("Failed to record resolution of %s", handle.tx_hash)
            return resolved

        log = logger.warning if failed else logger.info
        log("Transaction %s: kind=%s hash=%s", resolved.status, resolved.kind, resolved.tx_hash)
        return resolved

    async def drain(self) -> list[TransactionHandle]:
        """Wait for every in-flight transaction to resolve."""
        if not self._pending:
            return []
        return list(await asyncio.gather(*self._pending))

    async def close(self) -> None:
        """Cancel in-flight resolutions (shutdown); their handles stay pending."""
        for task in list(self._pending):
            task.cancel()
        await asyncio.gather(*self._pending, return_exceptions=True)
        self._pending.clear()
