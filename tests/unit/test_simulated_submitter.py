"""Unit tests for SimulatedTransactionSubmitter.

A seeded random.Random and a recording sleep make resolution deterministic.
"""
import asyncio
import random
import re
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.pm_common.enums import TransactionKind
from src.pm_common.errors import StoreUnavailableError
from src.pm_transaction.domain.models import TransactionHandle, TransactionPayload
from src.pm_transaction.infrastructure.simulated import (
    SIMULATED_FAILURE_REASON,
    SimulatedTransactionSubmitter,
)

CONTRACT = "0x42a2f4e5389f6e7466d97408724dba38812f184e"
HASH_RE = re.compile(r"^0x[0-9a-f]{64}$")


class InMemoryStatusCache:
    def __init__(self) -> None:
        self.items: dict[str, TransactionHandle] = {}

    async def put(self, handle: TransactionHandle) -> None:
        self.items[handle.tx_hash] = handle

    async def get(self, tx_hash: str) -> TransactionHandle | None:
        return self.items.get(tx_hash)


def _payload(**kwargs) -> TransactionPayload:
    defaults = dict(from_address="0xabc", amount=Decimal("10"), market_id="MKT-1", side="yes")
    defaults.update(kwargs)
    return TransactionPayload(**defaults)


def _submitter(cache=None, **kwargs) -> SimulatedTransactionSubmitter:
    defaults = dict(
        min_delay=1.0, max_delay=4.0, failure_rate=0.0,
        rng=random.Random(7), sleep=AsyncMock(),
    )
    defaults.update(kwargs)
    return SimulatedTransactionSubmitter(cache or InMemoryStatusCache(), CONTRACT, **defaults)


async def _send(sub: SimulatedTransactionSubmitter, kind=TransactionKind.PREDICT, **kwargs):
    handle = await sub.submit(kind, _payload(**kwargs))
    await sub.start(handle)
    return handle


class TestConstruction:
    @pytest.mark.parametrize("lo,hi", [(-1.0, 1.0), (3.0, 2.0)])
    def test_rejects_bad_delay_bounds(self, lo, hi) -> None:
        with pytest.raises(ValueError):
            _submitter(min_delay=lo, max_delay=hi)

    @pytest.mark.parametrize("rate", [-0.1, 1.5])
    def test_rejects_bad_failure_rate(self, rate) -> None:
        with pytest.raises(ValueError):
            _submitter(failure_rate=rate)


class TestSubmit:
    async def test_returns_pending_handle_without_side_effects(self) -> None:
        cache = InMemoryStatusCache()
        on_resolved = AsyncMock()
        sub = _submitter(cache, on_resolved=on_resolved)
        handle = await sub.submit(TransactionKind.PREDICT, _payload())

        assert handle.status == "pending"
        assert HASH_RE.match(handle.tx_hash)
        assert handle.to_address == CONTRACT
        assert handle.kind == "predict"
        assert cache.items == {}
        assert sub.pending_count == 0
        assert await sub.drain() == []
        on_resolved.assert_not_awaited()

    async def test_start_caches_pending_handle(self) -> None:
        blocker = asyncio.Event()

        async def never(_: float) -> None:
            await blocker.wait()

        cache = InMemoryStatusCache()
        sub = _submitter(cache, sleep=never)
        handle = await _send(sub)

        assert cache.items[handle.tx_hash].status == "pending"
        assert sub.pending_count == 1
        await sub.close()

    async def test_resolution_waits_for_start(self) -> None:
        events: list[str] = []

        async def on_resolved(handle) -> None:
            events.append("resolved")

        sub = _submitter(min_delay=0.0, max_delay=0.0, sleep=asyncio.sleep, on_resolved=on_resolved)
        handle = await sub.submit(TransactionKind.PREDICT, _payload())
        # log insert and commit I/O happen here in the real flow
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        events.append("committed")
        assert await sub.poll(handle.tx_hash) is None

        await sub.start(handle)
        await sub.drain()

        assert events == ["committed", "resolved"]
        assert (await sub.poll(handle.tx_hash)).status == "confirmed"

    async def test_cache_outage_on_start_still_resolves(self) -> None:
        cache = InMemoryStatusCache()
        cache.put = AsyncMock(side_effect=[StoreUnavailableError(), None])
        on_resolved = AsyncMock()
        sub = _submitter(cache, on_resolved=on_resolved)
        await _send(sub)
        [resolved] = await sub.drain()
        assert resolved.status == "confirmed"
        on_resolved.assert_awaited_once()

    async def test_explicit_recipient_kept(self) -> None:
        sub = _submitter()
        handle = await _send(sub, TransactionKind.CLAIM, to_address="0xdef")
        assert handle.to_address == "0xdef"
        await sub.drain()

    async def test_hashes_are_unique(self) -> None:
        sub = _submitter()
        hashes = {(await _send(sub)).tx_hash for _ in range(50)}
        assert len(hashes) == 50
        await sub.drain()


class TestResolution:
    async def test_confirms_after_bounded_delay(self) -> None:
        sleep = AsyncMock()
        cache = InMemoryStatusCache()
        sub = _submitter(cache, sleep=sleep)
        handle = await _send(sub)

        [resolved] = await sub.drain()

        delay = sleep.await_args.args[0]
        assert 1.0 <= delay <= 4.0
        assert resolved.status == "confirmed"
        assert resolved.error is None
        assert resolved.resolved_at is not None
        assert (await sub.poll(handle.tx_hash)).status == "confirmed"

    async def test_failure_rate_one_always_fails(self) -> None:
        sub = _submitter(failure_rate=1.0)
        await _send(sub, TransactionKind.SETTLE)
        [resolved] = await sub.drain()
        assert resolved.status == "failed"
        assert resolved.error == SIMULATED_FAILURE_REASON

    async def test_seeded_rng_is_reproducible(self) -> None:
        async def outcomes(seed: int) -> dict[str, str]:
            sub = _submitter(rng=random.Random(seed), failure_rate=0.5)
            for _ in range(20):
                await _send(sub)
            return {h.tx_hash: h.status for h in await sub.drain()}

        first = await outcomes(123)
        assert first == await outcomes(123)
        assert {"confirmed", "failed"} <= set(first.values())

    async def test_on_resolved_receives_final_handle(self) -> None:
        on_resolved = AsyncMock()
        sub = _submitter(on_resolved=on_resolved)
        handle = await _send(sub)
        await sub.drain()

        on_resolved.assert_awaited_once()
        reported = on_resolved.await_args.args[0]
        assert reported.tx_hash == handle.tx_hash
        assert reported.status == "confirmed"

    async def test_callback_store_failure_is_logged_not_raised(self, caplog) -> None:
        on_resolved = AsyncMock(side_effect=StoreUnavailableError())
        sub = _submitter(on_resolved=on_resolved)
        await _send(sub)
        [resolved] = await sub.drain()
        assert resolved.status == "confirmed"
        assert "Failed to record resolution" in caplog.text

    async def test_poll_unknown_hash(self) -> None:
        assert await _submitter().poll("0x" + "0" * 64) is None


class TestShutdown:
    async def test_close_cancels_in_flight(self) -> None:
        blocker = asyncio.Event()

        async def never(_: float) -> None:
            await blocker.wait()

        cache = InMemoryStatusCache()
        sub = _submitter(cache, sleep=never)
        handle = await _send(sub)
        await asyncio.sleep(0)
        assert sub.pending_count == 1

        await sub.close()

        assert sub.pending_count == 0
        assert cache.items[handle.tx_hash].status == "pending"

    async def test_drain_with_nothing_pending(self) -> None:
        assert await _submitter().drain() == []
