"""Tests for pm_common.enums, id_generator and the store_call / retry helpers."""
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from src.pm_common.database import store_call
from src.pm_common.enums import (
    MarketStatus,
    Side,
    TokenClaimStatus,
    TransactionKind,
    TransactionStatus,
)
from src.pm_common.errors import MarketClosedError, StoreUnavailableError
from src.pm_common.id_generator import SnowflakeIdGenerator, generate_id
from src.pm_common.retry import with_store_retry


class TestEnums:
    def test_values_match_db_checks(self) -> None:
        assert [s.value for s in MarketStatus] == ["active", "settled"]
        assert [s.value for s in Side] == ["yes", "no"]
        assert TransactionKind("predict") is TransactionKind.PREDICT
        assert TransactionStatus.PENDING == "pending"
        assert TransactionKind("token_grant") is TransactionKind.TOKEN_GRANT
        assert [s.value for s in TokenClaimStatus] == ["pending", "sent", "failed"]

    def test_opposite_side(self) -> None:
        assert Side.YES.opposite is Side.NO
        assert Side.NO.opposite is Side.YES


class TestSnowflakeIdGenerator:
    def test_unique_ids(self) -> None:
        gen = SnowflakeIdGenerator(worker_id=1)
        ids = {gen.next_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_monotonically_increasing(self) -> None:
        gen = SnowflakeIdGenerator(worker_id=1)
        prev = gen.next_int()
        for _ in range(100):
            current = gen.next_int()
            assert current > prev
            prev = current

    def test_prefix(self) -> None:
        assert generate_id("POS-").startswith("POS-")

    def test_rejects_bad_worker_id(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(worker_id=1024)

    def test_fixed_width_keeps_lexical_order(self) -> None:
        gen = SnowflakeIdGenerator()
        ids = [gen.next_id("MKT-") for _ in range(50)]
        assert len({len(i) for i in ids}) == 1
        assert ids == sorted(ids)

    def test_clock_going_backwards_stays_monotonic(self) -> None:
        ticks = iter([1_800_000_000.0, 1_799_999_999.0, 1_800_000_001.0])
        gen = SnowflakeIdGenerator(clock=lambda: next(ticks))
        first, second, third = gen.next_int(), gen.next_int(), gen.next_int()
        assert first < second < third


class TestStoreCall:
    async def test_operational_error_becomes_store_unavailable(self) -> None:
        with pytest.raises(StoreUnavailableError) as exc_info:
            async with store_call("get_market"):
                raise OperationalError("SELECT 1", {}, Exception("connection refused"))
        assert "get_market" in exc_info.value.message

    async def test_integrity_error_propagates_unchanged(self) -> None:
        with pytest.raises(IntegrityError):
            async with store_call("insert_position"):
                raise IntegrityError("INSERT", {}, Exception("duplicate key"))


class TestWithStoreRetry:
    async def test_returns_first_success(self) -> None:
        op = AsyncMock(return_value=42)
        assert await with_store_retry(op, max_attempts=3, initial_delay=0) == 42
        assert op.await_count == 1

    async def test_retries_store_unavailable_then_succeeds(self) -> None:
        op = AsyncMock(side_effect=[StoreUnavailableError(), StoreUnavailableError(), "ok"])
        with patch("src.pm_common.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            assert await with_store_retry(op, max_attempts=3, initial_delay=0.1, max_delay=1) == "ok"
        assert op.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [0.1, 0.2]

    async def test_gives_up_after_max_attempts(self) -> None:
        op = AsyncMock(side_effect=StoreUnavailableError())
        with patch("src.pm_common.retry.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(StoreUnavailableError):
                await with_store_retry(op, max_attempts=2)
        assert op.await_count == 2

    async def test_domain_errors_are_not_retried(self) -> None:
        op = AsyncMock(side_effect=MarketClosedError("MKT-1"))
        with pytest.raises(MarketClosedError):
            await with_store_retry(op, max_attempts=5, initial_delay=0)
        assert op.await_count == 1
