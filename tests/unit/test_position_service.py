"""Unit tests for PositionApplicationService and PositionResponse."""
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_common.errors import PositionNotFoundError
from src.pm_market.domain.models import Market
from src.pm_position.application.service import PositionApplicationService
from src.pm_position.domain.models import Position, PositionWithMarket

NOW = datetime(2026, 3, 1, tzinfo=UTC)
WALLET = "0xabc"


def _pm(side: str = "yes", status: str = "active", settled_price: str | None = None,
        **position_kwargs) -> PositionWithMarket:
    market = Market(
        id="MKT-1", asset_name="BTC", description=None, strike_price=Decimal("100"),
        expiry_timestamp=NOW - timedelta(hours=1), status=status,
        yes_pool=Decimal("20"), no_pool=Decimal("20"),
        settled_price=Decimal(settled_price) if settled_price else None,
        settled_at=NOW if settled_price else None, creator_address=None,
        created_at=NOW, updated_at=NOW,
    )
    position = Position(
        id=position_kwargs.pop("id", "POS-1"), market_id="MKT-1", wallet_address=WALLET,
        side=side, amount=Decimal("10"), created_at=NOW, **position_kwargs,
    )
    return PositionWithMarket(position=position, market=market)


@pytest.fixture
def db():
    return MagicMock()


@pytest.fixture
def repo():
    return MagicMock()


class TestListPositions:
    async def test_outcomes_and_claimable(self, db, repo):
        repo.list_by_wallet = AsyncMock(return_value=[
            _pm("yes", "settled", "150", id="POS-W"),
            _pm("no", "settled", "150", id="POS-L"),
            _pm("yes", id="POS-P"),
        ])
        resp = await PositionApplicationService(repo).list_positions(db, WALLET, None)

        by_id = {p.id: p for p in resp.items}
        assert resp.total == 3
        assert by_id["POS-W"].outcome == "win"
        assert by_id["POS-W"].claimable is True
        assert by_id["POS-W"].payout == Decimal("20")
        assert by_id["POS-L"].outcome == "lose"
        assert by_id["POS-L"].payout is None
        assert by_id["POS-P"].outcome == "pending"
        assert by_id["POS-P"].claimable is False

    async def test_claimed_position_not_claimable(self, db, repo):
        repo.list_by_wallet = AsyncMock(return_value=[
            _pm("yes", "settled", "150", claimed=True, payout=Decimal("20"), claimed_at=NOW)
        ])
        resp = await PositionApplicationService(repo).list_positions(db, WALLET, "MKT-1")
        assert resp.items[0].claimable is False
        assert resp.items[0].payout == Decimal("20")
        assert repo.list_by_wallet.await_args.args[1:] == (WALLET, "MKT-1")


class TestGetPosition:
    async def test_found(self, db, repo):
        repo.get_with_market = AsyncMock(return_value=_pm())
        resp = await PositionApplicationService(repo).get_position(db, WALLET, "POS-1")
        assert resp.id == "POS-1"
        assert resp.amount_display == "10.00 LEO"

    async def test_not_found(self, db, repo):
        repo.get_with_market = AsyncMock(return_value=None)
        with pytest.raises(PositionNotFoundError):
            await PositionApplicationService(repo).get_position(db, WALLET, "POS-9")
