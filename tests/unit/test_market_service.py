# tests/unit/test_market_service.py
"""Unit tests for MarketApplicationService using mock repositories."""
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_common.enums import TransactionKind
from src.pm_common.errors import InvalidMarketError, MarketNotFoundError, PriceUnavailableError
from src.pm_gateway.wallet.models import WalletSession
from src.pm_market.application.schemas import (
    CreateMarketRequest,
    MarketDetail,
    cursor_decode,
    cursor_encode,
)
from src.pm_market.application.service import MarketApplicationService, default_description
from src.pm_market.domain.models import Market, PriceQuote
from src.pm_transaction.application.schemas import MarketActivityResponse

WALLET = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
SESSION = WalletSession(wallet_address=WALLET, chain_id="0x89", chain_name="Polygon")


def _make_market(**kwargs) -> Market:
    now = datetime.now(UTC)
    defaults = dict(
        id="MKT-TEST", asset_name="BTC", description=None, strike_price=Decimal("100"),
        expiry_timestamp=now + timedelta(days=1), status="active",
        yes_pool=Decimal("25"), no_pool=Decimal("75"), settled_price=None,
        settled_at=None, creator_address=None, created_at=now, updated_at=now,
    )
    defaults.update(kwargs)
    return Market(**defaults)


@pytest.fixture
def db():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def mock_repo():
    return MagicMock()


@pytest.fixture
def transactions():
    tx = MagicMock()
    tx.emit = AsyncMock()
    tx.start = AsyncMock()
    return tx


@pytest.fixture
def price_feed():
    feed = MagicMock()
    feed.latest_price = AsyncMock(return_value=None)
    return feed


@pytest.fixture
def svc(transactions, mock_repo, price_feed):
    return MarketApplicationService(transactions, mock_repo, price_feed)


class TestCursor:
    def test_roundtrip(self) -> None:
        m = _make_market(id="MKT-7")
        ts, market_id = cursor_decode(cursor_encode(m))
        assert market_id == "MKT-7"
        assert ts == m.created_at.isoformat()

    def test_invalid_cursor_ignored(self) -> None:
        assert cursor_decode("%%%") == (None, None)
        assert cursor_decode(None) == (None, None)


class TestListMarkets:
    async def test_returns_list_response(self, db, mock_repo, svc):
        mock_repo.list_markets = AsyncMock(return_value=[_make_market(id=f"MKT-{i}") for i in range(3)])

        resp = await svc.list_markets(db, status=None, cursor=None, limit=20)

        assert len(resp.items) == 3
        assert resp.has_more is False
        assert resp.next_cursor is None
        assert mock_repo.list_markets.call_args.args[1] == "active"

    async def test_has_more_when_over_limit(self, db, mock_repo, svc):
        # repo returns limit+1 items -> has_more=True
        mock_repo.list_markets = AsyncMock(return_value=[_make_market(id=f"MKT-{i}") for i in range(21)])

        resp = await svc.list_markets(db, status=None, cursor=None, limit=20)

        assert resp.has_more is True
        assert len(resp.items) == 20
        assert cursor_decode(resp.next_cursor)[1] == "MKT-19"

    async def test_status_all_passes_none_to_repo(self, db, mock_repo, svc):
        mock_repo.list_markets = AsyncMock(return_value=[])
        await svc.list_markets(db, status="all", cursor=None, limit=20)
        assert mock_repo.list_markets.call_args.args[1] is None

    async def test_status_is_case_insensitive(self, db, mock_repo, svc):
        mock_repo.list_markets = AsyncMock(return_value=[])
        await svc.list_markets(db, status="SETTLED", cursor=None, limit=20)
        assert mock_repo.list_markets.call_args.args[1] == "settled"

    async def test_unknown_status_rejected(self, db, mock_repo, svc):
        with pytest.raises(InvalidMarketError):
            await svc.list_markets(db, status="halted", cursor=None, limit=20)


class TestGetMarket:
    async def test_detail_includes_odds(self, db, mock_repo, svc):
        mock_repo.get_market_by_id = AsyncMock(return_value=_make_market(id="MKT-BTC"))

        detail = await svc.get_market(db, "MKT-BTC")

        assert detail.id == "MKT-BTC"
        assert detail.yes_odds == Decimal("0.25")
        assert detail.no_odds == Decimal("0.75")
        assert detail.total_pool == Decimal("100")
        assert detail.winning_side is None

    async def test_settled_detail_shows_winner(self, db, mock_repo, svc):
        mock_repo.get_market_by_id = AsyncMock(
            return_value=_make_market(status="settled", settled_price=Decimal("90"))
        )
        detail = await svc.get_market(db, "MKT-TEST")
        assert detail.winning_side == "no"
        assert detail.settled_price_display == "$90.00"

    async def test_raises_not_found(self, db, mock_repo, svc):
        mock_repo.get_market_by_id = AsyncMock(return_value=None)
        with pytest.raises(MarketNotFoundError):
            await svc.get_market(db, "MKT-MISSING")


class TestCreateMarket:
    async def test_creates_with_default_description(self, db, mock_repo, transactions, svc):
        mock_repo.create_market = AsyncMock(side_effect=lambda db, **kw: _make_market(
            id=kw["market_id"], description=kw["description"],
            expiry_timestamp=kw["expiry_timestamp"], yes_pool=Decimal("0"), no_pool=Decimal("0"),
        ))
        body = CreateMarketRequest(asset_name=" ETH ", strike_price=Decimal("3500"), expiry_hours=24)

        detail = await svc.create_market(db, SESSION, body)

        assert isinstance(detail, MarketDetail)
        assert detail.id.startswith("MKT-")
        assert detail.description == "Will ETH price exceed $3,500.00 at expiry?"
        kw = mock_repo.create_market.await_args.kwargs
        assert kw["asset_name"] == "ETH"
        assert kw["creator_address"] == WALLET
        assert kw["expiry_timestamp"] > datetime.now(UTC) + timedelta(hours=23)
        kind, payload = transactions.emit.await_args.args[1:]
        assert kind is TransactionKind.CREATE_MARKET
        assert payload.amount == Decimal("0")
        db.commit.assert_awaited_once()
        transactions.start.assert_awaited_once()

    @pytest.mark.parametrize(
        "body",
        [
            CreateMarketRequest(asset_name="  ", strike_price=Decimal("1"), expiry_hours=1),
            CreateMarketRequest(asset_name="BTC", strike_price=Decimal("0"), expiry_hours=1),
            CreateMarketRequest(
                asset_name="BTC", strike_price=Decimal("0.000000001"), expiry_hours=1
            ),
            CreateMarketRequest(asset_name="BTC", strike_price=Decimal("1")),
            CreateMarketRequest(
                asset_name="BTC", strike_price=Decimal("1"),
                expiry_timestamp=datetime(2020, 1, 1, tzinfo=UTC),
            ),
        ],
    )
    async def test_invalid_requests(self, db, mock_repo, svc, body):
        mock_repo.create_market = AsyncMock()
        with pytest.raises(InvalidMarketError):
            await svc.create_market(db, SESSION, body)
        mock_repo.create_market.assert_not_awaited()

    async def test_failure_rolls_back(self, db, mock_repo, transactions, svc):
        mock_repo.create_market = AsyncMock(return_value=_make_market())
        transactions.emit.side_effect = RuntimeError("cache down")
        body = CreateMarketRequest(asset_name="BTC", strike_price=Decimal("1"), expiry_hours=2)
        with pytest.raises(RuntimeError):
            await svc.create_market(db, SESSION, body)
        db.rollback.assert_awaited_once()
        transactions.start.assert_not_awaited()

    def test_default_description(self) -> None:
        assert default_description("SOL", Decimal("150")) == "Will SOL price exceed $150.00 at expiry?"


class TestPriceAndActivity:
    async def test_latest_price(self, db, mock_repo, price_feed, svc):
        mock_repo.get_market_by_id = AsyncMock(return_value=_make_market())
        price_feed.latest_price.return_value = PriceQuote("BTC", Decimal("101"), datetime.now(UTC))
        resp = await svc.latest_price(db, "MKT-TEST")
        assert resp.above_strike is True
        assert resp.price_display == "$101.00"

    async def test_price_unavailable(self, db, mock_repo, svc):
        mock_repo.get_market_by_id = AsyncMock(return_value=_make_market())
        with pytest.raises(PriceUnavailableError):
            await svc.latest_price(db, "MKT-TEST")

    async def test_activity_requires_market(self, db, mock_repo, transactions, svc):
        mock_repo.get_market_by_id = AsyncMock(return_value=None)
        transactions.market_activity = AsyncMock()
        with pytest.raises(MarketNotFoundError):
            await svc.activity(db, "MKT-X", 10)
        transactions.market_activity.assert_not_awaited()

    async def test_activity(self, db, mock_repo, transactions, svc):
        mock_repo.get_market_by_id = AsyncMock(return_value=_make_market())
        transactions.market_activity = AsyncMock(
            return_value=MarketActivityResponse(market_id="MKT-TEST", items=[])
        )
        resp = await svc.activity(db, "MKT-TEST", 10)
        assert resp.market_id == "MKT-TEST"
