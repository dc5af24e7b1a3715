"""TradeService — validate and record a position.

Pool increment, position insert and transaction log row are written in one
DB transaction: either all three commit or none do, and the transaction only
starts resolving after the commit. The pool increment is a conditional
UPDATE, so two trades racing on one market both land.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import Side, TransactionKind
from src.pm_common.errors import MarketClosedError, MarketNotFoundError
from src.pm_common.id_generator import generate_id
from src.pm_gateway.wallet.models import WalletSession
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_position.domain.repository import PositionRepositoryProtocol
from src.pm_position.infrastructure.persistence import PositionRepository
from src.pm_trading.application.schemas import (
    PlacedPosition,
    PlaceTradeResponse,
    PoolSnapshot,
)
from src.pm_trading.domain.rules import check_amount, check_market_open
from src.pm_transaction.application.schemas import TransactionOut
from src.pm_transaction.application.service import (
    TransactionService,
    get_transaction_service,
)
from src.pm_transaction.domain.models import TransactionPayload

logger = logging.getLogger(__name__)


class TradeService:
    def __init__(
        self,
        transactions: TransactionService,
        markets: MarketRepositoryProtocol | None = None,
        positions: PositionRepositoryProtocol | None = None,
    ) -> None:
        self._tx = transactions
        self._markets: MarketRepositoryProtocol = markets or MarketRepository()
        self._positions: PositionRepositoryProtocol = positions or PositionRepository()

    async def place_trade(
        self,
        db: AsyncSession,
        session: WalletSession,
        market_id: str,
        side: Side,
        amount: object,
    ) -> PlaceTradeResponse:
        stake = check_amount(amount)
        now = utc_now()
        try:
            market = await self._markets.get_market_by_id(db, market_id)
            if market is None:
                raise MarketNotFoundError(market_id)
            check_market_open(market, now)

            updated = await self._markets.increment_pool(db, market_id, side, stake, now)
            if updated is None:
                # settled or expired between the read and the write
                raise MarketClosedError(market_id, "closed during trade")

            position = await self._positions.insert_position(
                db, generate_id("POS-"), market_id, session.wallet_address, side.value, stake
            )
            handle = await self._tx.emit(
                db,
                TransactionKind.PREDICT,
                TransactionPayload(
                    from_address=session.wallet_address,
                    amount=stake,
                    market_id=market_id,
                    position_id=position.id,
                    side=side.value,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await self._tx.start(handle)

        logger.info(
            "Trade placed: market=%s side=%s amount=%s position=%s tx=%s",
            market_id, side.value, stake, position.id, handle.tx_hash,
        )
        return PlaceTradeResponse(
            position=PlacedPosition.from_domain(position),
            pools=PoolSnapshot.from_market(updated),
            transaction=TransactionOut.from_handle(handle),
        )


_service: TradeService | None = None


def get_trade_service() -> TradeService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = TradeService(get_transaction_service())
    return _service
