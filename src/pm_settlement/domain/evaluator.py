"""Settlement evaluator — winning side and pari-mutuel payout.

Pure functions of (market, position): no I/O, no randomness.

Winning side:
    YES wins iff settled_price > strike_price (strictly).
    Equality resolves to NO.

Payout for a winning, unclaimed position on a settled market:
    payout = amount + amount * losing_pool / winning_pool
    i.e. the stake back plus a stake-proportional share of the losing pool.
    losing_pool == 0 -> payout == amount.
Results are truncated to 8 decimal places, so the sum of all payouts on a
market never exceeds yes_pool + no_pool.
"""

from decimal import Decimal

from src.pm_common.amounts import ZERO, quantize_amount
from src.pm_common.enums import PositionOutcome, Side
from src.pm_common.errors import InvalidStateError
from src.pm_market.domain.models import Market
from src.pm_position.domain.models import Position


def determine_winning_side(strike_price: Decimal, settled_price: Decimal) -> Side:
    if settled_price > strike_price:
        return Side.YES
    return Side.NO


def winning_side_of(market: Market) -> Side | None:
    """Winning side of a settled market, None while the market is active."""
    if not market.is_settled or market.settled_price is None:
        return None
    return determine_winning_side(market.strike_price, market.settled_price)


def _pari_mutuel(amount: Decimal, winning_pool: Decimal, losing_pool: Decimal) -> Decimal:
    if losing_pool == ZERO:
        return amount
    # multiply before dividing to keep precision
    return quantize_amount(amount + amount * losing_pool / winning_pool)


def compute_payout(position: Position, market: Market) -> Decimal:
    """Payout owed to ``position``; raises InvalidStateError when it is not claimable."""
    winner = winning_side_of(market)
    if winner is None:
        raise InvalidStateError(f"market {market.id} is not settled")
    if position.claimed:
        raise InvalidStateError(f"position {position.id} has already been claimed")
    if Side(position.side) is not winner:
        raise InvalidStateError(f"position {position.id} did not win")

    winning_pool = market.pool_for(winner)
    losing_pool = market.pool_for(winner.opposite)
    if winning_pool < position.amount:
        # The position's stake is part of its pool; anything less is a corrupt row.
        raise InvalidStateError(
            f"winning pool {winning_pool} is smaller than stake {position.amount}"
        )
    return _pari_mutuel(position.amount, winning_pool, losing_pool)


def position_outcome(position: Position, market: Market) -> PositionOutcome:
    winner = winning_side_of(market)
    if winner is None:
        return PositionOutcome.PENDING
    return PositionOutcome.WIN if Side(position.side) is winner else PositionOutcome.LOSE


def estimate_payout(position: Position, market: Market) -> Decimal | None:
    """Display helper: what a winning position pays (or paid); None otherwise."""
    if position.claimed:
        return position.payout
    winner = winning_side_of(market)
    if winner is None or Side(position.side) is not winner:
        return None
    winning_pool = market.pool_for(winner)
    if winning_pool < position.amount:
        return None
    return _pari_mutuel(position.amount, winning_pool, market.pool_for(winner.opposite))
