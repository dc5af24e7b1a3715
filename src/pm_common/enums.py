"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class MarketStatus(str, Enum):
    ACTIVE = "active"
    SETTLED = "settled"


class Side(str, Enum):
    YES = "yes"
    NO = "no"

    @property
    def opposite(self) -> "Side":
        return Side.NO if self is Side.YES else Side.YES


class PositionOutcome(str, Enum):
    """Display-only outcome of a position; not stored."""
    PENDING = "pending"
    WIN = "win"
    LOSE = "lose"


class TransactionKind(str, Enum):
    CREATE_MARKET = "create_market"
    PREDICT = "predict"
    SETTLE = "settle"
    CLAIM = "claim"
    TOKEN_GRANT = "token_grant"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class TokenClaimStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
