"""Domain models for pm_transaction — pure dataclasses, no I/O."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.pm_common.enums import TransactionStatus


@dataclass(frozen=True)
class TransactionPayload:
    """What a caller asks the chain to do."""

    from_address: str
    amount: Decimal
    market_id: str | None = None
    position_id: str | None = None
    side: str | None = None          # Side value for predict/claim
    to_address: str | None = None    # defaults to the market contract


@dataclass(frozen=True)
class TransactionHandle:
    """Snapshot of a submitted transaction.

    Lifecycle: pending -> confirmed | failed, exactly once, never retried.
    Handles are immutable; resolution produces a new handle.
    """

    tx_hash: str
    kind: str                        # TransactionKind value
    from_address: str
    to_address: str
    amount: Decimal
    status: str                      # TransactionStatus value
    timestamp: datetime
    resolved_at: datetime | None = None
    error: str | None = None
    payload: TransactionPayload | None = field(default=None, compare=False)

    @property
    def is_pending(self) -> bool:
        return self.status == TransactionStatus.PENDING.value


@dataclass
class TransactionRecord:
    """Persisted row of user_transactions (history / activity views)."""

    id: int                          # BIGSERIAL
    tx_hash: str
    wallet_address: str
    market_id: str | None
    position_id: str | None
    kind: str
    side: str | None
    amount: Decimal
    status: str
    from_address: str
    to_address: str
    error: str | None
    created_at: datetime
    resolved_at: datetime | None = None
