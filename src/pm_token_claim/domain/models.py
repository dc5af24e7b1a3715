"""Domain models for pm_token_claim — pure dataclasses, no I/O."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class TokenClaim:
    """A wallet's one-off token grant.

    Lifecycle: pending -> sent when the batch processor submits the grant
    transaction, sent -> failed if that transaction is rejected.
    """

    id: int                          # BIGSERIAL
    email: str                       # lower-cased, unique
    wallet_address: str              # lower-cased, unique
    amount: Decimal
    status: str                      # TokenClaimStatus value
    tx_hash: str | None = None       # set once submitted
    created_at: datetime | None = None
    updated_at: datetime | None = None
