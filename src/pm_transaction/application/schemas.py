"""Pydantic schemas and cursor utilities for pm_transaction API."""

import base64
import json
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from src.pm_common.amounts import amount_to_display
from src.pm_transaction.domain.models import TransactionHandle, TransactionRecord

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TransactionOut(BaseModel):
    tx_hash: str
    kind: str
    status: str
    from_address: str
    to_address: str
    amount: Decimal
    amount_display: str
    market_id: str | None = None
    position_id: str | None = None
    side: str | None = None
    error: str | None = None
    created_at: datetime
    resolved_at: datetime | None = None

    @classmethod
    def from_record(cls, r: TransactionRecord) -> "TransactionOut":
        return cls(
            tx_hash=r.tx_hash,
            kind=r.kind,
            status=r.status,
            from_address=r.from_address,
            to_address=r.to_address,
            amount=r.amount,
            amount_display=amount_to_display(r.amount),
            market_id=r.market_id,
            position_id=r.position_id,
            side=r.side,
            error=r.error,
            created_at=r.created_at,
            resolved_at=r.resolved_at,
        )

    @classmethod
    def from_handle(cls, h: TransactionHandle) -> "TransactionOut":
        p = h.payload
        return cls(
            tx_hash=h.tx_hash,
            kind=h.kind,
            status=h.status,
            from_address=h.from_address,
            to_address=h.to_address,
            amount=h.amount,
            amount_display=amount_to_display(h.amount),
            market_id=p.market_id if p else None,
            position_id=p.position_id if p else None,
            side=p.side if p else None,
            error=h.error,
            created_at=h.timestamp,
            resolved_at=h.resolved_at,
        )


class TransactionListResponse(BaseModel):
    items: list[TransactionOut]
    next_cursor: str | None
    has_more: bool


class MarketActivityResponse(BaseModel):
    market_id: str
    items: list[TransactionOut]
