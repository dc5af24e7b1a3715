# src/pm_token_claim/infrastructure/persistence.py
"""TokenClaimRepository — token_claims table.

insert() relies on the UNIQUE constraints with ON CONFLICT DO NOTHING, so
two concurrent registrations for one email or wallet leave exactly one row.
lock_pending() uses FOR UPDATE SKIP LOCKED: overlapping batch runs never
submit the same grant twice.
"""
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import store_call
from src.pm_common.enums import TokenClaimStatus
from src.pm_token_claim.domain.models import TokenClaim

_COLUMNS = "id, email, wallet_address, amount, status, tx_hash, created_at, updated_at"

_FIND_CONFLICT_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM token_claims
    WHERE email = :email OR wallet_address = :wallet_address
    ORDER BY (email = :email) DESC
    LIMIT 1
""")

_INSERT_SQL = text(f"""
    INSERT INTO token_claims (email, wallet_address, amount, status)
    VALUES (:email, :wallet_address, :amount, :status)
    ON CONFLICT DO NOTHING
    RETURNING {_COLUMNS}
""")

_GET_BY_EMAIL_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM token_claims
    WHERE email = :email
""")

_LOCK_PENDING_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM token_claims
    WHERE status = 'pending'
    ORDER BY id
    LIMIT :limit
    FOR UPDATE SKIP LOCKED
""")

_MARK_SENT_SQL = text(f"""
    UPDATE token_claims
    SET status = 'sent',
        tx_hash = :tx_hash
    WHERE id = :claim_id
      AND status = 'pending'
    RETURNING {_COLUMNS}
""")

_MARK_FAILED_SQL = text("""
    UPDATE token_claims
    SET status = 'failed'
    WHERE tx_hash = :tx_hash
      AND status = 'sent'
    RETURNING id
""")


def _row_to_claim(row: object) -> TokenClaim:
    return TokenClaim(
        id=row.id,  # type: ignore[attr-defined]
        email=row.email,  # type: ignore[attr-defined]
        wallet_address=row.wallet_address,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        tx_hash=row.tx_hash,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class TokenClaimRepository:
    async def find_conflict(
        self, db: AsyncSession, email: str, wallet_address: str
    ) -> TokenClaim | None:
        """Existing claim sharing the email or the wallet; an email match wins."""
        async with store_call("find_token_claim"):
            row = (
                await db.execute(
                    _FIND_CONFLICT_SQL, {"email": email, "wallet_address": wallet_address}
                )
            ).fetchone()
        return _row_to_claim(row) if row else None

    async def insert(
        self, db: AsyncSession, email: str, wallet_address: str, amount: Decimal
    ) -> TokenClaim | None:
        async with store_call("insert_token_claim"):
            result = await db.execute(
                _INSERT_SQL,
                {
                    "email": email,
                    "wallet_address": wallet_address,
                    "amount": amount,
                    "status": TokenClaimStatus.PENDING.value,
                },
            )
        row = result.fetchone()
        return _row_to_claim(row) if row else None

    async def get_by_email(self, db: AsyncSession, email: str) -> TokenClaim | None:
        async with store_call("get_token_claim"):
            row = (await db.execute(_GET_BY_EMAIL_SQL, {"email": email})).fetchone()
        return _row_to_claim(row) if row else None

    async def lock_pending(self, db: AsyncSession, limit: int) -> list[TokenClaim]:
        async with store_call("lock_pending_token_claims"):
            rows = (await db.execute(_LOCK_PENDING_SQL, {"limit": limit})).fetchall()
        return [_row_to_claim(r) for r in rows]

    async def mark_sent(
        self, db: AsyncSession, claim_id: int, tx_hash: str
    ) -> TokenClaim | None:
        async with store_call("mark_token_claim_sent"):
            result = await db.execute(
                _MARK_SENT_SQL, {"claim_id": claim_id, "tx_hash": tx_hash}
            )
        row = result.fetchone()
        return _row_to_claim(row) if row else None

    async def mark_failed_by_tx(self, db: AsyncSession, tx_hash: str) -> bool:
        async with store_call("mark_token_claim_failed"):
            result = await db.execute(_MARK_FAILED_SQL, {"tx_hash": tx_hash})
        return result.fetchone() is not None
