"""002: create positions table

Revision ID: 002
Revises: 001
Create Date: 2026-10-12
"""
from typing import Sequence, Union

from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE positions (
            id              VARCHAR(64)     PRIMARY KEY,
            market_id       VARCHAR(64)     NOT NULL REFERENCES markets(id),
            wallet_address  VARCHAR(42)     NOT NULL,
            side            VARCHAR(3)      NOT NULL,
            amount          NUMERIC(28, 8)  NOT NULL,
            claimed         BOOLEAN         NOT NULL DEFAULT FALSE,
            payout          NUMERIC(28, 8),
            claimed_at      TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_positions_side        CHECK (side IN ('yes', 'no')),
            CONSTRAINT ck_positions_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_positions_claim       CHECK (
                (claimed = FALSE AND payout IS NULL AND claimed_at IS NULL)
                OR (claimed = TRUE AND payout IS NOT NULL AND claimed_at IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_positions_wallet ON positions (wallet_address, created_at DESC);")
    op.execute("CREATE INDEX idx_positions_market ON positions (market_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS positions CASCADE;")
