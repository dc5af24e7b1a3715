"""001: create markets table

Revision ID: 001
Revises: 
Create Date: 2026-10-12
"""
from typing import Sequence, Union

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # shared by every table with an updated_at column
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE markets (
            id                  VARCHAR(64)     PRIMARY KEY,
            asset_name          VARCHAR(32)     NOT NULL,
            description         TEXT,
            strike_price        NUMERIC(28, 8)  NOT NULL,
            expiry_timestamp    TIMESTAMPTZ     NOT NULL,
            status              VARCHAR(16)     NOT NULL DEFAULT 'active',
            yes_pool            NUMERIC(28, 8)  NOT NULL DEFAULT 0,
            no_pool             NUMERIC(28, 8)  NOT NULL DEFAULT 0,
            settled_price       NUMERIC(28, 8),
            settled_at          TIMESTAMPTZ,
            creator_address     VARCHAR(42),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_markets_status         CHECK (status IN ('active', 'settled')),
            CONSTRAINT ck_markets_strike_gt_0    CHECK (strike_price > 0),
            CONSTRAINT ck_markets_yes_pool_gte_0 CHECK (yes_pool >= 0),
            CONSTRAINT ck_markets_no_pool_gte_0  CHECK (no_pool >= 0),
            CONSTRAINT ck_markets_settled_price  CHECK (
                (status = 'active' AND settled_price IS NULL)
                OR (status = 'settled' AND settled_price IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_markets_status_created ON markets (status, created_at DESC, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE markets IS 'Price threshold markets: strike, expiry, yes/no pools, settlement';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
