"""003: create user_transactions table

Revision ID: 003
Revises: 002
Create Date: 2026-10-12
"""
from typing import Sequence, Union

from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE user_transactions (
            id              BIGSERIAL       PRIMARY KEY,
            tx_hash         VARCHAR(66)     NOT NULL UNIQUE,
            wallet_address  VARCHAR(42)     NOT NULL,
            market_id       VARCHAR(64)     REFERENCES markets(id),
            position_id     VARCHAR(64)     REFERENCES positions(id),
            kind            VARCHAR(20)     NOT NULL,
            side            VARCHAR(3),
            amount          NUMERIC(28, 8)  NOT NULL DEFAULT 0,
            status          VARCHAR(16)     NOT NULL DEFAULT 'pending',
            from_address    VARCHAR(42)     NOT NULL,
            to_address      VARCHAR(42)     NOT NULL,
            error           TEXT,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            resolved_at     TIMESTAMPTZ,
            CONSTRAINT ck_user_tx_kind   CHECK (kind IN (
                'create_market', 'predict', 'settle', 'claim', 'token_grant'
            )),
            CONSTRAINT ck_user_tx_status CHECK (status IN ('pending', 'confirmed', 'failed')),
            CONSTRAINT ck_user_tx_amount CHECK (amount >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_user_tx_wallet ON user_transactions (wallet_address, id DESC);")
    op.execute("CREATE INDEX idx_user_tx_market_kind ON user_transactions (market_id, kind, id DESC);")
    op.execute("COMMENT ON TABLE user_transactions IS 'Simulated chain transactions, one row per submission';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS user_transactions CASCADE;")
