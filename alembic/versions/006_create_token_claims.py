"""006: create token_claims table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE token_claims (
            id              BIGSERIAL       PRIMARY KEY,
            email           VARCHAR(254)    NOT NULL UNIQUE,
            wallet_address  VARCHAR(42)     NOT NULL UNIQUE,
            amount          NUMERIC(28, 8)  NOT NULL,
            status          VARCHAR(16)     NOT NULL DEFAULT 'pending',
            tx_hash         VARCHAR(66)     REFERENCES user_transactions(tx_hash),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_token_claims_status CHECK (status IN ('pending', 'sent', 'failed')),
            CONSTRAINT ck_token_claims_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_token_claims_tx_hash CHECK (
                (status = 'pending' AND tx_hash IS NULL)
                OR (status <> 'pending' AND tx_hash IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_token_claims_pending ON token_claims (id) WHERE status = 'pending';")
    op.execute("""
        CREATE TRIGGER trg_token_claims_updated_at
            BEFORE UPDATE ON token_claims
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE token_claims IS 'One-off token grants, one per email and wallet';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS token_claims CASCADE;")
