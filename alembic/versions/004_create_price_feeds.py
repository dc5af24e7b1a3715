"""004: create price_feeds table

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union

from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE price_feeds (
            id          BIGSERIAL       PRIMARY KEY,
            asset_name  VARCHAR(32)     NOT NULL,
            price       NUMERIC(28, 8)  NOT NULL,
            timestamp   TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_price_feeds_price_gt_0 CHECK (price > 0)
        );
    """)
    op.execute("CREATE INDEX idx_price_feeds_asset_ts ON price_feeds (asset_name, timestamp DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS price_feeds CASCADE;")
