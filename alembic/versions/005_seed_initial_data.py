"""005: seed initial data

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""
from typing import Sequence, Union

from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        INSERT INTO price_feeds (asset_name, price, timestamp) VALUES
            ('BTC', 64250.00, NOW()),
            ('ETH', 3125.50, NOW()),
            ('SOL', 148.75, NOW()),
            ('AVAX', 36.20, NOW());
    """)

    # Sample markets
    op.execute("""
        INSERT INTO markets (id, asset_name, description, strike_price, expiry_timestamp)
        VALUES
            ('MKT-BTC-70K',
             'BTC',
             'Will BTC price exceed $70,000.00 at expiry?',
             70000, NOW() + INTERVAL '7 days'),
            ('MKT-ETH-3500',
             'ETH',
             'Will ETH price exceed $3,500.00 at expiry?',
             3500, NOW() + INTERVAL '3 days'),
            ('MKT-AVAX-40',
             'AVAX',
             'Will AVAX price exceed $40.00 at expiry?',
             40, NOW() + INTERVAL '24 hours');
    """)


def downgrade() -> None:
    op.execute("DELETE FROM markets WHERE id IN ('MKT-BTC-70K', 'MKT-ETH-3500', 'MKT-AVAX-40');")
    op.execute("DELETE FROM price_feeds WHERE asset_name IN ('BTC', 'ETH', 'SOL', 'AVAX');")
