"""001: create darkpool_pending_secrets table

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # uint256 values are kept as decimal strings (up to 78 digits).
    op.execute("""
        CREATE TABLE darkpool_pending_secrets (
            commitment_hash     VARCHAR(66)     PRIMARY KEY,
            instrument_address  VARCHAR(42)     NOT NULL,
            instrument_id       VARCHAR(78)     NOT NULL,
            order_kind          SMALLINT        NOT NULL,
            side                SMALLINT        NOT NULL,
            quantity            VARCHAR(78)     NOT NULL,
            limit_price         VARCHAR(78)     NOT NULL,
            minimum_fill        VARCHAR(78)     NOT NULL,
            expiry              BIGINT          NOT NULL,
            salt                VARCHAR(78)     NOT NULL,
            created_at          BIGINT          NOT NULL,
            escrow_amount       VARCHAR(78)     NOT NULL DEFAULT '0',
            CONSTRAINT ck_pending_secrets_hash_format
                CHECK (commitment_hash ~ '^0x[0-9a-f]{64}$'),
            CONSTRAINT ck_pending_secrets_order_kind CHECK (order_kind BETWEEN 0 AND 4),
            CONSTRAINT ck_pending_secrets_side CHECK (side IN (0, 1))
        )
    """)
    op.execute("""
        CREATE INDEX idx_pending_secrets_created_at
            ON darkpool_pending_secrets (created_at, commitment_hash)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS darkpool_pending_secrets")
