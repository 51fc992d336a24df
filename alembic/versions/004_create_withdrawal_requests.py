"""004: create withdrawal_requests table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE withdrawal_requests (
            id               UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id          VARCHAR(64)     NOT NULL,
            symbol           VARCHAR(16)     NOT NULL,
            network          VARCHAR(32)     NOT NULL,
            amount           NUMERIC(38, 18) NOT NULL,
            fee              NUMERIC(38, 18) NOT NULL DEFAULT 0,
            net_amount       NUMERIC(38, 18) NOT NULL,
            to_address       VARCHAR(64)     NOT NULL,
            status           VARCHAR(16)     NOT NULL DEFAULT 'pending',
            tx_hash          VARCHAR(128),
            admin_id         VARCHAR(64),
            admin_note       VARCHAR(500),
            rejection_reason VARCHAR(500),
            requested_at     TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            processed_at     TIMESTAMPTZ,
            completed_at     TIMESTAMPTZ,
            rejected_at      TIMESTAMPTZ,
            CONSTRAINT ck_withdrawal_status CHECK (status IN ('pending', 'completed', 'rejected')),
            CONSTRAINT ck_withdrawal_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_withdrawal_fee_gte_0 CHECK (fee >= 0),
            CONSTRAINT ck_withdrawal_net_gt_0 CHECK (net_amount > 0)
        );
    """)
    op.execute("""
        CREATE INDEX idx_withdrawal_pending
        ON withdrawal_requests (requested_at DESC)
        WHERE status = 'pending';
    """)
    op.execute("CREATE INDEX idx_withdrawal_user ON withdrawal_requests (user_id, requested_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS withdrawal_requests CASCADE;")
