"""006: create network_configs table and seed EVM networks

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
        CREATE TABLE network_configs (
            network                VARCHAR(32)     PRIMARY KEY,
            chain_id               INTEGER,
            native_symbol          VARCHAR(16),
            withdrawal_fee         NUMERIC(38, 18) NOT NULL DEFAULT 0,
            min_withdrawal         NUMERIC(38, 18) NOT NULL DEFAULT 0,
            required_confirmations INTEGER         NOT NULL DEFAULT 0,
            is_active              BOOLEAN         NOT NULL DEFAULT TRUE,
            updated_at             TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_network_fee_gte_0 CHECK (withdrawal_fee >= 0),
            CONSTRAINT ck_network_min_gte_0 CHECK (min_withdrawal >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_network_configs_updated_at
        BEFORE UPDATE ON network_configs
        FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        INSERT INTO network_configs
            (network, chain_id, native_symbol, withdrawal_fee, min_withdrawal, required_confirmations)
        VALUES
            ('ERC20',    1,     'ETH', 2,   10, 12),
            ('BSC20',    56,    'BNB', 0.5, 5,  15),
            ('Arbitrum', 42161, 'ETH', 0.5, 5,  6),
            ('Optimism', 10,    'ETH', 0.5, 5,  6);
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS network_configs CASCADE;")
