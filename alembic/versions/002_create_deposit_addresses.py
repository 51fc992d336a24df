"""002: create derivation_indexes and deposit_addresses tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE derivation_indexes (
            derivation_index INTEGER         PRIMARY KEY,
            user_id          VARCHAR(64)     NOT NULL,
            address_space    VARCHAR(16)     NOT NULL,
            address          VARCHAR(42)     NOT NULL,
            created_at       TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_derivation_user_space UNIQUE (user_id, address_space),
            CONSTRAINT uq_derivation_address UNIQUE (address),
            CONSTRAINT ck_derivation_index_gte_1 CHECK (derivation_index >= 1)
        );
    """)
    op.execute("COMMENT ON TABLE derivation_indexes IS 'HD index ownership; index 0 is the master address and never allocated';")

    op.execute("""
        CREATE TABLE deposit_addresses (
            id               UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id          VARCHAR(64)     NOT NULL,
            network          VARCHAR(32)     NOT NULL,
            symbol           VARCHAR(16)     NOT NULL,
            address          VARCHAR(42)     NOT NULL,
            derivation_index INTEGER         NOT NULL REFERENCES derivation_indexes (derivation_index),
            created_at       TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_deposit_user_network_symbol UNIQUE (user_id, network, symbol)
        );
    """)
    op.execute("CREATE INDEX idx_deposit_address ON deposit_addresses (address);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS deposit_addresses CASCADE;")
    op.execute("DROP TABLE IF EXISTS derivation_indexes CASCADE;")
