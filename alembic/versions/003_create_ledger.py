"""003: create ledger_entries and ledger_balances tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_entries (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            symbol          VARCHAR(16)     NOT NULL,
            network         VARCHAR(32),
            entry_type      VARCHAR(30)     NOT NULL,
            amount          NUMERIC(38, 18) NOT NULL,
            balance_before  NUMERIC(38, 18) NOT NULL,
            balance_after   NUMERIC(38, 18) NOT NULL,
            reference_type  VARCHAR(30),
            reference_id    VARCHAR(64),
            tx_hash         VARCHAR(128),
            admin_id        VARCHAR(64),
            note            VARCHAR(500),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_entry_type CHECK (
                entry_type IN (
                    'deposit', 'earning',
                    'withdrawal', 'fee_revenue',
                    'admin_credit', 'admin_debit'
                )
            ),
            CONSTRAINT ck_ledger_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_ledger_balance_before_gte_0 CHECK (balance_before >= 0),
            CONSTRAINT ck_ledger_balance_after_gte_0 CHECK (balance_after >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_ledger_user_symbol_id ON ledger_entries (user_id, symbol, id DESC);")
    op.execute("CREATE INDEX idx_ledger_user_id ON ledger_entries (user_id, id DESC);")
    op.execute("""
        CREATE INDEX idx_ledger_reference
        ON ledger_entries (reference_type, reference_id)
        WHERE reference_id IS NOT NULL;
    """)
    op.execute("""
        CREATE TRIGGER trg_ledger_entries_append_only
        BEFORE UPDATE OR DELETE ON ledger_entries
        FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)
    op.execute("COMMENT ON TABLE ledger_entries IS 'Balance-affecting events, append-only, ordered by id';")

    op.execute("""
        CREATE TABLE ledger_balances (
            user_id         VARCHAR(64)     NOT NULL,
            symbol          VARCHAR(16)     NOT NULL,
            balance         NUMERIC(38, 18) NOT NULL DEFAULT 0,
            last_entry_id   BIGINT          REFERENCES ledger_entries (id),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (user_id, symbol),
            CONSTRAINT ck_balance_gte_0 CHECK (balance >= 0)
        );
    """)
    op.execute("COMMENT ON TABLE ledger_balances IS 'Projection: balance_after of the latest ledger_entries row per (user, symbol)';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_balances CASCADE;")
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
