"""005: create admin_actions table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE admin_actions (
            id              BIGSERIAL       PRIMARY KEY,
            admin_id        VARCHAR(64)     NOT NULL,
            target_user_id  VARCHAR(64),
            action_type     VARCHAR(40)     NOT NULL,
            details         JSONB           NOT NULL DEFAULT '{}'::jsonb,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_admin_actions_target ON admin_actions (target_user_id, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_admin_actions_append_only
        BEFORE UPDATE OR DELETE ON admin_actions
        FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS admin_actions CASCADE;")
