"""Admin audit trail — written inside the caller's transaction.

An audit row commits together with the balance / withdrawal change it
describes, or not at all.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_admin.domain.models import AdminAction
from src.cw_admin.infrastructure.db_models import AdminActionORM
from src.cw_common.amounts import amount_to_display
from src.cw_common.enums import AdminActionType


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return amount_to_display(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _orm_to_action(m: AdminActionORM) -> AdminAction:
    return AdminAction(
        id=m.id,
        admin_id=m.admin_id,
        target_user_id=m.target_user_id,
        action_type=m.action_type,
        details=dict(m.details or {}),
        created_at=m.created_at,
    )


async def write_admin_action(
    admin_id: str,
    target_user_id: str | None,
    action_type: AdminActionType,
    details: dict[str, Any],
    db: AsyncSession,
) -> None:
    """Insert one row into admin_actions within the caller's transaction."""
    db.add(
        AdminActionORM(
            admin_id=admin_id,
            target_user_id=target_user_id,
            action_type=action_type.value,
            details=_jsonable(details),
        )
    )
    await db.flush()


async def list_admin_actions(db: AsyncSession, limit: int = 100) -> list[AdminAction]:
    result = await db.execute(
        select(AdminActionORM).order_by(AdminActionORM.id.desc()).limit(limit)
    )
    return [_orm_to_action(m) for m in result.scalars().all()]
