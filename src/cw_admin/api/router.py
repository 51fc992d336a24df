"""Admin REST API — every endpoint requires require_admin."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_admin.application.schemas import (
    AdjustBalanceRequest,
    AdjustBalanceResponse,
    AdminActionItem,
    NetworkConfigItem,
    NetworkConfigUpdateRequest,
)
from src.cw_admin.application.service import ADMIN_LOG_LIMIT, AdminService
from src.cw_common.amounts import amount_to_display
from src.cw_common.database import get_db_session
from src.cw_common.response import ApiResponse, success_response
from src.cw_gateway.auth.dependencies import require_admin
from src.cw_gateway.auth.principal import Principal
from src.cw_withdrawal.application.schemas import (
    ProcessWithdrawalRequest,
    WithdrawalResponse,
)

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


@router.post("/adjust-balance")
async def adjust_balance(
    body: AdjustBalanceRequest,
    admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    entry = await _service.adjust_balance(
        db, admin.user_id, body.user_id, body.symbol, body.amount, body.type, body.note
    )
    data = AdjustBalanceResponse(
        entry_id=entry.id,
        user_id=entry.user_id,
        symbol=entry.symbol,
        entry_type=entry.entry_type,
        amount=amount_to_display(entry.amount),
        balance_before=amount_to_display(entry.balance_before),
        balance_after=amount_to_display(entry.balance_after),
    )
    return success_response(data.model_dump(), request)


@router.get("/withdrawals/pending")
async def list_pending_withdrawals(
    admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    pending = await _service.list_pending_withdrawals(db)
    return success_response(
        {"items": [WithdrawalResponse.from_domain(w).model_dump() for w in pending]},
        request,
    )


@router.post("/withdrawals/{request_id}/process")
async def process_withdrawal(
    request_id: str,
    body: ProcessWithdrawalRequest,
    admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    processed = await _service.process_withdrawal(
        db, admin.user_id, request_id, body.action, tx_hash=body.tx_hash, note=body.note
    )
    return success_response(WithdrawalResponse.from_domain(processed).model_dump(), request)


@router.get("/logs")
async def list_admin_logs(
    admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(ADMIN_LOG_LIMIT, ge=1, le=ADMIN_LOG_LIMIT),
) -> ApiResponse:
    actions = await _service.list_admin_actions(db, limit)
    return success_response(
        {"items": [AdminActionItem.from_domain(a).model_dump() for a in actions]},
        request,
    )


@router.get("/users/{user_id}")
async def user_overview(
    user_id: str,
    admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.user_overview(db, user_id)
    return success_response(data.model_dump(), request)


@router.get("/networks")
async def list_network_configs(
    admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    configs = await _service.list_network_configs(db)
    return success_response(
        {"items": [NetworkConfigItem.from_domain(c).model_dump() for c in configs]},
        request,
    )


@router.patch("/networks/{network}")
async def update_network_config(
    network: str,
    body: NetworkConfigUpdateRequest,
    admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    updated = await _service.update_network_config(db, admin.user_id, network, body.changes())
    return success_response(NetworkConfigItem.from_domain(updated).model_dump(), request)


@router.get("/invariants")
async def verify_ledger_consistency(
    admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    report = await _service.verify_ledger_consistency(db)
    return success_response(report.model_dump(), request)
