"""cw_withdrawal REST API — user-side withdrawal requests and history."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.database import get_db_session
from src.cw_common.response import ApiResponse, success_response
from src.cw_gateway.auth.dependencies import get_current_principal
from src.cw_gateway.auth.principal import Principal
from src.cw_withdrawal.application.schemas import (
    WithdrawalListResponse,
    WithdrawalResponse,
    WithdrawRequest,
)
from src.cw_withdrawal.application.service import WithdrawalService

router = APIRouter(prefix="/wallet", tags=["withdrawals"])

_service = WithdrawalService()


@router.post("/withdraw")
async def request_withdrawal(
    body: WithdrawRequest,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    created = await _service.create(
        db,
        principal.user_id,
        body.symbol,
        body.network,
        body.amount,
        body.to_address,
    )
    return success_response(WithdrawalResponse.from_domain(created).model_dump(), request)


@router.get("/withdrawals")
async def list_withdrawals(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    items = await _service.list_for_user(db, principal.user_id)
    data = WithdrawalListResponse(items=[WithdrawalResponse.from_domain(w) for w in items])
    return success_response(data.model_dump(), request)
