"""cw_ledger REST API — balances and ledger history, all require authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.database import get_db_session
from src.cw_common.response import ApiResponse, success_response
from src.cw_gateway.auth.dependencies import get_current_principal
from src.cw_gateway.auth.principal import Principal
from src.cw_ledger.application.schemas import AllBalancesResponse, BalanceResponse
from src.cw_ledger.application.service import LedgerService

router = APIRouter(prefix="/wallet", tags=["ledger"])

_service = LedgerService()


@router.get("/balance/{symbol}")
async def get_balance(
    symbol: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    balance = await _service.current_balance(db, principal.user_id, symbol)
    data = BalanceResponse.from_amount(principal.user_id, symbol, balance)
    return success_response(data.model_dump(), request)


@router.get("/balances")
async def get_all_balances(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    balances = await _service.all_balances(db, principal.user_id)
    data = AllBalancesResponse.from_amounts(principal.user_id, balances)
    return success_response(data.model_dump(), request)


@router.get("/ledger")
async def list_ledger(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    symbol: str | None = Query(None, description="Filter by asset symbol"),
) -> ApiResponse:
    data = await _service.list_entries(db, principal.user_id, cursor, limit, symbol)
    return success_response(data.model_dump(), request)
