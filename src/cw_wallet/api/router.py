"""cw_wallet REST API — deposit addresses and HD wallet status."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.database import get_db_session
from src.cw_common.response import ApiResponse, success_response
from src.cw_gateway.auth.dependencies import get_current_principal
from src.cw_gateway.auth.principal import Principal
from src.cw_wallet.application.schemas import (
    BlockchainStatusResponse,
    DepositAddressItem,
    DepositAddressRequest,
)
from src.cw_wallet.application.service import DepositAddressService

router = APIRouter(prefix="/wallet", tags=["wallet"])
status_router = APIRouter(prefix="/blockchain", tags=["blockchain"])


def get_deposit_service(request: Request) -> DepositAddressService:
    """Built in the app lifespan, since it needs the configured AddressDeriver."""
    return request.app.state.deposit_service  # type: ignore[no-any-return]


@router.post("/deposit-address")
async def request_deposit_address(
    body: DepositAddressRequest,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[DepositAddressService, Depends(get_deposit_service)],
    request: Request,
) -> ApiResponse:
    data = await service.request_deposit_address(
        db, principal.user_id, body.network, body.symbol
    )
    return success_response(data.model_dump(), request)


@router.get("/deposit-addresses")
async def list_deposit_addresses(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[DepositAddressService, Depends(get_deposit_service)],
    request: Request,
) -> ApiResponse:
    addresses = await service.list_deposit_addresses(db, principal.user_id)
    return success_response(
        {"items": [DepositAddressItem.from_domain(a).model_dump() for a in addresses]},
        request,
    )


@status_router.get("/status")
async def blockchain_status(
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[DepositAddressService, Depends(get_deposit_service)],
    request: Request,
) -> ApiResponse:
    data = BlockchainStatusResponse.model_validate(service.blockchain_status())
    return success_response(data.model_dump(), request)
