"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.cw_admin.api.router import router as admin_router
from src.cw_common.database import engine
from src.cw_common.errors import AppError
from src.cw_common.response import error_response
from src.cw_gateway.auth.policy import build_policy
from src.cw_gateway.middleware.request_log import RequestLogMiddleware
from src.cw_ledger.api.router import router as ledger_router
from src.cw_wallet.api.router import router as wallet_router
from src.cw_wallet.api.router import status_router as blockchain_router
from src.cw_wallet.application.service import DepositAddressService
from src.cw_wallet.domain.deriver import AddressDeriver, HdWalletConfig
from src.cw_withdrawal.api.router import router as withdrawal_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB, build the deriver and auth policy. Shutdown: dispose."""
    # Startup: an invalid mnemonic or policy name aborts here
    deriver = AddressDeriver(HdWalletConfig.from_settings(settings))
    app.state.deriver = deriver
    app.state.deposit_service = DepositAddressService(deriver)
    app.state.auth_policy = build_policy(settings)
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.details, request)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(wallet_router, prefix="/api/v1")
app.include_router(ledger_router, prefix="/api/v1")
app.include_router(withdrawal_router, prefix="/api/v1")
app.include_router(blockchain_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
