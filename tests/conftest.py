"""Shared test fixtures.

Environment defaults must be in place before config.settings is first imported.
"""

import os

os.environ.setdefault("AUTH_JWT_KEY", "unit-test-signing-key")
os.environ.setdefault("ADMIN_AUTH_POLICY", "role_based")
os.environ.setdefault(
    "MASTER_WALLET_MNEMONIC", "test test test test test test test test test test test junk"
)

from collections.abc import Callable  # noqa: E402
from datetime import UTC, datetime, timedelta  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402

from config.settings import settings  # noqa: E402
from src.cw_gateway.auth.policy import build_policy  # noqa: E402
from src.cw_wallet.application.service import DepositAddressService  # noqa: E402
from src.cw_wallet.domain.deriver import AddressDeriver, HdWalletConfig  # noqa: E402
from src.main import app  # noqa: E402

HARDHAT_MNEMONIC = "test test test test test test test test test test test junk"


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Sign a token the way the external identity provider would."""

    def _make(
        sub: str = "user-1",
        roles: list[str] | None = None,
        expires_in: timedelta = timedelta(minutes=30),
        **claims: Any,
    ) -> str:
        now = datetime.now(UTC)
        payload: dict[str, Any] = {"sub": sub, "iat": now, "exp": now + expires_in, **claims}
        if roles is not None:
            payload["roles"] = roles
        return str(jwt.encode(payload, settings.AUTH_JWT_KEY, algorithm=settings.AUTH_JWT_ALGORITHM))

    return _make


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints.

    ASGITransport does not run the lifespan, so the state it would build
    (deriver, deposit service, auth policy) is installed here without a DB.
    """
    deriver = AddressDeriver(HdWalletConfig(mnemonic=HARDHAT_MNEMONIC))
    app.state.deriver = deriver
    app.state.deposit_service = DepositAddressService(deriver)
    app.state.auth_policy = build_policy(settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
