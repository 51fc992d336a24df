"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session. They need a PostgreSQL database migrated with
`alembic upgrade head` at DATABASE_URL, and ADMIN_AUTH_POLICY=role_based.
"""

import uuid
from datetime import UTC, datetime, timedelta

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt

from config.settings import settings
from src.main import app


def bearer(sub: str, roles: list[str] | None = None) -> dict[str, str]:
    now = datetime.now(UTC)
    payload = {"sub": sub, "roles": roles or [], "iat": now, "exp": now + timedelta(hours=1)}
    token = jwt.encode(payload, settings.AUTH_JWT_KEY, algorithm=settings.AUTH_JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client with the app lifespan running."""
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


@pytest_asyncio.fixture(loop_scope="session")
async def user_headers() -> dict[str, str]:
    """A fresh user per test keeps balances independent between runs."""
    return bearer(f"it-user-{uuid.uuid4().hex[:10]}")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def admin_headers() -> dict[str, str]:
    return bearer("it-admin", roles=["admin"])


def pytest_collection_modifyitems(config, items):  # type: ignore[no-untyped-def]
    """Skip unless CW_INTEGRATION=1 (pre-condition: PostgreSQL up + alembic upgrade head)."""
    import os

    import pytest

    if os.environ.get("CW_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set CW_INTEGRATION=1 with a migrated database to run")
    for item in items:
        if "tests/integration" in str(item.fspath):
            item.add_marker(skip)
