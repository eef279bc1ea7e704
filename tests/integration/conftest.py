"""Integration-test fixtures.

Needs Postgres and Redis from docker-compose with `alembic upgrade head`
applied. All integration tests share a single event-loop so that the
module-level SQLAlchemy async engine pool and Redis pool remain valid across
the entire test session.
"""

import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt

from config.settings import settings
from src.main import app


def bearer(user_id: str, email: str | None = None) -> dict[str, str]:
    claims = {"sub": user_id}
    if email:
        claims["email"] = email
    token = jwt.encode(claims, settings.IDENTITY_JWT_SECRET, algorithm=settings.IDENTITY_JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session")
async def buyer_headers() -> dict[str, str]:
    """A fresh identity per test, so ledgers start from the initial grant."""
    return bearer(f"it-buyer-{uuid.uuid4().hex[:8]}", "buyer@example.com")


@pytest_asyncio.fixture(loop_scope="session")
async def admin_headers() -> dict[str, str]:
    return bearer("it-admin", next(iter(settings.ADMIN_EMAILS), "admin@example.com"))
