"""Shared test fixtures."""

import os

# Settings are read at import time; the identity secret has no default.
os.environ.setdefault("IDENTITY_JWT_SECRET", "test-secret")
os.environ.setdefault("ADMIN_EMAILS", '["admin@example.com"]')
os.environ.setdefault("STRIPE_SECRET_KEY", "")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
