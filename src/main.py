"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.mp_booking.api.router import router as booking_router
from src.mp_common.database import engine
from src.mp_common.errors import AppError
from src.mp_common.redis_client import close_redis, get_redis
from src.mp_common.response import error_response
from src.mp_eligibility.api.router import router as verification_router
from src.mp_escrow.api.router import router as escrow_router
from src.mp_gateway.middleware.rate_limit import RateLimitMiddleware
from src.mp_gateway.middleware.request_log import RequestLogMiddleware
from src.mp_ledger.api.router import router as credits_router
from src.mp_listing.api.applications_router import router as applications_router
from src.mp_listing.api.posts_router import router as posts_router
from src.mp_payments.api.router import router as purchase_router
from src.mp_pricing.api.router import router as pricing_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    redis = await get_redis()
    await redis.ping()
    yield
    # Shutdown
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    RateLimitMiddleware,
    redis_factory=get_redis,
    limit_per_minute=settings.RATE_LIMIT_PER_MINUTE,
)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.details)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(posts_router, prefix="/api/v1")
app.include_router(applications_router, prefix="/api/v1")
app.include_router(booking_router, prefix="/api/v1")
app.include_router(credits_router, prefix="/api/v1")
app.include_router(purchase_router, prefix="/api/v1")
app.include_router(escrow_router, prefix="/api/v1")
app.include_router(verification_router, prefix="/api/v1")
app.include_router(pricing_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
