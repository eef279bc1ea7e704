"""Rate limiting middleware for money-moving endpoints.

Fixed window per caller and endpoint group:
  key   = "ratelimit:{bearer_token_or_ip}:{group}:{minute}"
  count = INCR key; EXPIRE key 60 on first hit
  count > limit → 429 with Retry-After

Only POSTs under the groups in RATE_LIMITED_PREFIXES are counted. Redis being
unreachable does not block requests; the failure is logged.
"""

import hashlib
import logging
import time
from collections.abc import Awaitable, Callable

from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from src.mp_common.errors import RateLimitError
from src.mp_common.response import error_response

logger = logging.getLogger(__name__)

RATE_LIMITED_PREFIXES: tuple[str, ...] = (
    "/api/v1/escrow",
    "/api/v1/credits/checkout",
    "/api/v1/credits/fulfill",
    "/api/v1/bookings",
)

RedisFactory = Callable[[], Awaitable[object]]


def _caller_key(request: Request) -> str:
    auth = request.headers.get("authorization")
    if auth:
        return hashlib.sha256(auth.encode()).hexdigest()[:16]
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _group_for(path: str) -> str | None:
    for prefix in RATE_LIMITED_PREFIXES:
        if path.startswith(prefix):
            return prefix.rsplit("/", 1)[-1]
    return None


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, redis_factory: RedisFactory, limit_per_minute: int) -> None:  # type: ignore[no-untyped-def]
        super().__init__(app)
        self._redis_factory = redis_factory
        self._limit = limit_per_minute

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        group = _group_for(request.url.path)
        if request.method != "POST" or group is None:
            return await call_next(request)

        window = int(time.time() // 60)
        key = f"ratelimit:{_caller_key(request)}:{group}:{window}"
        try:
            redis = await self._redis_factory()
            count = await redis.incr(key)  # type: ignore[attr-defined]
            if count == 1:
                await redis.expire(key, 60)  # type: ignore[attr-defined]
        except RedisError:
            logger.warning("rate limit check skipped, redis unavailable", exc_info=True)
            return await call_next(request)

        if count > self._limit:
            err = RateLimitError()
            retry_after = 60 - int(time.time()) % 60
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.code, err.message).model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
