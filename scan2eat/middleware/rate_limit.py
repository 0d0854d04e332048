from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from scan2eat.core.rate_limiter import InMemoryRateLimiterService, RateLimiterService


class ApiRateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, rate_limiter: RateLimiterService | None = None, path_prefix: str = "/api") -> None:
        super().__init__(app)
        self._rate_limiter = rate_limiter or InMemoryRateLimiterService()
        self._path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or not request.url.path.startswith(self._path_prefix):
            return await call_next(request)

        decision = self._rate_limiter.check(client_id=_extract_client_id(request))
        if not decision.allowed:
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests"},
                headers={
                    "Retry-After": str(decision.retry_after_seconds),
                    "X-RateLimit-Limit": str(decision.limit),
                    "X-RateLimit-Remaining": str(decision.remaining),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response


def _extract_client_id(request: Request) -> str:
    # one trusted proxy: only the hop it appended (rightmost) is not client-controlled
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        proxy_hop = forwarded.split(",")[-1].strip()
        if proxy_hop:
            return proxy_hop
    if request.client:
        return request.client.host
    return "unknown"
