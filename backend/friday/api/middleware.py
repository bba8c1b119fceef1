"""HTTP middleware: access log, general rate limiting and body size limits."""

import logging
import time

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from friday.api.dependencies import client_ip

logger = logging.getLogger("friday.access")

COLD_START_SECONDS = 5
BODY_METHODS = ("POST", "PUT", "PATCH")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One line per request, tagged [COLD] in the first seconds after boot."""

    async def dispatch(self, request: Request, call_next):
        if not request.app.state.settings.enable_analytics:
            return await call_next(request)

        start = time.monotonic()
        is_cold = start - request.app.state.started_at < COLD_START_SECONDS
        response = await call_next(request)
        duration_ms = int((time.monotonic() - start) * 1000)
        indicator = "[COLD]" if is_cold else "[WARM]"
        logger.info(
            f"{indicator} {request.method} {request.url.path} - "
            f"{response.status_code} - {duration_ms}ms"
        )
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """General per-address limiter applied to every route."""

    async def dispatch(self, request: Request, call_next):
        settings = request.app.state.settings
        limiter = request.app.state.general_limiter
        key = client_ip(request, settings.trust_proxy) or "unknown"
        decision = limiter.hit(key)

        if not decision.allowed:
            response = JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests, please try again later.",
                    "retryAfter": decision.reset_after,
                },
            )
            response.headers["Retry-After"] = str(decision.reset_after)
        else:
            response = await call_next(request)

        response.headers.update(decision.headers())
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies larger than the configured maximum, declared or streamed."""

    async def dispatch(self, request: Request, call_next):
        max_bytes = request.app.state.settings.max_body_bytes
        declared = request.headers.get("content-length")
        if declared and declared.isdigit():
            too_large = int(declared) > max_bytes
        elif request.method in BODY_METHODS:
            # Chunked bodies carry no length; the read is cached for the route.
            too_large = len(await request.body()) > max_bytes
        else:
            too_large = False

        if too_large:
            return JSONResponse(
                status_code=413,
                content={"error": "Request body too large"},
            )
        return await call_next(request)
