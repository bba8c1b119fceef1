"""
FastAPI application factory for the FRIDAY leaderboard.

create_app wires together:
- the SQLite store and per-identity locks on app.state
- CORS, gzip, access logging, rate limiting and body size limits
- JSON error responses for every failure path
- Logfire observability when a token is configured
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from friday import __version__
from friday.api.middleware import BodySizeLimitMiddleware, RateLimitMiddleware, RequestLoggingMiddleware
from friday.api.routes import admin_router, health_router, instances_router, leaderboard_router
from friday.config import Settings, get_settings
from friday.database import Database
from friday.errors import FridayError, StoreFailure
from friday.observability import initialize_logfire
from friday.ratelimit import RateLimiter
from friday.services import IdentityLocks

logger = logging.getLogger(__name__)

SUBMIT_WINDOW_SECONDS = 3600
GZIP_MINIMUM_SIZE = 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the store on startup and release it on shutdown."""
    settings: Settings = app.state.settings
    database: Database = app.state.database

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    database.ensure_schema()

    boot_ms = int((time.monotonic() - app.state.started_at) * 1000)
    logger.info(f"FRIDAY Leaderboard API v{settings.app_version} ({settings.environment})")
    logger.info(f"Database: {database.path}")
    logger.info(f"Boot time: {boot_ms}ms")

    yield

    logger.info("Shutting down FRIDAY Leaderboard API")
    database.dispose()


def _error_response(status_code: int, content: dict, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Map every failure onto a ``{"error": ...}`` JSON body."""

    @app.exception_handler(FridayError)
    async def friday_error_handler(request: Request, exc: FridayError):
        content = {"error": exc.message}
        headers = {}

        retry_after = getattr(exc, "retry_after", None)
        if retry_after is not None:
            content["retryAfter"] = retry_after
            headers["Retry-After"] = str(retry_after)

        if isinstance(exc, StoreFailure) and exc.detail and settings.is_development:
            content["detail"] = exc.detail

        return _error_response(exc.status_code, content, headers or None)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if any(error.get("type") == "json_invalid" for error in errors):
            return _error_response(400, {"error": "Malformed JSON body"})
        return _error_response(
            400,
            {"error": "Invalid request body", "details": jsonable_encoder(errors)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _error_response(404, {"error": "Not found", "path": request.url.path})
        return _error_response(exc.status_code, {"error": str(exc.detail)}, exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        message = "Internal server error" if settings.is_production else str(exc)
        return _error_response(500, {"error": message})


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build a fully wired application; each call gets fresh limiter and lock state."""
    settings = settings or get_settings()
    database = database or Database.from_settings(settings)

    app = FastAPI(
        title="FRIDAY Leaderboard API",
        description="Score submissions, rankings and stats for FRIDAY security audits",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.started_at = time.monotonic()
    app.state.identity_locks = IdentityLocks()
    app.state.general_limiter = RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_ms / 1000,
    )
    app.state.submit_limiter = RateLimiter(
        max_requests=settings.leaderboard_rate_limit,
        window_seconds=SUBMIT_WINDOW_SECONDS,
    )

    # Last added runs first: CORS wraps everything, body size is checked last.
    app.add_middleware(BodySizeLimitMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=GZIP_MINIMUM_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app, settings)

    app.include_router(health_router)
    app.include_router(leaderboard_router)
    app.include_router(instances_router)
    app.include_router(admin_router)

    initialize_logfire(settings, app=app, engine=database.engine)

    return app
