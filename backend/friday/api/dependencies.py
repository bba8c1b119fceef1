"""FastAPI dependencies: settings, feature gates, admin auth, paging and client info."""

import hmac
import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, Header, Query, Request
from sqlalchemy.orm import Session

from friday.config import Settings
from friday.database import get_db
from friday.errors import FeatureDisabled, Forbidden, RateLimitExceeded, Unauthorized
from friday.services import ClientInfo, IdentityLocks, LeaderboardService, SubmissionService

logger = logging.getLogger(__name__)

FEATURE_RETRY_AFTER = 60
BEARER_PREFIX = "Bearer "

_leading_int = re.compile(r"^\s*([+-]?\d+)")


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_identity_locks(request: Request) -> IdentityLocks:
    return request.app.state.identity_locks


# ============================================================================
# Client information
# ============================================================================


def client_ip(request: Request, trust_proxy: bool = False) -> Optional[str]:
    """Client address, optionally taken from the first X-Forwarded-For hop."""
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_client_info(
    request: Request, settings: Settings = Depends(get_app_settings)
) -> ClientInfo:
    return ClientInfo(
        ip_address=client_ip(request, settings.trust_proxy),
        user_agent=request.headers.get("user-agent"),
    )


def enforce_submission_limit(request: Request, instance_id: Optional[str]) -> None:
    """Hourly per-instance submit limiter; falls back to the client address."""
    settings: Settings = request.app.state.settings
    key = instance_id or client_ip(request, settings.trust_proxy) or "unknown"
    limiter = request.app.state.submit_limiter
    if not limiter.hit(key).allowed:
        raise RateLimitExceeded(retry_after=limiter.window_length)


# ============================================================================
# Services
# ============================================================================


def get_leaderboard_service(db: Session = Depends(get_db)) -> LeaderboardService:
    return LeaderboardService(db)


def get_submission_service(
    db: Session = Depends(get_db),
    locks: IdentityLocks = Depends(get_identity_locks),
    settings: Settings = Depends(get_app_settings),
) -> SubmissionService:
    return SubmissionService(db, locks, rate_limit=settings.leaderboard_rate_limit)


# ============================================================================
# Feature toggles
# ============================================================================


def require_leaderboard(settings: Settings = Depends(get_app_settings)) -> None:
    if not settings.enable_leaderboard:
        raise FeatureDisabled("Leaderboard temporarily unavailable", retry_after=FEATURE_RETRY_AFTER)


def require_submissions(settings: Settings = Depends(get_app_settings)) -> None:
    if not settings.enable_leaderboard:
        raise FeatureDisabled(
            "Leaderboard submissions temporarily unavailable",
            retry_after=FEATURE_RETRY_AFTER,
        )


def require_public_stats(settings: Settings = Depends(get_app_settings)) -> None:
    if not settings.enable_public_stats:
        raise FeatureDisabled("Stats temporarily unavailable")


# ============================================================================
# Admin authentication
# ============================================================================


def require_admin(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Static bearer token check; without a configured token nobody is admin."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise Unauthorized("Unauthorized")

    token = authorization[len(BEARER_PREFIX):]
    expected = settings.admin_token
    if not expected or not hmac.compare_digest(token.encode(), expected.encode()):
        logger.warning("Admin request with invalid token")
        raise Forbidden("Forbidden")


# ============================================================================
# Paging
# ============================================================================


@dataclass(frozen=True)
class PageParams:
    limit: int
    offset: int


def _parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    match = _leading_int.match(raw)
    return int(match.group(1)) if match else None


def parse_limit(raw: Optional[str], default: int, maximum: int) -> int:
    """Leading integer of ``raw``; missing, zero or negative means ``default``."""
    value = _parse_int(raw)
    if not value or value < 0:
        value = default
    return min(value, maximum)


def parse_offset(raw: Optional[str]) -> int:
    value = _parse_int(raw)
    return value if value and value > 0 else 0


def page_params(default_limit: int, max_limit: int) -> Callable[..., PageParams]:
    """Lenient limit/offset query parsing; bad values fall back instead of failing."""

    def dependency(
        limit: Optional[str] = Query(default=None),
        offset: Optional[str] = Query(default=None),
    ) -> PageParams:
        return PageParams(
            limit=parse_limit(limit, default_limit, max_limit),
            offset=parse_offset(offset),
        )

    return dependency
