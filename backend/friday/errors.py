"""Leaderboard service exceptions.

Every exception carries the HTTP status the API layer should answer with;
``friday.api.server`` turns them into ``{"error": ...}`` JSON bodies.
"""

from typing import Optional


class FridayError(Exception):
    """Base leaderboard exception."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(FridayError):
    """Malformed or out-of-range submission input."""

    status_code = 400


class RateLimitExceeded(FridayError):
    """Too many requests from one client."""

    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded", retry_after: int = 3600):
        super().__init__(message)
        self.retry_after = retry_after


class NotFound(FridayError):
    """Requested resource does not exist."""

    status_code = 404


class Unauthorized(FridayError):
    """Missing or malformed credentials."""

    status_code = 401


class Forbidden(FridayError):
    """Credentials present but wrong."""

    status_code = 403


class FeatureDisabled(FridayError):
    """Feature toggled off by configuration."""

    status_code = 503

    def __init__(self, message: str, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after


class StoreFailure(FridayError):
    """Unexpected persistence error."""

    status_code = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


class ConstraintViolation(StoreFailure):
    """A write collided with a unique key (instance id or handle)."""

    pass
