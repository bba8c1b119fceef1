"""Request and response schemas."""

from friday.schemas.admin import AdminSubmission, AdminSubmissionsResponse
from friday.schemas.common import BaseSchema, ErrorResponse
from friday.schemas.health import HealthResponse
from friday.schemas.leaderboard import (
    InstanceResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    Pagination,
    StatsResponse,
    SubmissionFields,
    SubmissionRequest,
    SubmissionResponse,
)

__all__ = [
    "AdminSubmission",
    "AdminSubmissionsResponse",
    "BaseSchema",
    "ErrorResponse",
    "HealthResponse",
    "InstanceResponse",
    "LeaderboardEntry",
    "LeaderboardResponse",
    "Pagination",
    "StatsResponse",
    "SubmissionFields",
    "SubmissionRequest",
    "SubmissionResponse",
]
