"""Services module."""

from friday.services.leaderboard_service import LeaderboardService
from friday.services.locks import IdentityLocks
from friday.services.ranking import Ranking, RankingEngine, percentile, rank_from_count
from friday.services.submission_service import (
    ClientInfo,
    SubmissionResult,
    SubmissionService,
    normalize_handle,
    validate_submission,
)

__all__ = [
    "ClientInfo",
    "IdentityLocks",
    "LeaderboardService",
    "Ranking",
    "RankingEngine",
    "SubmissionResult",
    "SubmissionService",
    "normalize_handle",
    "percentile",
    "rank_from_count",
    "validate_submission",
]
