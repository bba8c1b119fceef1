"""Leaderboard read views: listing, stats, instance lookup and admin listing."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from friday.database.repositories import SubmissionRepository
from friday.errors import NotFound, StoreFailure
from friday.schemas import (
    AdminSubmission,
    AdminSubmissionsResponse,
    InstanceResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    Pagination,
    StatsResponse,
)
from friday.services.ranking import RankingEngine
from friday.utils.time_utils import js_round

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(message: str) -> Iterator[None]:
    """Log persistence errors and re-raise them as StoreFailure."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.exception(message)
        raise StoreFailure(message, detail=str(e)) from e


class LeaderboardService:
    """
    Read-side views over the submissions table.
    """

    def __init__(self, session: Session):
        self.repository = SubmissionRepository(session)
        self.ranking = RankingEngine(self.repository)

    def list_leaderboard(self, limit: int, offset: int) -> LeaderboardResponse:
        """
        One page ordered by score, highest first.

        Entry ranks are positions in that ordering (ties get consecutive
        ranks), unlike the shared rank reported by submit and instance lookup.
        """
        with _store_errors("Failed to fetch leaderboard"):
            rows = self.repository.list_ordered_by_score_desc(limit, offset)
            total = self.repository.count_all()

        entries = [LeaderboardEntry(**row.to_dict(), rank=rank) for row, rank in rows]
        return LeaderboardResponse(
            entries=entries,
            pagination=Pagination(
                total=total,
                limit=limit,
                offset=offset,
                has_more=offset + len(entries) < total,
            ),
        )

    def get_stats(self) -> StatsResponse:
        """Aggregate stats plus the score-bucket distribution."""
        with _store_errors("Failed to fetch stats"):
            stats = self.repository.aggregate_stats()
            distribution = self.repository.score_distribution()

        average = js_round(stats.avg * 100) / 100 if stats.avg is not None else 0.0
        return StatsResponse(
            total_submissions=stats.count,
            average_score=average,
            max_score=stats.max,
            min_score=stats.min,
            unique_os=stats.distinct_os,
            unique_arch=stats.distinct_arch,
            distribution=distribution,
        )

    def get_instance(self, instance_id: str) -> InstanceResponse:
        """The instance's row with its shared rank and percentile."""
        with _store_errors("Failed to fetch instance"):
            row = self.repository.find_by_instance_id(instance_id)
            if row is None:
                raise NotFound("Instance not found")
            ranking = self.ranking.rank_score(row.score)

        return InstanceResponse(
            **row.to_dict(),
            rank=ranking.rank,
            total_participants=ranking.total,
            percentile=ranking.percentile,
        )

    def list_submissions(self, limit: int, offset: int) -> AdminSubmissionsResponse:
        """Most recently created submissions first, with captured client data."""
        with _store_errors("Failed to fetch submissions"):
            rows = self.repository.list_recent(limit, offset)

        return AdminSubmissionsResponse(
            submissions=[AdminSubmission(**row.to_dict(include_private=True)) for row in rows]
        )
