"""
SubmissionRepository

SQL operations for the 'submissions' table.

Specialized Methods:
- insert(fields) -> int: New row, ConstraintViolation on unique-key collision
- update_by_handle / update_by_instance_id: Replace all mutable fields in place
- find_by_handle / find_by_instance_id: Point lookups
- count_with_score_greater_than(score): Basis of the rank formula
- list_ordered_by_score_desc(limit, offset): Page with positional ROW_NUMBER rank
- aggregate_stats() / score_distribution(): Public stats
- count_recent_by_ip(ip, window): Anti-abuse throttle input
- list_recent(limit, offset): Admin listing, newest first
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import case, distinct, func, select, update
from sqlalchemy.exc import IntegrityError

from friday.database.repositories.base import BaseRepository
from friday.errors import ConstraintViolation
from friday.models import MUTABLE_FIELDS, Submission, utcnow

RECENT_WINDOW = timedelta(hours=1)


@dataclass(frozen=True)
class AggregateStats:
    """Population summary over every submission."""

    count: int
    avg: Optional[float]
    max: Optional[int]
    min: Optional[int]
    distinct_os: int
    distinct_arch: int


class SubmissionRepository(BaseRepository[Submission]):
    """Queries and writes against the submissions table."""

    model = Submission

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, fields: Mapping[str, Any]) -> int:
        """Insert a new submission and return its id."""
        row = Submission(**self._mutable(fields))
        self.session.add(row)
        self.flush()
        return row.id

    def update_by_handle(self, handle: str, fields: Mapping[str, Any]) -> int:
        """Overwrite the row owning ``handle``; returns affected row count."""
        values = self._mutable(fields)
        values.pop("handle", None)
        return self._update(Submission.handle == handle, values)

    def update_by_instance_id(self, instance_id: str, fields: Mapping[str, Any]) -> int:
        """Overwrite the row owning ``instance_id``; returns affected row count."""
        values = self._mutable(fields)
        values.pop("instance_id", None)
        return self._update(Submission.instance_id == instance_id, values)

    def _update(self, condition, values: Dict[str, Any]) -> int:
        # Default "auto" synchronization keeps rows already loaded in the session current.
        stmt = update(Submission).where(condition).values(**values)
        try:
            result = self.session.execute(stmt)
        except IntegrityError as e:
            self.session.rollback()
            raise ConstraintViolation(
                "Unique constraint violated on submissions",
                detail=str(e.orig),
            ) from e
        return result.rowcount

    @staticmethod
    def _mutable(fields: Mapping[str, Any]) -> Dict[str, Any]:
        return {key: fields[key] for key in MUTABLE_FIELDS if key in fields}

    # ------------------------------------------------------------------
    # Point lookups
    # ------------------------------------------------------------------

    def find_by_handle(self, handle: str) -> Optional[Submission]:
        return self.session.scalar(select(Submission).where(Submission.handle == handle))

    def find_by_instance_id(self, instance_id: str) -> Optional[Submission]:
        return self.session.scalar(
            select(Submission).where(Submission.instance_id == instance_id)
        )

    # ------------------------------------------------------------------
    # Ranking and listing
    # ------------------------------------------------------------------

    def count_with_score_greater_than(self, score: int) -> int:
        stmt = select(func.count()).select_from(Submission).where(Submission.score > score)
        return self.session.scalar(stmt) or 0

    def count_all(self) -> int:
        return self.count()

    def list_ordered_by_score_desc(
        self, limit: int, offset: int = 0
    ) -> List[Tuple[Submission, int]]:
        """
        One page of the leaderboard, each row with its 1-based position.

        The position comes from ROW_NUMBER over the whole table, so equal
        scores get consecutive ranks (ties broken by insertion order).
        """
        ordering = (Submission.score.desc(), Submission.id.asc())
        position = func.row_number().over(order_by=ordering).label("rank")
        stmt = select(Submission, position).order_by(*ordering).limit(limit).offset(offset)
        return [(row, rank) for row, rank in self.session.execute(stmt).all()]

    def list_recent(self, limit: int, offset: int = 0) -> List[Submission]:
        stmt = (
            select(Submission)
            .order_by(Submission.created_at.desc(), Submission.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(self.session.scalars(stmt).all())

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def aggregate_stats(self) -> AggregateStats:
        stmt = select(
            func.count(),
            func.avg(Submission.score),
            func.max(Submission.score),
            func.min(Submission.score),
            func.count(distinct(Submission.os)),
            func.count(distinct(Submission.arch)),
        ).select_from(Submission)
        count, avg, max_score, min_score, distinct_os, distinct_arch = self.session.execute(
            stmt
        ).one()
        return AggregateStats(
            count=count or 0,
            avg=float(avg) if avg is not None else None,
            max=max_score,
            min=min_score,
            distinct_os=distinct_os or 0,
            distinct_arch=distinct_arch or 0,
        )

    def score_distribution(self) -> Dict[str, int]:
        """Counts per score bucket; empty buckets are omitted."""
        category = case(
            (Submission.score >= 90, "excellent"),
            (Submission.score >= 70, "good"),
            (Submission.score >= 50, "fair"),
            else_="poor",
        ).label("category")
        stmt = select(category, func.count()).group_by(category)
        return {name: count for name, count in self.session.execute(stmt).all()}

    def count_recent_by_ip(
        self,
        ip: Optional[str],
        window: timedelta = RECENT_WINDOW,
        now: Optional[datetime] = None,
    ) -> int:
        """Rows last written from ``ip`` within the trailing ``window``."""
        if not ip:
            return 0
        since = (now or utcnow()) - window
        stmt = (
            select(func.count())
            .select_from(Submission)
            .where(Submission.ip_address == ip)
            .where(Submission.updated_at >= since)
        )
        return self.session.scalar(stmt) or 0
