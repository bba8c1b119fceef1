"""
Repository Pattern for SQLite

Clean database abstraction layer providing:
- Testability against a throwaway database file
- Centralized query logic
- Unique-key collisions surfaced as ConstraintViolation

Repositories:
- BaseRepository: Common lookups and flush handling
- SubmissionRepository: Leaderboard writes, ranking counts, listings and stats
"""

from friday.database.repositories.base import BaseRepository
from friday.database.repositories.submissions import (
    AggregateStats,
    SubmissionRepository,
)

__all__ = ["AggregateStats", "BaseRepository", "SubmissionRepository"]
