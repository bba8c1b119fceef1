"""Rank and percentile calculations.

Rank is "1 + number of strictly higher scores": rank 1 is the best score and
equal scores share a rank. Percentile is rank over population scaled to
0-100 and rounded half up; it is not a statistical percentile, and clients
depend on this exact formula.
"""

from dataclasses import dataclass

from friday.database.repositories import SubmissionRepository
from friday.utils.time_utils import js_round


@dataclass(frozen=True)
class Ranking:
    """Where one score sits in the current population."""

    rank: int
    total: int
    percentile: int


def rank_from_count(higher_count: int) -> int:
    """Rank given how many submissions scored strictly higher."""
    return higher_count + 1


def percentile(rank: int, total: int) -> int:
    """``round(rank / total * 100)`` with half-up rounding; 0 for an empty board."""
    if total <= 0:
        return 0
    return js_round(rank / total * 100)


class RankingEngine:
    """Computes rankings against the store's current population."""

    def __init__(self, repository: SubmissionRepository):
        self.repository = repository

    def rank_score(self, score: int) -> Ranking:
        rank = rank_from_count(self.repository.count_with_score_greater_than(score))
        total = self.repository.count_all()
        return Ranking(rank=rank, total=total, percentile=percentile(rank, total))
