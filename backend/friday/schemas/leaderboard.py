"""Leaderboard Pydantic schemas."""

from datetime import datetime
from typing import Annotated, Dict, List, Optional, Union

from pydantic import Field, StrictFloat, StrictInt

from friday.schemas.common import BaseSchema

# SQLite INTEGER is a signed 64-bit value.
SubScore = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]


class SubmissionRequest(BaseSchema):
    """
    Body of POST /api/leaderboard/submit.

    Presence, range and format checks happen in the submission service so
    that every caller gets the same error messages; this model only rejects
    values of the wrong JSON type and sub-scores the store cannot hold.
    """

    instance_id: Optional[str] = None
    handle: Optional[str] = None
    score: Optional[Union[StrictInt, StrictFloat]] = None
    os: Optional[str] = None
    arch: Optional[str] = None
    timestamp: Optional[str] = None
    network_score: Optional[SubScore] = None
    perm_score: Optional[SubScore] = None
    gateway_score: Optional[SubScore] = None
    channel_score: Optional[SubScore] = None
    skill_score: Optional[SubScore] = None


class SubmissionResponse(BaseSchema):
    """Result of a submission: write outcome plus post-write ranking."""

    success: bool = True
    updated: bool
    rank: int
    total_participants: int
    percentile: int
    instance_id: str
    handle: Optional[str] = None


class SubmissionFields(BaseSchema):
    """Public columns of a submission row."""

    instance_id: str
    handle: Optional[str] = None
    score: int
    os: Optional[str] = None
    arch: Optional[str] = None
    timestamp: str
    network_score: int = 0
    perm_score: int = 0
    gateway_score: int = 0
    channel_score: int = 0
    skill_score: int = 0


class LeaderboardEntry(SubmissionFields):
    """One leaderboard row with its position in the score ordering."""

    rank: int


class Pagination(BaseSchema):
    """Paging metadata for list endpoints."""

    total: int
    limit: int
    offset: int
    has_more: bool = Field(alias="hasMore")


class LeaderboardResponse(BaseSchema):
    """Response of GET /api/leaderboard."""

    entries: List[LeaderboardEntry]
    pagination: Pagination


class StatsResponse(BaseSchema):
    """Response of GET /api/leaderboard/stats."""

    total_submissions: int = Field(alias="totalSubmissions")
    average_score: float = Field(alias="averageScore")
    max_score: Optional[int] = Field(default=None, alias="maxScore")
    min_score: Optional[int] = Field(default=None, alias="minScore")
    unique_os: int = Field(alias="uniqueOS")
    unique_arch: int = Field(alias="uniqueArch")
    distribution: Dict[str, int]


class InstanceResponse(SubmissionFields):
    """Response of GET /api/instance/{id}: the row and its ranking."""

    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    rank: int
    total_participants: int
    percentile: int
