"""Admin API Pydantic schemas."""

from datetime import datetime
from typing import List, Optional

from friday.schemas.common import BaseSchema
from friday.schemas.leaderboard import SubmissionFields


class AdminSubmission(SubmissionFields):
    """Full submission row, including what the server captured."""

    id: int
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class AdminSubmissionsResponse(BaseSchema):
    """Response of GET /api/admin/submissions."""

    submissions: List[AdminSubmission]
