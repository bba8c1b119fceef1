"""Health check schema."""

from pydantic import Field

from friday.schemas.common import BaseSchema


class HealthResponse(BaseSchema):
    """Response of GET /api/health."""

    status: str
    timestamp: str
    version: str
    environment: str
    database: str
    database_size: int = Field(alias="databaseSize")
    uptime: int
    cold_start: bool = Field(alias="coldStart")
    instance_id: str = Field(alias="instanceId")
