"""Common Pydantic schemas and base classes."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class ErrorResponse(BaseSchema):
    """Body of every non-2xx JSON response."""

    error: str
    retry_after: Optional[int] = Field(default=None, alias="retryAfter")
    path: Optional[str] = None
    detail: Optional[Any] = None
