"""Database models module."""

from friday.models.base import Base, TimestampMixin, utcnow
from friday.models.submission import (
    INSTANCE_ID_PATTERN,
    MUTABLE_FIELDS,
    UNKNOWN_LABEL,
    Submission,
)

__all__ = [
    "Base",
    "INSTANCE_ID_PATTERN",
    "MUTABLE_FIELDS",
    "UNKNOWN_LABEL",
    "Submission",
    "TimestampMixin",
    "utcnow",
]
