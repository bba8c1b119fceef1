"""
Time Utilities

Functions:
- utc_iso_now(): Current UTC time as an ISO-8601 string with a Z suffix
- js_round(value): Half-up rounding, matching the scores clients already store
"""

import math
from datetime import datetime, timezone
from typing import Optional


def utc_iso_now(now: Optional[datetime] = None) -> str:
    """ISO-8601 with millisecond precision, e.g. ``2024-05-01T12:00:00.000Z``."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def js_round(value: float) -> int:
    """Round half up (2.5 -> 3), unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))
