"""
Database module initialization.
Exports database components for use throughout the application.
"""

from friday.models import Base
from friday.database.connection import Database
from friday.database.dependencies import get_database, get_db
from friday.database.repositories import AggregateStats, SubmissionRepository

__all__ = [
    # Store
    "Base",
    "Database",
    # Dependencies
    "get_database",
    "get_db",
    # Repositories
    "AggregateStats",
    "SubmissionRepository",
]
