"""
FastAPI dependency injection for database sessions.
Provides database session dependencies for API endpoints.
"""

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from friday.database.connection import Database


def get_database(request: Request) -> Database:
    """The store attached to the running application."""
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a database session.

    Usage:
        @router.get("/leaderboard")
        def get_leaderboard(db: Session = Depends(get_db)):
            ...

    Yields:
        Session: SQLAlchemy session bound to the application's store
    """
    with get_database(request).session() as db:
        yield db
