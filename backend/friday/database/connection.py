"""
SQLite engine and store lifecycle.

This module provides:
- Database: the store object built once at startup and handed to every request
- WAL / synchronous pragmas applied on each new connection
- Schema creation plus in-place upgrade of legacy tables
- Online snapshot export through the SQLite backup API
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from friday.config import Settings
from friday.models import Base, Submission

logger = logging.getLogger(__name__)

# Columns added after the first release; legacy tables are upgraded in place.
LEGACY_COLUMNS = {
    "handle": "handle TEXT",
    "skill_score": "skill_score INTEGER DEFAULT 0",
    "updated_at": "updated_at DATETIME",
}


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    """Write-ahead logging for a single writer with many readers."""
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
    finally:
        cursor.close()


class Database:
    """
    Store handle owning the engine and session factory.

    Constructed once per application (or script) and passed explicitly;
    nothing in the package reaches for a module-level connection.
    """

    def __init__(self, path: Path, echo: bool = False):
        self.path = Path(path)
        self.engine: Engine = create_engine(
            f"sqlite:///{self.path}",
            echo=echo,
            connect_args={"check_same_thread": False},
            pool_pre_ping=True,
        )
        event.listen(self.engine, "connect", _set_sqlite_pragmas)
        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build the store for the configured database path."""
        return cls(settings.database_path)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Context manager for database sessions in scripts and services.

        Usage:
            with database.session() as db:
                db.add(row)
                db.commit()

        Rolls back on error and always closes the session.
        """
        db = self.session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def ensure_schema(self) -> None:
        """Create the submissions table or upgrade an older one in place."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        Base.metadata.create_all(self.engine)

        existing = {column["name"] for column in inspect(self.engine).get_columns("submissions")}
        with self.engine.begin() as conn:
            for name, ddl in LEGACY_COLUMNS.items():
                if name not in existing:
                    conn.execute(text(f"ALTER TABLE submissions ADD COLUMN {ddl}"))
                    logger.info(f"Migration: added {name} column")

        for index in Submission.__table__.indexes:
            try:
                index.create(self.engine, checkfirst=True)
            except SQLAlchemyError as e:
                # Pre-existing duplicate handles block the unique index; the
                # resolver still keeps new writes consistent.
                logger.warning(f"Could not create index {index.name}: {e}")

    def check_connection(self) -> bool:
        """Check if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database connection check failed: {e}")
            return False

    def file_size(self) -> int:
        """Size of the main database file in bytes, 0 when absent."""
        return self.path.stat().st_size if self.path.exists() else 0

    def backup_to(self, target: Path) -> Path:
        """
        Write a point-in-time copy of the database to ``target``.

        Uses the SQLite online backup API, so concurrent readers and writers
        are not blocked and the copy is consistent.
        """
        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)

        raw = self.engine.raw_connection()
        try:
            destination = sqlite3.connect(str(target))
            try:
                raw.driver_connection.backup(destination)
            finally:
                destination.close()
        finally:
            raw.close()

        logger.info(f"Database snapshot written: {target}")
        return target

    def dispose(self) -> None:
        """Close pooled connections."""
        self.engine.dispose()
