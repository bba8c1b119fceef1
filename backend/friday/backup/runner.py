"""Point-in-time snapshot, compression, upload and retention of the database."""

import gzip
import logging
import shutil
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from friday.backup.exceptions import BackupError, UploadError
from friday.backup.storage import S3Uploader, Uploader
from friday.config import Settings
from friday.database import Database
from friday.utils.time_utils import utc_iso_now

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "leaderboard_backup_"
COMPRESSED_SUFFIX = ".gz"


@dataclass
class BackupReport:
    """What one backup run produced."""

    archive: Path
    size_bytes: int
    uploaded_to: Optional[str] = None
    upload_error: Optional[str] = None
    deleted: List[Path] = field(default_factory=list)


def snapshot_filename(now: datetime) -> str:
    """``leaderboard_backup_2024-05-01T12-00-00-000Z.db``"""
    stamp = utc_iso_now(now).replace(":", "-").replace(".", "-")
    return f"{BACKUP_PREFIX}{stamp}.db"


def export_snapshot(database: Database, target: Path) -> Path:
    """Consistent copy of a live database, shared by the CLI job and the admin export."""
    try:
        return database.backup_to(target)
    except (SQLAlchemyError, sqlite3.Error, OSError) as e:
        target.unlink(missing_ok=True)
        raise BackupError(f"Snapshot failed: {e}") from e


def compress(path: Path) -> Path:
    """Gzip ``path`` next to itself and remove the uncompressed file."""
    archive = path.with_name(path.name + COMPRESSED_SUFFIX)
    with open(path, "rb") as src, gzip.open(archive, "wb") as dst:
        shutil.copyfileobj(src, dst)
    path.unlink()
    return archive


def cleanup_old_backups(data_dir: Path, retention_days: int, now: datetime) -> List[Path]:
    """Delete compressed snapshots whose modification time is past retention."""
    cutoff = (now - timedelta(days=retention_days)).timestamp()
    deleted = []
    for candidate in sorted(data_dir.glob(f"{BACKUP_PREFIX}*{COMPRESSED_SUFFIX}")):
        if candidate.stat().st_mtime < cutoff:
            candidate.unlink()
            deleted.append(candidate)
            logger.info(f"Deleted old backup: {candidate.name}")
    return deleted


def run_backup(
    settings: Settings,
    uploader: Optional[Uploader] = None,
    now: Optional[datetime] = None,
) -> BackupReport:
    """
    Snapshot, compress, optionally upload, then prune old local archives.

    Raises BackupError when the database is missing or the snapshot fails.
    Upload failures are logged and recorded on the report only.
    """
    now = now or datetime.now(timezone.utc)
    db_path = settings.database_path
    data_dir = settings.data_dir

    logger.info("Starting FRIDAY backup...")
    if not db_path.exists():
        raise BackupError(f"Database not found at {db_path}")

    database = Database(db_path)
    try:
        snapshot = export_snapshot(database, data_dir / snapshot_filename(now))
    finally:
        database.dispose()
    logger.info(f"Backup created: {snapshot}")

    archive = compress(snapshot)
    size = archive.stat().st_size
    logger.info(f"Compressed size: {size / 1024:.2f} KB")

    report = BackupReport(archive=archive, size_bytes=size)

    if uploader is None:
        uploader = S3Uploader.from_settings(settings)
    if uploader is not None:
        logger.info("Uploading to S3...")
        try:
            report.uploaded_to = uploader.upload(archive)
        except UploadError as e:
            logger.error(str(e))
            report.upload_error = str(e)

    logger.info(f"Cleaning old backups (retention: {settings.backup_retention_days} days)...")
    report.deleted = cleanup_old_backups(data_dir, settings.backup_retention_days, now)
    logger.info(f"Backup complete. Deleted {len(report.deleted)} old backups.")
    return report
