"""
Unit Tests: Backup collaborator

Test cases:
- Snapshot is a consistent, gzip-compressed SQLite file
- Upload success and failure (failure is non-fatal)
- Retention removes only archives older than the window
- Missing database aborts the run
- S3 key and storage class
"""

import gzip
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from botocore.exceptions import ClientError

from friday.backup import (
    BACKUP_PREFIX,
    BackupError,
    S3Uploader,
    UploadError,
    cleanup_old_backups,
    run_backup,
    snapshot_filename,
)

SQLITE_HEADER = b"SQLite format 3\x00"
NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class RecordingUploader:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploaded = []

    def upload(self, path: Path) -> str:
        if self.fail:
            raise UploadError("S3 upload failed: access denied")
        self.uploaded.append(path)
        return f"s3://bucket/backups/{path.name}"


class FakeS3Client:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def upload_file(self, filename, bucket, key, ExtraArgs=None):
        if self.error is not None:
            raise self.error
        self.calls.append((filename, bucket, key, ExtraArgs))


def test_snapshot_filename():
    assert snapshot_filename(NOW) == "leaderboard_backup_2024-05-01T12-00-00-000Z.db"


def test_run_backup_compresses_and_uploads(settings, seed):
    seed("friday-a", 77)
    uploader = RecordingUploader()

    report = run_backup(settings, uploader=uploader, now=NOW)

    assert report.archive.name == "leaderboard_backup_2024-05-01T12-00-00-000Z.db.gz"
    assert report.archive.exists()
    assert not report.archive.with_suffix("").exists()
    assert report.size_bytes == report.archive.stat().st_size
    with gzip.open(report.archive, "rb") as f:
        assert f.read(len(SQLITE_HEADER)) == SQLITE_HEADER
    assert uploader.uploaded == [report.archive]
    assert report.uploaded_to.startswith("s3://")
    assert report.upload_error is None


def test_upload_failure_is_not_fatal(settings, seed):
    seed("friday-a", 77)

    report = run_backup(settings, uploader=RecordingUploader(fail=True), now=NOW)

    assert report.archive.exists()
    assert report.uploaded_to is None
    assert "access denied" in report.upload_error


def test_run_backup_without_uploader_configured(settings, database):
    report = run_backup(settings, now=NOW)
    assert report.uploaded_to is None
    assert report.upload_error is None


def test_missing_database(settings):
    with pytest.raises(BackupError, match="Database not found"):
        run_backup(settings, uploader=RecordingUploader(), now=NOW)


def test_retention(tmp_path):
    now = datetime.now(timezone.utc)
    old = tmp_path / f"{BACKUP_PREFIX}old.db.gz"
    fresh = tmp_path / f"{BACKUP_PREFIX}fresh.db.gz"
    unrelated = tmp_path / "notes.db.gz"
    for path in (old, fresh, unrelated):
        path.write_bytes(b"x")
    stale = (now - timedelta(days=8)).timestamp()
    os.utime(old, (stale, stale))
    os.utime(unrelated, (stale, stale))

    deleted = cleanup_old_backups(tmp_path, retention_days=7, now=now)

    assert deleted == [old]
    assert not old.exists()
    assert fresh.exists()
    assert unrelated.exists()


def test_s3_uploader_key_and_storage_class(tmp_path):
    archive = tmp_path / "leaderboard_backup_x.db.gz"
    archive.write_bytes(b"x")
    client = FakeS3Client()

    uri = S3Uploader("friday-backups", client=client).upload(archive)

    assert uri == "s3://friday-backups/backups/leaderboard_backup_x.db.gz"
    assert client.calls == [
        (str(archive), "friday-backups", "backups/leaderboard_backup_x.db.gz", {"StorageClass": "STANDARD_IA"})
    ]


def test_s3_uploader_wraps_client_errors(tmp_path):
    archive = tmp_path / "a.db.gz"
    archive.write_bytes(b"x")
    error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")

    with pytest.raises(UploadError):
        S3Uploader("friday-backups", client=FakeS3Client(error=error)).upload(archive)


def test_s3_uploader_from_settings_requires_configuration(settings):
    assert S3Uploader.from_settings(settings) is None
