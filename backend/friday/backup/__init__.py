"""Out-of-band database backups.

This package provides:
- run_backup: snapshot, gzip, optional S3 upload and local retention
- export_snapshot: the consistent-copy primitive the admin export also uses
- S3Uploader: boto3-backed remote storage
"""

from .exceptions import BackupError, UploadError
from .runner import (
    BACKUP_PREFIX,
    BackupReport,
    cleanup_old_backups,
    compress,
    export_snapshot,
    run_backup,
    snapshot_filename,
)
from .storage import S3Uploader, Uploader

__all__ = [
    "BACKUP_PREFIX",
    "BackupError",
    "BackupReport",
    "S3Uploader",
    "UploadError",
    "Uploader",
    "cleanup_old_backups",
    "compress",
    "export_snapshot",
    "run_backup",
    "snapshot_filename",
]
