"""Backup exceptions."""


class BackupError(Exception):
    """Snapshot could not be produced."""

    pass


class UploadError(BackupError):
    """Remote upload failed; local snapshot is still valid."""

    pass
