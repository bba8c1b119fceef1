"""Remote object storage for compressed snapshots."""

import logging
from pathlib import Path
from typing import Optional, Protocol

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from friday.backup.exceptions import UploadError
from friday.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "backups/"
DEFAULT_STORAGE_CLASS = "STANDARD_IA"


class Uploader(Protocol):
    """Anything that can ship a local file to remote storage."""

    def upload(self, path: Path) -> str:
        """Upload ``path`` and return its remote URI."""
        ...


class S3Uploader:
    """Uploads snapshots to ``s3://<bucket>/backups/`` with infrequent-access storage."""

    def __init__(
        self,
        bucket: str,
        region_name: str = "us-east-1",
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        prefix: str = DEFAULT_PREFIX,
        storage_class: str = DEFAULT_STORAGE_CLASS,
        client=None,
    ):
        self.bucket = bucket
        self.prefix = prefix
        self.storage_class = storage_class
        self._client = client or boto3.client(
            "s3",
            region_name=region_name,
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            config=BotoConfig(retries={"max_attempts": 3, "mode": "standard"}),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["S3Uploader"]:
        """Uploader for the configured bucket, or None when upload is not configured."""
        if not settings.s3_upload_enabled:
            return None
        return cls(
            bucket=settings.s3_bucket_name,
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )

    def upload(self, path: Path) -> str:
        key = f"{self.prefix}{path.name}"
        try:
            self._client.upload_file(
                str(path),
                self.bucket,
                key,
                ExtraArgs={"StorageClass": self.storage_class},
            )
        except (BotoCoreError, ClientError) as e:
            raise UploadError(f"S3 upload failed for {path.name}: {e}") from e
        uri = f"s3://{self.bucket}/{key}"
        logger.info(f"S3 upload complete: {uri}")
        return uri
