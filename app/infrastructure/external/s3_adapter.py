"""S3 accessor for the uploaded creatives."""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from app.config.settings import S3Config, settings
from app.services.aws import create_boto3_client

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when an asset cannot be read from object storage."""


class S3AssetStore:
    """Download creatives and build their public URLs."""

    def __init__(self, config: Optional[S3Config] = None, client: Any = None) -> None:
        self._config = config or settings.s3
        self._client = client or create_boto3_client(
            "s3", region_name=self._config.region
        )

    @property
    def bucket(self) -> str:
        return self._config.bucket_name

    async def download(self, storage_path: str) -> bytes:
        """Return the raw bytes stored under ``storage_path``."""

        if not storage_path:
            raise StorageError("Storage path is empty.")
        if not self.bucket:
            raise StorageError("S3 bucket name is not configured.")

        key = storage_path.lstrip("/")

        def _read() -> bytes:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()

        try:
            data = await run_in_threadpool(_read)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to download '{key}': {exc}") from exc

        logger.debug("Downloaded %s bytes from s3://%s/%s", len(data), self.bucket, key)
        return data

    def public_url(self, storage_path: str) -> str:
        key = quote(storage_path.lstrip("/"))
        if self._config.public_base_url:
            return f"{self._config.public_base_url.rstrip('/')}/{key}"
        region = self._config.region
        if region == "us-east-1":
            return f"https://{self.bucket}.s3.amazonaws.com/{key}"
        return f"https://{self.bucket}.s3.{region}.amazonaws.com/{key}"


__all__ = ["S3AssetStore", "StorageError"]
