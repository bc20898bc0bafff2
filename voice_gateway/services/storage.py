"""S3 storage helpers for transient request assets."""

from __future__ import annotations

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from voice_gateway.config.settings import settings
from voice_gateway.services.aws import create_boto3_client


class StorageError(RuntimeError):
    """Raised when an S3 object operation fails."""


class S3ObjectStorage:
    """Put/get/delete access to the gateway bucket."""

    def __init__(self, *, bucket: str | None = None, client: Any | None = None) -> None:
        self._bucket = bucket or settings.s3.bucket_name
        self._client = client or create_boto3_client("s3", region_name=settings.s3.region)

    @property
    def bucket(self) -> str:
        return self._bucket

    def object_uri(self, key: str) -> str:
        """Return the ``s3://`` URI Transcribe expects for ``key``."""

        return f"s3://{self._bucket}/{key}"

    async def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str = "audio/mpeg",
    ) -> str:
        """Upload ``data`` under ``key`` and return its ``s3://`` URI."""

        if not self._bucket:
            raise StorageError("S3 bucket name is not configured.")
        try:
            await run_in_threadpool(
                self._client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to upload {key}: {exc}") from exc
        return self.object_uri(key)

    async def get(self, key: str) -> bytes:
        try:
            response = await run_in_threadpool(
                self._client.get_object,
                Bucket=self._bucket,
                Key=key,
            )
            return response["Body"].read()
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to read {key}: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            await run_in_threadpool(
                self._client.delete_object,
                Bucket=self._bucket,
                Key=key,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to delete {key}: {exc}") from exc


__all__ = ["S3ObjectStorage", "StorageError"]
