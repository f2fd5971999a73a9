"""S3-compatible blob store (AWS S3, MinIO, etc.)."""

from __future__ import annotations

import asyncio

import boto3
from botocore.exceptions import ClientError

from assetcache.core.constants import STORAGE_CHUNK_SIZE
from assetcache.infrastructure.exceptions import (
    StorageDownloadError,
    StorageNotFoundError,
    StorageTooLargeError,
    StorageUploadError,
)
from assetcache.shared.telemetry.tracing import traced


class S3BlobStore:
    """S3-compatible storage with server-side encryption.

    Uses boto3 (sync) via asyncio.to_thread for async API. Compatible with
    AWS S3, MinIO, DigitalOcean Spaces.
    """

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        *,
        client=None,
    ) -> None:
        """Initialize S3 client.

        Args:
            bucket: Bucket name.
            region: AWS region.
            endpoint_url: Custom endpoint (MinIO/Spaces).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
            client: Optional preconfigured boto3 client (testing or DI).
        """
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        if client is not None:
            self._client = client
        else:
            extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
            self._client = boto3.client(
                "s3",
                region_name=region,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                **extra,
            )

    @traced("blobstore.s3.fetch")
    async def fetch(self, path: str, max_bytes: int) -> bytes:
        """Download the object at path, bounded by max_bytes."""

        def _get() -> bytes:
            try:
                resp = self._client.get_object(Bucket=self.bucket, Key=path)
            except ClientError as e:
                if e.response["Error"]["Code"] in ("NoSuchKey", "404"):
                    raise StorageNotFoundError(path) from e
                raise StorageDownloadError(path, str(e)) from e
            stream = resp["Body"]
            try:
                size = resp.get("ContentLength")
                if size is not None and size > max_bytes:
                    raise StorageTooLargeError(path, max_bytes, size)
                body = bytearray()
                while True:
                    chunk = stream.read(STORAGE_CHUNK_SIZE)
                    if not chunk:
                        break
                    body.extend(chunk)
                    if len(body) > max_bytes:
                        raise StorageTooLargeError(path, max_bytes)
                return bytes(body)
            finally:
                stream.close()

        try:
            return await asyncio.to_thread(_get)
        except (StorageNotFoundError, StorageTooLargeError, StorageDownloadError):
            raise
        except Exception as e:
            raise StorageDownloadError(path, str(e)) from e

    @traced("blobstore.s3.upload")
    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Upload data to path with the given content type."""

        def _put() -> None:
            self._client.put_object(
                Bucket=self.bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
                ServerSideEncryption="AES256",
            )

        try:
            await asyncio.to_thread(_put)
        except Exception as e:
            raise StorageUploadError(path, str(e)) from e

    async def aclose(self) -> None:
        return None
