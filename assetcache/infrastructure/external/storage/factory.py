"""Blob store factory: creates the configured backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from assetcache.infrastructure.external.storage.protocol import BlobStoreProtocol

if TYPE_CHECKING:
    from assetcache.core.config import Settings


class StorageFactory:
    """Factory for blob store instances based on configuration."""

    @staticmethod
    def create_blob_store(settings: "Settings | None" = None) -> BlobStoreProtocol:
        """Create blob store from settings.

        Args:
            settings: Application settings; if None, uses get_settings().

        Returns:
            FirebaseBlobStore, S3BlobStore, LocalBlobStore or HttpBlobStore.

        Raises:
            ValueError: Unknown backend or missing required config.
        """
        from assetcache.core.config import get_settings

        s = settings or get_settings()
        backend = s.storage_backend.lower()

        if backend == "firebase":
            from assetcache.infrastructure.external.storage.firebase_storage import (
                FirebaseBlobStore,
            )
            from assetcache.infrastructure.firebase.credentials import (
                load_storage_credentials,
            )

            if not s.firebase_storage_bucket:
                raise ValueError("FIREBASE_STORAGE_BUCKET required for firebase backend")
            return FirebaseBlobStore(
                bucket=s.firebase_storage_bucket,
                credentials=load_storage_credentials(s),
                timeout=s.http_timeout_seconds,
            )
        if backend == "local":
            from assetcache.infrastructure.external.storage.local_storage import (
                LocalBlobStore,
            )

            if not s.storage_root:
                raise ValueError("STORAGE_ROOT required for local backend")
            return LocalBlobStore(storage_root=s.storage_root)
        if backend == "http":
            from assetcache.infrastructure.external.storage.http_storage import (
                HttpBlobStore,
            )

            return HttpBlobStore(
                base_url=s.http_base_url,
                timeout=s.http_timeout_seconds,
            )
        if backend == "s3":
            if not s.s3_bucket:
                raise ValueError("S3_BUCKET required for s3 backend")
            try:
                from assetcache.infrastructure.external.storage.s3_storage import (
                    S3BlobStore,
                )
            except ImportError as e:
                raise ValueError(
                    "S3 backend requires boto3. Install with: uv sync --extra storage"
                ) from e
            return S3BlobStore(
                bucket=s.s3_bucket,
                region=s.s3_region,
                endpoint_url=s.s3_endpoint_url,
                access_key=s.s3_access_key,
                secret_key=(
                    s.s3_secret_key.get_secret_value() if s.s3_secret_key else None
                ),
            )
        raise ValueError(
            f"Unknown storage backend: {backend}. "
            "Supported: 'firebase', 's3', 'local', 'http'"
        )
