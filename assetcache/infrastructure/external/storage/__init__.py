"""Storage: Firebase, S3-compatible, local filesystem and HTTP backends.

Factory creates backend from assetcache.core.config. Implementations are
loaded lazily inside StorageFactory.create_blob_store() so that:
- Default backends only require httpx/aiofiles (main dependencies).
- S3 backend only loads boto3 when used; install with: uv sync --extra storage.

Implementations implement BlobStoreProtocol (fetch, upload, aclose).
"""

from assetcache.infrastructure.external.storage.factory import StorageFactory
from assetcache.infrastructure.external.storage.protocol import BlobStoreProtocol

__all__ = [
    "BlobStoreProtocol",
    "StorageFactory",
]
