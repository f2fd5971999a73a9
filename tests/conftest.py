"""Pytest configuration and fixtures for assetcache.

FakeBlobStore stands in for the network tier; disk fixtures live under
pytest's tmp_path so nothing touches the real cache directory.
"""

import asyncio
from io import BytesIO

import pytest

from assetcache.application.services.asset_cache_service import AssetCacheService
from assetcache.application.services.codecs import RawBytesCodec
from assetcache.core.config import get_settings
from assetcache.infrastructure.cache.disk_cache import DiskCache
from assetcache.infrastructure.exceptions import (
    StorageDownloadError,
    StorageNotFoundError,
    StorageTooLargeError,
    StorageUploadError,
)


class FakeBlobStore:
    """In-memory BlobStoreProtocol with call recording and failure injection."""

    def __init__(self, objects: dict[str, bytes] | None = None, delay: float = 0.0) -> None:
        self.objects = dict(objects or {})
        self.delay = delay
        self.fetch_calls: list[str] = []
        self.uploads: list[tuple[str, bytes, str]] = []
        self.fail_fetches = 0
        self.fail_uploads = False
        self.closed = False

    async def fetch(self, path: str, max_bytes: int) -> bytes:
        self.fetch_calls.append(path)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_fetches:
            self.fail_fetches -= 1
            raise StorageDownloadError(path, "simulated outage")
        if path not in self.objects:
            raise StorageNotFoundError(path)
        data = self.objects[path]
        if len(data) > max_bytes:
            raise StorageTooLargeError(path, max_bytes, len(data))
        return data

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        if self.fail_uploads:
            raise StorageUploadError(path, "simulated rejection")
        self.uploads.append((path, data, content_type))
        self.objects[path] = data

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Each test sees settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def disk_cache(tmp_path) -> DiskCache:
    return DiskCache(tmp_path / "StorageImages")


@pytest.fixture
def service(blob_store: FakeBlobStore, disk_cache: DiskCache) -> AssetCacheService:
    """Service over the fake store with raw-bytes assets."""
    return AssetCacheService(
        blob_store=blob_store,
        codec=RawBytesCodec(),
        disk_cache=disk_cache,
    )


@pytest.fixture
def png_bytes() -> bytes:
    """A small RGBA PNG (alpha forces conversion on JPEG encode)."""
    from PIL import Image

    out = BytesIO()
    Image.new("RGBA", (8, 6), (200, 40, 40, 128)).save(out, "PNG")
    return out.getvalue()


@pytest.fixture
def make_blob_store():
    """Factory for FakeBlobStore with preset objects and latency."""
    return FakeBlobStore
