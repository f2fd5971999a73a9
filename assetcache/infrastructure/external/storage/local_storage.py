"""Local filesystem blob store with path validation and atomic writes.

Mirrors the remote namespace as a directory tree under storage_root.
Used for development, offline runs and tests.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import aiofiles
import aiofiles.os

from assetcache.core.constants import STORAGE_CHUNK_SIZE
from assetcache.infrastructure.exceptions import (
    StorageDownloadError,
    StorageNotFoundError,
    StoragePermissionError,
    StorageTooLargeError,
    StorageUploadError,
)
from assetcache.shared.telemetry.tracing import traced


class LocalBlobStore:
    """Filesystem blob store rooted at storage_root.

    Paths are validated against storage_root (no traversal). Writes use
    temp file + rename.
    """

    def __init__(self, storage_root: str) -> None:
        """Initialize local storage.

        Args:
            storage_root: Base directory for all objects.
        """
        self.storage_root = Path(storage_root).expanduser().resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _get_full_path(self, path: str) -> Path:
        """Resolve and validate path under storage_root. Raises StoragePermissionError if traversal."""
        full_path = (self.storage_root / path).resolve()
        try:
            full_path.relative_to(self.storage_root)
        except ValueError as e:
            raise StoragePermissionError(path, "path_validation") from e
        return full_path

    @traced("blobstore.local.fetch")
    async def fetch(self, path: str, max_bytes: int) -> bytes:
        """Read the object at path, bounded by max_bytes."""
        file_path = self._get_full_path(path)
        try:
            size = (await aiofiles.os.stat(file_path)).st_size
        except FileNotFoundError as e:
            raise StorageNotFoundError(path) from e
        except OSError as e:
            raise StorageDownloadError(path, str(e)) from e
        if size > max_bytes:
            raise StorageTooLargeError(path, max_bytes, size)
        try:
            body = bytearray()
            async with aiofiles.open(file_path, "rb") as f:
                while True:
                    chunk = await f.read(STORAGE_CHUNK_SIZE)
                    if not chunk:
                        break
                    body.extend(chunk)
                    # File may grow between stat and read
                    if len(body) > max_bytes:
                        raise StorageTooLargeError(path, max_bytes)
            return bytes(body)
        except OSError as e:
            raise StorageDownloadError(path, str(e)) from e

    @traced("blobstore.local.upload")
    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Write data to path atomically. content_type is not persisted."""
        target_path = self._get_full_path(path)
        try:
            target_path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=target_path.parent,
                prefix=".tmp_",
                suffix=target_path.suffix,
            )
            os.close(temp_fd)
            try:
                async with aiofiles.open(temp_path, "wb") as f:
                    await f.write(data)
                os.chmod(temp_path, 0o640)
                await aiofiles.os.replace(temp_path, target_path)
            finally:
                if Path(temp_path).exists():
                    os.unlink(temp_path)
        except OSError as e:
            raise StorageUploadError(path, str(e)) from e

    async def aclose(self) -> None:
        return None
