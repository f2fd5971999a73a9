"""Disk tier: raw asset bytes under a flat cache directory.

Purely an optimization. Reads that fail are misses and writes that fail
are dropped; neither raises to the caller. The subsystem never deletes
files here.
"""

from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path

import aiofiles
import aiofiles.os
import aiofiles.tempfile

from assetcache.infrastructure.cache.keys import disk_file_name

logger = logging.getLogger(__name__)


class DiskCache:
    """Best-effort persistent byte store keyed by asset key.

    One file per key named by disk_file_name(key). Writes go to a temp
    file in the same directory and are renamed into place, so readers
    never see a partial file.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        """Initialize disk cache.

        Args:
            directory: Cache directory; created on first write if missing.
        """
        self.directory = Path(directory).expanduser()
        self._dir_ready = False

    def path_for(self, key: str) -> Path:
        """Return the file path used for key."""
        return self.directory / disk_file_name(key)

    async def _ensure_directory(self) -> None:
        """Create the cache directory once. Raises OSError on failure."""
        if not self._dir_ready:
            await aiofiles.os.makedirs(self.directory, mode=0o750, exist_ok=True)
            self._dir_ready = True

    async def read(self, key: str) -> bytes | None:
        """Return stored bytes for key, or None if missing or unreadable."""
        path = self.path_for(key)
        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except FileNotFoundError:
            logger.debug("Disk cache MISS: %s", key)
            return None
        except OSError as e:
            logger.warning("Disk cache read failed for %s: %s", key, e)
            return None
        logger.debug("Disk cache HIT: %s (%s bytes)", key, len(data))
        return data

    async def write(self, key: str, data: bytes) -> bool:
        """Store bytes for key. Returns True on success, False if dropped."""
        try:
            try:
                await self._write_file(key, data)
            except FileNotFoundError:
                # Directory removed from outside since it was created
                self._dir_ready = False
                await self._write_file(key, data)
        except OSError as e:
            logger.warning("Disk cache write failed for %s: %s", key, e)
            return False
        logger.debug("Disk cache SET: %s (%s bytes)", key, len(data))
        return True

    async def _write_file(self, key: str, data: bytes) -> None:
        """Temp file in the cache directory, then rename over the entry."""
        await self._ensure_directory()
        temp_path: str | None = None
        try:
            async with aiofiles.tempfile.NamedTemporaryFile(
                "wb", dir=self.directory, prefix=".tmp_", delete=False
            ) as f:
                temp_path = f.name
                await f.write(data)
            await aiofiles.os.replace(temp_path, self.path_for(key))
        except OSError:
            if temp_path is not None:
                with contextlib.suppress(OSError):
                    await aiofiles.os.remove(temp_path)
            raise
