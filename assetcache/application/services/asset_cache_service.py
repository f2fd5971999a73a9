"""Asset cache service: memory -> disk -> network resolution and uploads.

The read path favors availability: every failure becomes a miss (None)
and nothing is retried. The upload path favors correctness: failures
propagate so the caller can report or retry them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Generic, TypeVar

from assetcache.application.services.codecs import AssetCodec
from assetcache.core.constants import DEFAULT_MAX_FETCH_BYTES
from assetcache.domain.exceptions import (
    AuthenticationException,
    InvalidAssetKeyError,
    ValidationException,
)
from assetcache.infrastructure.cache.cache_protocol import (
    DiskTierProtocol,
    MemoryTierProtocol,
)
from assetcache.infrastructure.cache.fetch_coordinator import FetchCoordinator
from assetcache.infrastructure.cache.keys import (
    asset_path,
    cache_key,
    normalize_namespace,
    report_upload_namespace,
    user_upload_namespace,
)
from assetcache.infrastructure.cache.memory_cache import MemoryCache
from assetcache.infrastructure.external.storage.protocol import BlobStoreProtocol
from assetcache.shared.telemetry.tracing import add_span_attributes, traced
from assetcache.shared.utils.generators import generate_asset_filename

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AssetCacheService(Generic[T]):
    """Resolve storage paths to decoded assets through three tiers.

    Construct once at startup (see assetcache.core.container) and share
    the instance; all state lives in the tiers passed in here. Memory and
    disk tiers are thread-safe and fetches coalesce per event loop, so a
    caller on a second loop gets its own download rather than an error.
    httpx-based blob stores keep a loop-bound client; give each loop its
    own service when using them.

    Lookup order for resolve():
    1. Memory: returned without awaiting anything.
    2. Disk: decoded, copied into memory.
    3. Network: one coalesced fetch per key, bounded by max_fetch_bytes,
       written through to disk and memory on success.
    """

    def __init__(
        self,
        blob_store: BlobStoreProtocol,
        codec: AssetCodec[T],
        disk_cache: DiskTierProtocol,
        memory_cache: MemoryTierProtocol[T] | None = None,
        coordinator: FetchCoordinator[T] | None = None,
        *,
        max_fetch_bytes: int = DEFAULT_MAX_FETCH_BYTES,
    ) -> None:
        """Initialize the service.

        Args:
            blob_store: Remote object store for fetch and upload.
            codec: Decodes fetched bytes and encodes uploads.
            disk_cache: Persistent byte tier.
            memory_cache: Decoded tier; a new empty one if None.
            coordinator: In-flight fetch table; a new one if None.
            max_fetch_bytes: Largest single asset accepted from the network.
        """
        self.blob_store = blob_store
        self.codec = codec
        self.disk_cache = disk_cache
        self.memory_cache: MemoryTierProtocol[T] = (
            memory_cache if memory_cache is not None else MemoryCache()
        )
        self.coordinator: FetchCoordinator[T] = (
            coordinator if coordinator is not None else FetchCoordinator()
        )
        self.max_fetch_bytes = max_fetch_bytes

    async def resolve(self, key: str) -> T | None:
        """Return the decoded asset for key, or None if it cannot be had.

        Never raises for a missing, oversized, undecodable or unreachable
        asset; an invalid (blank) key is also just a miss.
        """
        try:
            key = cache_key(key)
        except InvalidAssetKeyError:
            logger.debug("Ignoring invalid asset key %r", key)
            return None

        cached = self.memory_cache.get(key)
        if cached is not None:
            return cached

        data = await self.disk_cache.read(key)
        if data is not None:
            asset = await self._decode_cached(key, data)
            if asset is not None:
                self.memory_cache.set(key, asset)
                return asset

        return await self.coordinator.resolve(key, lambda: self._fetch_and_store(key))

    def peek_memory(self, key: str) -> T | None:
        """Memory-only lookup for callers that must not wait (no disk, no network)."""
        try:
            return self.memory_cache.get(cache_key(key))
        except InvalidAssetKeyError:
            return None

    async def preload(self, keys: Iterable[str]) -> None:
        """Resolve every key concurrently and wait for all of them.

        Used to warm the cache ahead of a screen transition. Per-key
        outcomes are not reported; one key failing does not affect others.
        """
        unique = set(keys)
        if not unique:
            return
        results = await asyncio.gather(
            *(self.resolve(k) for k in unique), return_exceptions=True
        )
        for key, result in zip(unique, results):
            if isinstance(result, BaseException):
                logger.warning("Preload failed for %s: %s", key, result)
        logger.info(
            "Preloaded %s asset(s), %s available",
            len(unique),
            sum(1 for r in results if r is not None and not isinstance(r, BaseException)),
        )

    async def upload(self, data: bytes, namespace: str) -> str:
        """Encode and upload data under namespace; return the new asset key.

        The key is '{namespace}/{unique id}{codec.extension}'. On success
        the uploaded bytes are written to disk and the decoded asset to
        memory, so resolve(key) needs no network round trip.

        Raises:
            ValidationException: Blank namespace.
            AssetEncodeError: data could not be encoded.
            StorageException: The blob store rejected the upload.
        """
        try:
            namespace = normalize_namespace(namespace)
        except InvalidAssetKeyError as e:
            raise ValidationException(
                "Upload namespace is required", field="namespace"
            ) from e

        encoded = await asyncio.to_thread(self.codec.encode, data)
        key = asset_path(namespace, generate_asset_filename(self.codec.extension))
        await self.blob_store.upload(key, encoded, self.codec.content_type)
        logger.info("Uploaded asset %s (%s bytes)", key, len(encoded))

        await self.disk_cache.write(key, encoded)
        asset = await self._decode_cached(key, encoded)
        if asset is not None:
            self.memory_cache.set(key, asset)
        return key

    async def upload_user_image(self, data: bytes, owner_id: str, folder: str) -> str:
        """Upload to users/{owner_id}/{folder}/. Requires an owner id."""
        if not owner_id:
            raise AuthenticationException()
        try:
            namespace = user_upload_namespace(owner_id, folder)
        except ValueError as e:
            raise ValidationException(str(e), field="folder") from e
        return await self.upload(data, namespace)

    async def upload_report_media(
        self, data: bytes, owner_id: str, report_id: str
    ) -> str:
        """Upload to reports/{owner_id}/{report_id}/. Requires an owner id."""
        if not owner_id:
            raise AuthenticationException()
        try:
            namespace = report_upload_namespace(owner_id, report_id)
        except ValueError as e:
            raise ValidationException(str(e), field="report_id") from e
        return await self.upload(data, namespace)

    async def aclose(self) -> None:
        """Release the blob store's network resources."""
        await self.blob_store.aclose()

    @traced("assetcache.fetch")
    async def _fetch_and_store(self, key: str) -> T:
        """Network fetch run by the coordinator; raises on any failure."""
        # A fetch that finished just before this one was registered
        cached = self.memory_cache.get(key)
        if cached is not None:
            return cached
        data = await self.blob_store.fetch(key, self.max_fetch_bytes)
        add_span_attributes(**{"asset.size": len(data)})
        asset = await asyncio.to_thread(self.codec.decode, data)
        await self.disk_cache.write(key, data)
        self.memory_cache.set(key, asset)
        logger.debug("Fetched %s (%s bytes)", key, len(data))
        return asset

    async def _decode_cached(self, key: str, data: bytes) -> T | None:
        """Decode bytes from a local tier; a bad record is a miss."""
        try:
            return await asyncio.to_thread(self.codec.decode, data)
        except Exception as e:
            logger.warning("Discarding undecodable cached data for %s: %s", key, e)
            return None
