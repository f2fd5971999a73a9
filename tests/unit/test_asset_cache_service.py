"""Tests for AssetCacheService: tier order, coalescing, write-through and uploads."""

import asyncio
import time
from unittest.mock import AsyncMock

import pytest

from assetcache.application.services.asset_cache_service import AssetCacheService
from assetcache.application.services.codecs import JpegImageCodec, RawBytesCodec
from assetcache.domain.entities import DecodedImage, RawAsset
from assetcache.domain.exceptions import (
    AssetEncodeError,
    AuthenticationException,
    ValidationException,
)
from assetcache.infrastructure.cache.disk_cache import DiskCache
from assetcache.infrastructure.exceptions import StorageUploadError

KEY = "assets/sample.jpg"


class TestResolve:
    """Memory -> disk -> network lookup chain."""

    @pytest.mark.asyncio
    async def test_absent_everywhere_is_none(self, service, blob_store) -> None:
        assert await service.resolve(KEY) is None
        assert blob_store.fetch_calls == [KEY]

    @pytest.mark.asyncio
    async def test_blank_key_is_none_without_fetch(self, service, blob_store) -> None:
        assert await service.resolve("  ") is None
        assert blob_store.fetch_calls == []

    @pytest.mark.asyncio
    async def test_network_result_written_through(self, service, blob_store, disk_cache) -> None:
        blob_store.objects[KEY] = b"remote-bytes"
        asset = await service.resolve(KEY)
        assert asset == RawAsset(b"remote-bytes")
        assert service.peek_memory(KEY) is asset
        assert await disk_cache.read(KEY) == b"remote-bytes"

    @pytest.mark.asyncio
    async def test_fast_path_skips_disk_and_network(self, service, blob_store) -> None:
        blob_store.objects[KEY] = b"v"
        first = await service.resolve(KEY)
        service.disk_cache.read = AsyncMock(side_effect=AssertionError("disk touched"))
        second = await service.resolve(KEY)
        assert second is first
        assert service.peek_memory(KEY) is first
        assert blob_store.fetch_calls == [KEY]

    @pytest.mark.asyncio
    async def test_paths_differing_only_in_slashes_are_distinct(self, service, blob_store) -> None:
        blob_store.objects.update({"a//b.jpg": b"double", "a/b.jpg": b"single", "/a/b.jpg": b"rooted"})
        assert await service.resolve("a//b.jpg") == RawAsset(b"double")
        assert await service.resolve("a/b.jpg") == RawAsset(b"single")
        assert await service.resolve("/a/b.jpg") == RawAsset(b"rooted")
        assert service.peek_memory("a//b.jpg") == RawAsset(b"double")
        assert sorted(blob_store.fetch_calls) == ["/a/b.jpg", "a//b.jpg", "a/b.jpg"]

    @pytest.mark.asyncio
    async def test_key_fetched_verbatim(self, service, blob_store) -> None:
        blob_store.objects["x.jpg "] = b"trailing-space"
        assert await service.resolve("x.jpg ") == RawAsset(b"trailing-space")
        assert await service.resolve("x.jpg") is None
        assert blob_store.fetch_calls == ["x.jpg ", "x.jpg"]

    @pytest.mark.asyncio
    async def test_disk_hit_populates_memory_without_network(self, service, blob_store, disk_cache) -> None:
        await disk_cache.write(KEY, b"from-disk")
        asset = await service.resolve(KEY)
        assert asset == RawAsset(b"from-disk")
        assert service.peek_memory(KEY) is asset
        assert blob_store.fetch_calls == []

    @pytest.mark.asyncio
    async def test_disk_persists_across_restart(self, blob_store, disk_cache) -> None:
        blob_store.objects[KEY] = b"persist-me"
        first = AssetCacheService(blob_store, RawBytesCodec(), disk_cache)
        await first.resolve(KEY)

        restarted = AssetCacheService(blob_store, RawBytesCodec(), DiskCache(disk_cache.directory))
        assert restarted.peek_memory(KEY) is None
        assert await restarted.resolve(KEY) == RawAsset(b"persist-me")
        assert blob_store.fetch_calls == [KEY]

    @pytest.mark.asyncio
    async def test_undecodable_disk_record_falls_through_to_network(self, blob_store, disk_cache, png_bytes) -> None:
        await disk_cache.write(KEY, b"corrupt")
        blob_store.objects[KEY] = png_bytes
        svc = AssetCacheService(blob_store, JpegImageCodec(), disk_cache)
        asset = await svc.resolve(KEY)
        assert isinstance(asset, DecodedImage)
        assert (asset.width, asset.height) == (8, 6)
        assert await disk_cache.read(KEY) == png_bytes

    @pytest.mark.asyncio
    async def test_decode_failure_is_a_miss_and_not_cached(self, blob_store, disk_cache) -> None:
        blob_store.objects[KEY] = b"not an image"
        svc = AssetCacheService(blob_store, JpegImageCodec(), disk_cache)
        assert await svc.resolve(KEY) is None
        assert svc.peek_memory(KEY) is None
        assert await disk_cache.read(KEY) is None

    @pytest.mark.asyncio
    async def test_oversized_payload_is_a_miss(self, blob_store, disk_cache) -> None:
        blob_store.objects[KEY] = b"x" * 2048
        svc = AssetCacheService(blob_store, RawBytesCodec(), disk_cache, max_fetch_bytes=1024)
        assert await svc.resolve(KEY) is None
        assert svc.peek_memory(KEY) is None
        assert await disk_cache.read(KEY) is None

    @pytest.mark.asyncio
    async def test_failed_fetch_does_not_poison_key(self, service, blob_store) -> None:
        blob_store.objects[KEY] = b"eventually"
        blob_store.fail_fetches = 1
        assert await service.resolve(KEY) is None
        assert await service.resolve(KEY) == RawAsset(b"eventually")
        assert blob_store.fetch_calls == [KEY, KEY]


class TestCoalescing:
    """Concurrent resolves for one key share a single network fetch."""

    @pytest.mark.slow
    @pytest.mark.asyncio
    async def test_ten_concurrent_resolves_one_fetch(self, disk_cache, make_blob_store) -> None:
        store = make_blob_store({KEY: bytes(range(256)) * 4}, delay=0.05)
        svc = AssetCacheService(store, RawBytesCodec(), disk_cache)

        started = time.perf_counter()
        results = await asyncio.gather(*(svc.resolve(KEY) for _ in range(10)))
        elapsed = time.perf_counter() - started

        assert store.fetch_calls == [KEY]
        assert all(r is results[0] for r in results)
        assert results[0].size == 1024
        assert elapsed < 0.4

    @pytest.mark.asyncio
    async def test_concurrent_failure_shared(self, disk_cache, make_blob_store) -> None:
        store = make_blob_store(delay=0.02)
        svc = AssetCacheService(store, RawBytesCodec(), disk_cache)
        results = await asyncio.gather(*(svc.resolve(KEY) for _ in range(5)))
        assert results == [None] * 5
        assert store.fetch_calls == [KEY]


class TestPreload:
    """preload resolves a batch concurrently; misses do not fail it."""

    @pytest.mark.asyncio
    async def test_preload_warms_memory(self, service, blob_store) -> None:
        blob_store.objects.update({"a.jpg": b"a", "b.jpg": b"b"})
        await service.preload({"a.jpg", "b.jpg", "missing.jpg"})
        assert service.peek_memory("a.jpg") == RawAsset(b"a")
        assert service.peek_memory("b.jpg") == RawAsset(b"b")
        assert service.peek_memory("missing.jpg") is None
        assert sorted(blob_store.fetch_calls) == ["a.jpg", "b.jpg", "missing.jpg"]

    @pytest.mark.slow
    @pytest.mark.asyncio
    async def test_preload_runs_concurrently(self, disk_cache, make_blob_store) -> None:
        store = make_blob_store({f"k{i}": b"v" for i in range(5)}, delay=0.05)
        svc = AssetCacheService(store, RawBytesCodec(), disk_cache)
        started = time.perf_counter()
        await svc.preload([f"k{i}" for i in range(5)])
        assert time.perf_counter() - started < 0.2

    @pytest.mark.asyncio
    async def test_preload_empty_is_noop(self, service, blob_store) -> None:
        await service.preload([])
        assert blob_store.fetch_calls == []


class TestUpload:
    """Uploads go to a unique path and warm both local tiers."""

    @pytest.mark.asyncio
    async def test_upload_returns_unique_key_in_namespace(self, service, blob_store) -> None:
        k1 = await service.upload(b"one", "reports/u1/r1/")
        k2 = await service.upload(b"two", "reports/u1/r1")
        assert k1 != k2
        assert k1.startswith("reports/u1/r1/")
        assert [u[0] for u in blob_store.uploads] == [k1, k2]

    @pytest.mark.asyncio
    async def test_upload_warms_cache(self, service, blob_store, disk_cache) -> None:
        key = await service.upload(b"payload", "users/u1/photos")
        assert await service.resolve(key) == RawAsset(b"payload")
        assert await disk_cache.read(key) == b"payload"
        assert blob_store.fetch_calls == []

    @pytest.mark.asyncio
    async def test_upload_failure_propagates_and_caches_nothing(self, service, blob_store, disk_cache) -> None:
        blob_store.fail_uploads = True
        with pytest.raises(StorageUploadError):
            await service.upload(b"payload", "users/u1/photos")
        assert len(service.memory_cache) == 0
        assert not disk_cache.directory.exists()

    @pytest.mark.asyncio
    async def test_blank_namespace_rejected(self, service) -> None:
        with pytest.raises(ValidationException):
            await service.upload(b"x", " / ")

    @pytest.mark.asyncio
    async def test_jpeg_upload_encodes(self, blob_store, disk_cache, png_bytes) -> None:
        svc = AssetCacheService(blob_store, JpegImageCodec(), disk_cache)
        key = await svc.upload(png_bytes, "users/u1/avatars")
        path, data, content_type = blob_store.uploads[0]
        assert path == key
        assert key.endswith(".jpg")
        assert content_type == "image/jpeg"
        assert data[:2] == b"\xff\xd8"
        cached = svc.peek_memory(key)
        assert isinstance(cached, DecodedImage)
        assert cached.format == "JPEG"

    @pytest.mark.asyncio
    async def test_unencodable_upload_raises(self, blob_store, disk_cache) -> None:
        svc = AssetCacheService(blob_store, JpegImageCodec(), disk_cache)
        with pytest.raises(AssetEncodeError):
            await svc.upload(b"garbage", "users/u1/avatars")
        assert blob_store.uploads == []

    @pytest.mark.asyncio
    async def test_upload_user_image_path(self, service) -> None:
        key = await service.upload_user_image(b"x", "uid1", "avatars")
        assert key.startswith("users/uid1/avatars/")

    @pytest.mark.asyncio
    async def test_upload_report_media_path(self, service) -> None:
        key = await service.upload_report_media(b"x", "uid1", "rep7")
        assert key.startswith("reports/uid1/rep7/")

    @pytest.mark.asyncio
    async def test_owner_required(self, service, blob_store) -> None:
        with pytest.raises(AuthenticationException) as exc_info:
            await service.upload_user_image(b"x", "", "avatars")
        assert exc_info.value.message == "User not authenticated"
        assert blob_store.uploads == []

    @pytest.mark.asyncio
    async def test_invalid_folder_rejected(self, service) -> None:
        with pytest.raises(ValidationException):
            await service.upload_user_image(b"x", "uid1", "a/b")


@pytest.mark.asyncio
async def test_aclose_closes_blob_store(service, blob_store) -> None:
    await service.aclose()
    assert blob_store.closed
