"""Composition root: build the shared AssetCacheService from settings.

No business logic here, only wiring of infrastructure (codec, cache
tiers, blob store, telemetry). Build one service at startup and pass it
to consumers; there is no module-level instance.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from assetcache.application.services.asset_cache_service import AssetCacheService
from assetcache.application.services.codecs import (
    AssetCodec,
    JpegImageCodec,
    RawBytesCodec,
)
from assetcache.core.config import Settings, get_settings
from assetcache.infrastructure.cache.disk_cache import DiskCache
from assetcache.infrastructure.external.storage.factory import StorageFactory
from assetcache.infrastructure.external.storage.protocol import BlobStoreProtocol
from assetcache.shared.telemetry.telemetry import (
    TelemetryConfig,
    get_telemetry,
    set_telemetry,
)

logger = logging.getLogger(__name__)


def create_codec(settings: Settings) -> AssetCodec[Any]:
    """Return the codec selected by settings.asset_codec."""
    if settings.asset_codec.lower() == "raw":
        return RawBytesCodec()
    return JpegImageCodec(quality=settings.jpeg_quality)


def build_asset_cache_service(
    settings: Settings | None = None,
    *,
    blob_store: BlobStoreProtocol | None = None,
) -> AssetCacheService[Any]:
    """Wire codec, disk/memory tiers, coordinator and blob store.

    Args:
        settings: Application settings; if None, uses get_settings().
        blob_store: Optional store overriding the configured backend.

    Returns:
        A new AssetCacheService with empty memory and in-flight tables.
    """
    s = settings or get_settings()
    store = blob_store or StorageFactory.create_blob_store(s)
    service = AssetCacheService(
        blob_store=store,
        codec=create_codec(s),
        disk_cache=DiskCache(s.asset_cache_dir),
        max_fetch_bytes=s.asset_max_fetch_bytes,
    )
    logger.info(
        "Asset cache ready: backend=%s, dir=%s, max_fetch_bytes=%s",
        s.storage_backend,
        s.asset_cache_dir,
        s.asset_max_fetch_bytes,
    )
    return service


@asynccontextmanager
async def asset_cache_lifespan(
    settings: Settings | None = None,
) -> AsyncIterator[AssetCacheService[Any]]:
    """Run startup then yield the service; on exit run shutdown.

    Startup: telemetry (if enabled), then the service. Shutdown: blob
    store close, then telemetry flush.
    """
    s = settings or get_settings()

    # A process that already set up tracing keeps ownership of it
    telemetry: TelemetryConfig | None = None
    if s.telemetry_enabled and get_telemetry() is None:
        telemetry = TelemetryConfig.from_settings(s)
        telemetry.setup_telemetry(
            exporter_type=s.telemetry_exporter,
            otlp_endpoint=s.telemetry_otlp_endpoint,
            sample_rate=s.telemetry_sample_rate,
        )
        set_telemetry(telemetry)

    service = build_asset_cache_service(s)
    try:
        yield service
    finally:
        await service.aclose()
        logger.info("Asset cache closed")
        if telemetry is not None:
            telemetry.shutdown()
            set_telemetry(None)
