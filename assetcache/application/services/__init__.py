"""Application services: asset cache orchestration and codecs."""

from assetcache.application.services.asset_cache_service import AssetCacheService
from assetcache.application.services.codecs import (
    AssetCodec,
    JpegImageCodec,
    RawBytesCodec,
)

__all__ = [
    "AssetCacheService",
    "AssetCodec",
    "JpegImageCodec",
    "RawBytesCodec",
]
