"""Cache tiers: memory, disk, per-key fetch coalescing and key codec.

Composed by AssetCacheService; key format is in keys.py.
"""

from assetcache.infrastructure.cache.cache_protocol import (
    DiskTierProtocol,
    MemoryTierProtocol,
)
from assetcache.infrastructure.cache.disk_cache import DiskCache
from assetcache.infrastructure.cache.fetch_coordinator import FetchCoordinator
from assetcache.infrastructure.cache.keys import (
    asset_path,
    cache_key,
    disk_file_name,
    normalize_namespace,
    report_upload_namespace,
    upload_namespace,
    user_upload_namespace,
)
from assetcache.infrastructure.cache.memory_cache import MemoryCache

__all__ = [
    "DiskCache",
    "DiskTierProtocol",
    "FetchCoordinator",
    "MemoryCache",
    "MemoryTierProtocol",
    "asset_path",
    "cache_key",
    "disk_file_name",
    "normalize_namespace",
    "report_upload_namespace",
    "upload_namespace",
    "user_upload_namespace",
]
