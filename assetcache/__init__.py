"""assetcache: remote-asset cache with memory, disk and blob-store tiers."""

__version__ = "1.0.0"
