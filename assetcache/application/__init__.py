"""Application layer: the asset cache service and asset codecs.

Depends on domain types and on the cache/storage protocols; concrete
infrastructure is wired in by assetcache.core.container.
"""
