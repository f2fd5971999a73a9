"""Domain entities: immutable in-memory representations of cached assets."""

from assetcache.domain.entities.asset import DecodedImage, RawAsset

__all__ = ["DecodedImage", "RawAsset"]
