"""Domain layer: cached asset entities and exceptions.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from assetcache.domain.entities import DecodedImage, RawAsset
from assetcache.domain.exceptions import (
    AssetCacheException,
    AssetDecodeError,
    AssetEncodeError,
    AuthenticationException,
    InvalidAssetKeyError,
    ValidationException,
)

__all__ = [
    "AssetCacheException",
    "AssetDecodeError",
    "AssetEncodeError",
    "AuthenticationException",
    "DecodedImage",
    "InvalidAssetKeyError",
    "RawAsset",
    "ValidationException",
]
