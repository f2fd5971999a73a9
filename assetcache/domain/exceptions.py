"""Domain exceptions for the asset cache.

Defines errors that callers of the public API may see. Read-path misses
are never exceptions; these are raised on the write path (upload) and on
invalid input.
"""

from typing import Any


class AssetCacheException(Exception):
    """Base exception for all asset cache errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. key, field).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(AssetCacheException):
    """Raised when input validation fails (e.g. empty namespace)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidAssetKeyError(ValidationException):
    """Raised when an asset key is empty after normalization."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Invalid asset key: {key!r}", "key")
        self.details["key"] = key


class AuthenticationException(AssetCacheException):
    """Raised when an owner-scoped upload has no authenticated owner."""

    def __init__(self, message: str = "User not authenticated") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AssetDecodeError(AssetCacheException):
    """Bytes could not be decoded into an asset."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Failed to decode asset: {reason}",
            "ASSET_DECODE_ERROR",
            {"reason": reason},
        )


class AssetEncodeError(AssetCacheException):
    """Bytes could not be encoded for upload."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Failed to encode asset: {reason}",
            "ASSET_ENCODE_ERROR",
            {"reason": reason},
        )
