"""Infrastructure exceptions for blob storage operations.

Storage errors extend AssetCacheException so callers of upload can
handle every failure through one base class.
"""

from assetcache.domain.exceptions import AssetCacheException


class StorageException(AssetCacheException):
    """Base exception for storage operations."""


class StorageNotFoundError(StorageException):
    """Object not found in storage."""

    def __init__(self, file_path: str) -> None:
        super().__init__(
            f"File not found: {file_path}",
            "STORAGE_NOT_FOUND",
            {"file_path": file_path},
        )


class StorageTooLargeError(StorageException):
    """Object exceeds the maximum fetch size."""

    def __init__(self, file_path: str, max_bytes: int, size: int | None = None) -> None:
        detail = f"{size} > {max_bytes}" if size is not None else f"> {max_bytes}"
        super().__init__(
            f"File too large: {file_path} ({detail} bytes)",
            "STORAGE_TOO_LARGE",
            {"file_path": file_path, "max_bytes": max_bytes, "size": size},
        )


class StorageUploadError(StorageException):
    """File upload failed."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(
            f"Failed to upload file: {file_path}",
            "STORAGE_UPLOAD_ERROR",
            {"file_path": file_path, "reason": reason},
        )


class StorageDownloadError(StorageException):
    """File download failed."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(
            f"Failed to download file: {file_path}",
            "STORAGE_DOWNLOAD_ERROR",
            {"file_path": file_path, "reason": reason},
        )


class StorageNotSupportedError(StorageException):
    """Operation not supported by this storage backend."""

    def __init__(self, operation: str, backend: str) -> None:
        super().__init__(
            f"Operation '{operation}' not supported by {backend} backend",
            "STORAGE_NOT_SUPPORTED",
            {"operation": operation, "backend": backend},
        )


class StoragePermissionError(StorageException):
    """Insufficient permissions for storage operation."""

    def __init__(self, file_path: str, operation: str) -> None:
        super().__init__(
            f"Permission denied for {operation} on {file_path}",
            "STORAGE_PERMISSION_ERROR",
            {"file_path": file_path, "operation": operation},
        )
