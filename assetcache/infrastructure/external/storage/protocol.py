"""Blob store protocol (DIP). Implementations: Firebase, S3, local, HTTP."""

from typing import Protocol


class BlobStoreProtocol(Protocol):
    """Protocol for remote object stores used by the asset cache."""

    async def fetch(self, path: str, max_bytes: int) -> bytes:
        """Return the whole object at path.

        Raises StorageTooLargeError as soon as the object is known to exceed
        max_bytes, without buffering the excess; StorageNotFoundError if
        missing; StorageDownloadError otherwise.
        """
        ...

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Store data at path. Raises StorageUploadError on failure."""
        ...

    async def aclose(self) -> None:
        """Release network resources owned by the store."""
        ...
