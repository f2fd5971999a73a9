"""Read-only HTTP(S) backend for assets addressed by URL."""

from __future__ import annotations

import httpx

from assetcache.infrastructure.exceptions import (
    StorageDownloadError,
    StorageNotSupportedError,
)
from assetcache.infrastructure.external.storage._http import read_bounded
from assetcache.shared.telemetry.tracing import traced


class HttpBlobStore:
    """Fetch assets by absolute URL, or by path relative to base_url.

    Keys that already carry a scheme ('https://cdn/x.jpg') are fetched
    as-is. Upload is not supported.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self._http = (
            http_client
            if http_client is not None
            else httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        )
        self._owns_http = http_client is None

    def url_for(self, path: str) -> str:
        """Return the URL for path. Raises StorageDownloadError if unresolvable."""
        if "://" in path:
            return path
        if not self.base_url:
            raise StorageDownloadError(path, "relative path and no base URL configured")
        return f"{self.base_url}/{path.lstrip('/')}"

    @traced("blobstore.http.fetch")
    async def fetch(self, path: str, max_bytes: int) -> bytes:
        """Download the asset at path, bounded by max_bytes."""
        return await read_bounded(self._http, self.url_for(path), path, max_bytes)

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        raise StorageNotSupportedError("upload", "http")

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it."""
        if self._owns_http:
            await self._http.aclose()
