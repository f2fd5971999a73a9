"""Firebase Storage backend over the REST API (httpx, google-auth)."""

from __future__ import annotations

import asyncio
from urllib.parse import quote

import httpx

from assetcache.infrastructure.exceptions import StorageUploadError
from assetcache.infrastructure.external.storage._http import read_bounded
from assetcache.infrastructure.firebase.credentials import get_access_token
from assetcache.shared.telemetry.tracing import traced

_BASE = "https://firebasestorage.googleapis.com/v0/b"


class FirebaseBlobStore:
    """Firebase Storage objects addressed by path inside one bucket.

    Downloads use '?alt=media' and are size-bounded while streaming.
    Uploads use the simple media upload. All HTTP calls go through
    httpx.AsyncClient; token refresh runs in a worker thread.
    """

    def __init__(
        self,
        bucket: str,
        credentials=None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize Firebase Storage client.

        Args:
            bucket: Bucket name (e.g. 'my-app.appspot.com').
            credentials: google-auth credentials, or None for anonymous access.
            http_client: Optional client for testing or connection reuse.
            timeout: Timeout in seconds for a client created here.
        """
        self.bucket = bucket
        self._credentials = credentials
        self._http = (
            http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        )
        self._owns_http = http_client is None

    def object_url(self, path: str) -> str:
        """Return the REST URL of the object at path."""
        return f"{_BASE}/{quote(self.bucket, safe='')}/o/{quote(path, safe='')}"

    async def _auth_headers(self) -> dict[str, str]:
        if self._credentials is None:
            return {}
        token = await asyncio.to_thread(get_access_token, self._credentials)
        return {"Authorization": f"Bearer {token}"}

    @traced("blobstore.firebase.fetch")
    async def fetch(self, path: str, max_bytes: int) -> bytes:
        """Download the object at path, bounded by max_bytes."""
        return await read_bounded(
            self._http,
            f"{self.object_url(path)}?alt=media",
            path,
            max_bytes,
            headers=await self._auth_headers(),
        )

    @traced("blobstore.firebase.upload")
    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Upload data to path with the given content type."""
        url = (
            f"{_BASE}/{quote(self.bucket, safe='')}/o"
            f"?uploadType=media&name={quote(path, safe='')}"
        )
        headers = {"Content-Type": content_type, **(await self._auth_headers())}
        try:
            resp = await self._http.post(url, content=data, headers=headers)
        except httpx.HTTPError as e:
            raise StorageUploadError(path, str(e)) from e
        if resp.status_code not in (200, 201):
            raise StorageUploadError(path, f"HTTP {resp.status_code}")

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()
