"""Bounded HTTP body reads shared by httpx-based blob stores."""

from __future__ import annotations

import httpx

from assetcache.infrastructure.exceptions import (
    StorageDownloadError,
    StorageNotFoundError,
    StorageTooLargeError,
)


def _declared_length(response: httpx.Response) -> int | None:
    raw = response.headers.get("Content-Length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


async def read_bounded(
    client: httpx.AsyncClient,
    url: str,
    path: str,
    max_bytes: int,
    headers: dict[str, str] | None = None,
) -> bytes:
    """GET url and return the body, failing fast beyond max_bytes.

    A declared Content-Length above the bound fails before any body is
    read; otherwise the stream is read chunk by chunk and abandoned as
    soon as the running total passes the bound.

    Raises:
        StorageNotFoundError: 404.
        StorageTooLargeError: Body larger than max_bytes.
        StorageDownloadError: Transport error or other non-2xx status.
    """
    try:
        async with client.stream("GET", url, headers=headers) as resp:
            if resp.status_code == 404:
                raise StorageNotFoundError(path)
            if resp.status_code >= 400:
                raise StorageDownloadError(path, f"HTTP {resp.status_code}")
            declared = _declared_length(resp)
            if declared is not None and declared > max_bytes:
                raise StorageTooLargeError(path, max_bytes, declared)
            body = bytearray()
            async for chunk in resp.aiter_bytes():
                body.extend(chunk)
                if len(body) > max_bytes:
                    raise StorageTooLargeError(path, max_bytes)
            return bytes(body)
    except httpx.HTTPError as e:
        raise StorageDownloadError(path, str(e)) from e
