"""Asset codecs: bytes -> cached asset on read, bytes -> upload bytes on write.

The cache core only sees AssetCodec; Pillow is confined to JpegImageCodec.
"""

from __future__ import annotations

from io import BytesIO
from typing import Protocol, TypeVar

from assetcache.core.constants import (
    DEFAULT_JPEG_QUALITY,
    JPEG_CONTENT_TYPE,
    JPEG_EXTENSION,
    OCTET_STREAM_CONTENT_TYPE,
)
from assetcache.domain.entities import DecodedImage, RawAsset
from assetcache.domain.exceptions import AssetDecodeError, AssetEncodeError

T = TypeVar("T", covariant=True)


class AssetCodec(Protocol[T]):
    """Pluggable decode/encode capability.

    decode() and encode() are blocking; the service runs them in a thread.
    """

    content_type: str
    extension: str

    def decode(self, data: bytes) -> T:
        """Return the in-memory asset. Raises AssetDecodeError."""
        ...

    def encode(self, data: bytes) -> bytes:
        """Return the bytes to upload. Raises AssetEncodeError."""
        ...


class RawBytesCodec:
    """Identity codec: cached assets are the fetched bytes."""

    content_type = OCTET_STREAM_CONTENT_TYPE
    extension = ""

    def __init__(self, content_type: str | None = None, extension: str = "") -> None:
        if content_type:
            self.content_type = content_type
        self.extension = extension

    def decode(self, data: bytes) -> RawAsset:
        return RawAsset(data=data)

    def encode(self, data: bytes) -> bytes:
        return data


class JpegImageCodec:
    """Decode any Pillow-readable image; re-encode uploads as JPEG."""

    content_type = JPEG_CONTENT_TYPE
    extension = JPEG_EXTENSION

    def __init__(self, quality: int = DEFAULT_JPEG_QUALITY) -> None:
        self.quality = quality

    def decode(self, data: bytes) -> DecodedImage:
        """Fully decode the image so corrupt data fails here, not at render."""
        from PIL import Image

        try:
            with Image.open(BytesIO(data)) as image:
                image.load()
                return DecodedImage(
                    data=data,
                    width=image.width,
                    height=image.height,
                    format=image.format,
                    mode=image.mode,
                )
        except Exception as e:
            raise AssetDecodeError(str(e)) from e

    def encode(self, data: bytes) -> bytes:
        """Return JPEG bytes at self.quality; alpha and palettes become RGB."""
        from PIL import Image

        try:
            with Image.open(BytesIO(data)) as image:
                rgb = image.convert("RGB")
                out = BytesIO()
                rgb.save(out, "JPEG", quality=self.quality)
                return out.getvalue()
        except Exception as e:
            raise AssetEncodeError(str(e)) from e
