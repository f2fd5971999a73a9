"""Cached asset entities.

Entries held by the memory tier are frozen: a newer value for the same
key replaces the entry, it never mutates it.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RawAsset:
    """Undecoded asset bytes (non-image assets, tests)."""

    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class DecodedImage:
    """Image verified by the decoder.

    Holds the encoded bytes plus the properties read while decoding. Use
    to_image() for a fresh Pillow image; the entry itself stays immutable.
    """

    data: bytes = field(repr=False)
    width: int
    height: int
    format: str | None = None
    mode: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)

    def to_image(self):
        """Return a new PIL.Image for this asset (caller owns it)."""
        from io import BytesIO

        from PIL import Image

        image = Image.open(BytesIO(self.data))
        image.load()
        return image
