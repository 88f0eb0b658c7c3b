"""Byte-signature format detection and format name normalization."""

from __future__ import annotations

from thumbvault.models.artifact import ImageFormat

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8"


def sniff_format(data: bytes) -> ImageFormat:
    """Classify raw bytes as PNG or JPEG by their leading signature.

    Anything that is not recognisably JPEG is treated as PNG.
    """
    if data.startswith(PNG_SIGNATURE):
        return ImageFormat.PNG
    if data.startswith(JPEG_SIGNATURE):
        return ImageFormat.JPG
    return ImageFormat.PNG


def normalize_format(value: str | ImageFormat | None) -> ImageFormat:
    """Map a user-supplied format name onto a stored format (png unless jpeg/jpg)."""
    if isinstance(value, ImageFormat):
        return value
    name = (value or "png").strip().lower()
    if name in ("jpg", "jpeg"):
        return ImageFormat.JPG
    return ImageFormat.PNG
