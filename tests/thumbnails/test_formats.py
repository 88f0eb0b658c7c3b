"""Tests for format sniffing and normalization."""

from __future__ import annotations

import pytest

from thumbvault.models.artifact import ImageFormat
from thumbvault.thumbnails import normalize_format, sniff_format


class TestSniffFormat:
    """Tests for byte-signature detection."""

    def test_png_signature(self):
        assert sniff_format(b"\x89PNG\r\n\x1a\n" + b"rest") is ImageFormat.PNG

    def test_jpeg_signature(self):
        assert sniff_format(b"\xff\xd8\xff\xe0rest") is ImageFormat.JPG

    def test_real_images(self, png_bytes, jpg_bytes):
        assert sniff_format(png_bytes) is ImageFormat.PNG
        assert sniff_format(jpg_bytes) is ImageFormat.JPG

    @pytest.mark.parametrize(
        "data",
        [b"", b"\xff", b"GIF89a", b"\x89PNG", b"hello world", b"\xd8\xff"],
    )
    def test_unknown_defaults_to_png(self, data):
        assert sniff_format(data) is ImageFormat.PNG


class TestNormalizeFormat:
    """Tests for format name normalization."""

    @pytest.mark.parametrize("name", ["jpg", "JPG", "jpeg", " Jpeg "])
    def test_jpeg_names(self, name):
        assert normalize_format(name) is ImageFormat.JPG

    @pytest.mark.parametrize("name", ["png", "PNG", "", None, "webp", "gif"])
    def test_everything_else_is_png(self, name):
        assert normalize_format(name) is ImageFormat.PNG

    def test_enum_passthrough(self):
        assert normalize_format(ImageFormat.JPG) is ImageFormat.JPG
