"""Tests for the derivative engine."""

from __future__ import annotations

import threading
from pathlib import Path
from unittest.mock import patch

import pytest
from PIL import Image

from thumbvault.errors import InvalidInput, OperationCancelled
from thumbvault.models.artifact import ImageFormat
from thumbvault.thumbnails import (
    DerivativeEngine,
    ThumbnailStore,
    converted_name,
    derived_name,
    ensure_converted,
    ensure_resized,
    resolve_base_path,
)


class TestNaming:
    """Tests for derivative file names."""

    def test_derived_name(self):
        assert derived_name("abc", "bust", 100, 50, "png") == "abc_bust_100x50.png"

    def test_derived_name_normalizes_format(self):
        assert derived_name("abc", "bust", 100, 50, "JPEG") == "abc_bust_100x50.jpg"
        assert derived_name("abc", "bust", 100, 50, None) == "abc_bust_100x50.png"

    def test_converted_name(self):
        assert converted_name("abc", "full", "jpeg") == "abc_full.jpg"

    def test_distinct_tuples_do_not_collide(self):
        names = {
            derived_name("abc", "bust", 100, 50, "png"),
            derived_name("abc", "bust", 50, 100, "png"),
            derived_name("abc", "bust", 100, 50, "jpg"),
            derived_name("abc", "head", 100, 50, "png"),
            derived_name("abd", "bust", 100, 50, "png"),
        }
        assert len(names) == 5


class TestResolveBasePath:
    """Tests for base artifact probing."""

    def test_prefers_png(self, temp_dir: Path):
        (temp_dir / "h.png").write_bytes(b"png")
        (temp_dir / "h.jpg").write_bytes(b"jpg")

        base = resolve_base_path(temp_dir, "h")
        assert base.found
        assert base.path == temp_dir / "h.png"
        assert base.format is ImageFormat.PNG

    def test_falls_back_to_jpg(self, temp_dir: Path):
        (temp_dir / "h.jpg").write_bytes(b"jpg")

        base = resolve_base_path(temp_dir, "h")
        assert base.found
        assert base.format is ImageFormat.JPG

    def test_missing_returns_png_sentinel(self, temp_dir: Path):
        base = resolve_base_path(temp_dir, "h")
        assert not base.found
        assert base.path == temp_dir / "h.png"
        assert not base.path.exists()


class TestEnsureResized:
    """Tests for resized derivatives."""

    @pytest.fixture
    def output_dir(self, temp_dir: Path) -> Path:
        return temp_dir / "out"

    @pytest.fixture
    def base_hash(self, output_dir: Path, png_bytes: bytes) -> str:
        return ThumbnailStore(output_dir).save_bytes(png_bytes).hash

    @pytest.fixture
    def engine(self) -> DerivativeEngine:
        return DerivativeEngine()

    def test_creates_exact_dimensions(self, engine, output_dir, base_hash):
        path = engine.ensure_resized(output_dir, base_hash, "bust", 64, 96, "png")

        assert path == output_dir / f"{base_hash}_bust_64x96.png"
        with Image.open(path) as image:
            assert image.size == (64, 96)
            assert image.format == "PNG"

    def test_jpeg_output(self, engine, output_dir, base_hash):
        path = engine.ensure_resized(output_dir, base_hash, "bust", 30, 30, "jpeg")

        assert path.name == f"{base_hash}_bust_30x30.jpg"
        with Image.open(path) as image:
            assert image.format == "JPEG"
            assert image.mode == "RGB"

    def test_jpg_base(self, engine, output_dir, jpg_bytes):
        base_hash = ThumbnailStore(output_dir).save_bytes(jpg_bytes).hash
        path = engine.ensure_resized(output_dir, base_hash, "bust", 10, 10, "png")

        with Image.open(path) as image:
            assert image.size == (10, 10)

    def test_second_call_does_not_decode(self, engine, output_dir, base_hash):
        first = engine.ensure_resized(output_dir, base_hash, "bust", 20, 20, "png")
        mtime = first.stat().st_mtime_ns

        with patch.object(engine.encoder, "open", wraps=engine.encoder.open) as spy:
            second = engine.ensure_resized(output_dir, base_hash, "bust", 20, 20, "png")

        assert second == first
        spy.assert_not_called()
        assert second.stat().st_mtime_ns == mtime

    def test_missing_base_returns_sentinel(self, engine, output_dir):
        path = engine.ensure_resized(output_dir, "deadbeef", "bust", 20, 20, "png")

        assert path == output_dir / "deadbeef.png"
        assert not path.exists()
        assert not (output_dir / "deadbeef_bust_20x20.png").exists()

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-1, 10)])
    def test_rejects_non_positive_dimensions(self, engine, output_dir, width, height):
        with pytest.raises(InvalidInput):
            engine.ensure_resized(output_dir, "abc", "bust", width, height, "png")

    def test_rejects_empty_arguments(self, engine, output_dir):
        with pytest.raises(InvalidInput):
            engine.ensure_resized("", "abc", "bust", 10, 10, "png")
        with pytest.raises(InvalidInput):
            engine.ensure_resized(output_dir, " ", "bust", 10, 10, "png")

    def test_rejects_path_like_names(self, engine, output_dir):
        with pytest.raises(InvalidInput):
            engine.ensure_resized(output_dir, "../abc", "bust", 10, 10, "png")
        with pytest.raises(InvalidInput):
            engine.ensure_resized(output_dir, "abc", "a/b", 10, 10, "png")
        with pytest.raises(InvalidInput):
            engine.ensure_resized(output_dir, "abc", "..", 10, 10, "png")

    def test_empty_variant_allowed(self, engine, output_dir, base_hash):
        path = engine.ensure_resized(output_dir, base_hash, "", 14, 14, "png")

        assert path.name == f"{base_hash}__14x14.png"
        assert path.exists()

    def test_cancelled_write_is_not_committed(self, engine, output_dir, base_hash):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(OperationCancelled):
            engine.ensure_resized(output_dir, base_hash, "bust", 20, 20, "png", cancel=cancel)

        assert not (output_dir / f"{base_hash}_bust_20x20.png").exists()
        assert not list(output_dir.glob("*.tmp"))

    def test_module_shortcut(self, output_dir, base_hash):
        path = ensure_resized(output_dir, base_hash, "bust", 12, 12, "png")
        assert path.exists()

    @pytest.mark.asyncio
    async def test_async_wrapper(self, engine, output_dir, base_hash):
        path = await engine.ensure_resized_async(output_dir, base_hash, "bust", 16, 8, "jpg")
        assert path.name == f"{base_hash}_bust_16x8.jpg"
        assert path.exists()


class TestEnsureConverted:
    """Tests for format-only conversions."""

    @pytest.fixture
    def output_dir(self, temp_dir: Path) -> Path:
        return temp_dir / "out"

    def test_png_to_png_returns_base(self, output_dir, png_bytes):
        base_hash = ThumbnailStore(output_dir).save_bytes(png_bytes).hash
        before = sorted(output_dir.iterdir())

        path = ensure_converted(output_dir, base_hash, "full", "png")

        assert path == output_dir / f"{base_hash}.png"
        assert sorted(output_dir.iterdir()) == before

    def test_png_to_jpg(self, output_dir, png_bytes):
        base_hash = ThumbnailStore(output_dir).save_bytes(png_bytes).hash

        path = ensure_converted(output_dir, base_hash, "full", "jpg")

        assert path == output_dir / f"{base_hash}_full.jpg"
        with Image.open(path) as image:
            assert image.format == "JPEG"
            assert image.size == (40, 20)

    def test_jpg_to_png(self, output_dir, jpg_bytes):
        base_hash = ThumbnailStore(output_dir).save_bytes(jpg_bytes).hash

        path = ensure_converted(output_dir, base_hash, "full", "png")

        assert path == output_dir / f"{base_hash}_full.png"
        with Image.open(path) as image:
            assert image.format == "PNG"

    def test_existing_conversion_is_reused(self, output_dir, png_bytes):
        engine = DerivativeEngine()
        base_hash = ThumbnailStore(output_dir).save_bytes(png_bytes).hash
        first = engine.ensure_converted(output_dir, base_hash, "full", "jpg")

        with patch.object(engine.encoder, "open") as spy:
            second = engine.ensure_converted(output_dir, base_hash, "full", "jpg")

        assert second == first
        spy.assert_not_called()

    def test_missing_base_returns_sentinel(self, output_dir):
        path = ensure_converted(output_dir, "deadbeef", "full", "jpg")
        assert path == output_dir / "deadbeef.png"
        assert not path.exists()

    def test_rejects_empty_hash(self, output_dir):
        with pytest.raises(InvalidInput):
            ensure_converted(output_dir, "", "full", "jpg")

    def test_empty_variant_allowed(self, output_dir, png_bytes):
        base_hash = ThumbnailStore(output_dir).save_bytes(png_bytes).hash
        path = ensure_converted(output_dir, base_hash, "", "jpg")

        assert path.name == f"{base_hash}_.jpg"
        assert path.exists()
