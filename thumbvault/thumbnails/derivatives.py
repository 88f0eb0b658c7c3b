"""Lazily materialized derivatives of stored artifacts.

Derivative file names are a pure function of their parameters:

- ``{base_hash}_{variant}_{width}x{height}.{ext}`` for resized copies
- ``{base_hash}_{variant}.{ext}`` for format-only conversions

An existing derivative is returned as-is without decoding the base image.
When the base artifact is missing, the (non-existent) PNG base path is
returned and callers are expected to check for it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from thumbvault.errors import InvalidInput
from thumbvault.models.artifact import ImageFormat
from thumbvault.thumbnails.formats import normalize_format
from thumbvault.thumbnails.renderer import ImageEncoder
from thumbvault.thumbnails.writer import (
    atomic_write_bytes,
    check_cancelled,
    run_cancellable,
)

logger = logging.getLogger(__name__)

BASE_CANDIDATES = (ImageFormat.PNG, ImageFormat.JPG)


def derived_name(
    base_hash: str, variant: str, width: int, height: int, fmt: str | ImageFormat | None
) -> str:
    ext = normalize_format(fmt).extension
    return f"{base_hash}_{variant}_{width}x{height}.{ext}"


def converted_name(base_hash: str, variant: str, fmt: str | ImageFormat | None) -> str:
    ext = normalize_format(fmt).extension
    return f"{base_hash}_{variant}.{ext}"


@dataclass(frozen=True)
class BaseResolution:
    """Outcome of probing for a base artifact.

    ``path`` is the first existing candidate, or the PNG candidate when
    none exists (``found`` is then False).
    """

    path: Path
    format: ImageFormat | None

    @property
    def found(self) -> bool:
        return self.format is not None


def resolve_base_path(output_dir: Path, base_hash: str) -> BaseResolution:
    """Probe ``{hash}.png`` then ``{hash}.jpg``."""
    for fmt in BASE_CANDIDATES:
        candidate = output_dir / f"{base_hash}.{fmt.extension}"
        if candidate.is_file():
            return BaseResolution(path=candidate, format=fmt)
    return BaseResolution(path=output_dir / f"{base_hash}.png", format=None)


def _require_name(value: str, label: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidInput(f"{label} required")
    value = str(value)
    if "/" in value or "\\" in value or value in (".", ".."):
        raise InvalidInput(f"{label} must be a plain name")
    return value


def _check_variant(value: str | None) -> str:
    value = "" if value is None else str(value)
    if "/" in value or "\\" in value or value in (".", ".."):
        raise InvalidInput("variant must be a plain name")
    return value


def _require_dir(output_dir: str | Path) -> Path:
    if output_dir is None or not str(output_dir).strip():
        raise InvalidInput("output_dir required")
    return Path(output_dir)


class DerivativeEngine:
    """Creates resized and re-encoded copies of stored artifacts on demand."""

    def __init__(self, encoder: ImageEncoder | None = None) -> None:
        self.encoder = encoder or ImageEncoder()

    def ensure_resized(
        self,
        output_dir: str | Path,
        base_hash: str,
        variant: str,
        width: int,
        height: int,
        format: str | ImageFormat | None = "png",
        *,
        cancel: threading.Event | None = None,
    ) -> Path:
        """Return the path of the resized derivative, creating it if needed."""
        directory = _require_dir(output_dir)
        base_hash = _require_name(base_hash, "base_hash")
        variant = _check_variant(variant)
        if width <= 0 or height <= 0:
            raise InvalidInput("width/height must be positive")

        directory.mkdir(parents=True, exist_ok=True)
        fmt = normalize_format(format)
        derived_path = directory / derived_name(base_hash, variant, width, height, fmt)

        if derived_path.exists():
            logger.debug(f"Derivative {derived_path.name} already exists")
            return derived_path

        base = resolve_base_path(directory, base_hash)
        if not base.found:
            logger.warning(f"Base artifact missing for {base_hash}")
            return base.path

        image = self.encoder.open(base.path)
        resized = self.encoder.resize(image, width, height)
        data = self.encoder.encode(resized, fmt)
        check_cancelled(cancel)
        atomic_write_bytes(derived_path, data, cancel)
        logger.info(f"Generated derivative {derived_path.name}")
        return derived_path

    def ensure_converted(
        self,
        output_dir: str | Path,
        base_hash: str,
        variant: str,
        format: str | ImageFormat | None = "png",
        *,
        cancel: threading.Event | None = None,
    ) -> Path:
        """Return the base re-encoded in the requested format at full size."""
        directory = _require_dir(output_dir)
        base_hash = _require_name(base_hash, "base_hash")
        variant = _check_variant(variant)

        directory.mkdir(parents=True, exist_ok=True)
        fmt = normalize_format(format)
        base = resolve_base_path(directory, base_hash)

        # PNG requested and base is PNG (or absent): nothing to convert
        if fmt is ImageFormat.PNG and base.path.suffix.lower() == ".png":
            return base.path

        derived_path = directory / converted_name(base_hash, variant, fmt)
        if derived_path.exists():
            return derived_path
        if not base.found:
            logger.warning(f"Base artifact missing for {base_hash}")
            return base.path

        image = self.encoder.open(base.path)
        data = self.encoder.encode(image, fmt)
        check_cancelled(cancel)
        atomic_write_bytes(derived_path, data, cancel)
        logger.info(f"Converted {base.path.name} to {derived_path.name}")
        return derived_path

    async def ensure_resized_async(
        self,
        output_dir: str | Path,
        base_hash: str,
        variant: str,
        width: int,
        height: int,
        format: str | ImageFormat | None = "png",
    ) -> Path:
        return await run_cancellable(
            self.ensure_resized, output_dir, base_hash, variant, width, height, format
        )

    async def ensure_converted_async(
        self,
        output_dir: str | Path,
        base_hash: str,
        variant: str,
        format: str | ImageFormat | None = "png",
    ) -> Path:
        return await run_cancellable(
            self.ensure_converted, output_dir, base_hash, variant, format
        )


_default_engine = DerivativeEngine()


def ensure_resized(
    output_dir: str | Path,
    base_hash: str,
    variant: str,
    width: int,
    height: int,
    format: str | ImageFormat | None = "png",
) -> Path:
    """Module-level shortcut using a default engine."""
    return _default_engine.ensure_resized(output_dir, base_hash, variant, width, height, format)


def ensure_converted(
    output_dir: str | Path,
    base_hash: str,
    variant: str,
    format: str | ImageFormat | None = "png",
) -> Path:
    """Module-level shortcut using a default engine."""
    return _default_engine.ensure_converted(output_dir, base_hash, variant, format)
