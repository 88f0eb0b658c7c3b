"""Content-addressed artifact store.

Artifacts live at ``{output_dir}/{sha256}.{ext}``. Storing the same bytes
twice is a no-op: the first committed write wins and later writers see the
file and skip.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import threading
from pathlib import Path

from thumbvault.errors import InvalidInput
from thumbvault.models.artifact import ImageFormat, ThumbnailSaveResult
from thumbvault.thumbnails.formats import sniff_format
from thumbvault.thumbnails.writer import atomic_write_bytes, run_cancellable

logger = logging.getLogger(__name__)


def decode_payload(payload: str) -> bytes:
    """Decode base64 image data, dropping any ``data:...;base64,`` prefix."""
    if payload is None or not payload.strip():
        raise InvalidInput("Base64 input is required")

    comma = payload.find(",")
    if comma >= 0:
        payload = payload[comma + 1 :]

    try:
        return base64.b64decode("".join(payload.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInput("Invalid base64 string provided") from e


def content_hash(data: bytes) -> str:
    """Lowercase hex SHA-256 of the raw bytes."""
    return hashlib.sha256(data).hexdigest()


class ThumbnailStore:
    """Deduplicating writer for raw image bytes."""

    def __init__(self, output_dir: str | Path) -> None:
        if not str(output_dir).strip():
            raise InvalidInput("output_dir is required")
        self.output_dir = Path(output_dir)

    def artifact_path(self, hash: str, fmt: ImageFormat) -> Path:
        return self.output_dir / f"{hash}.{fmt.extension}"

    def save_bytes(
        self, data: bytes, *, cancel: threading.Event | None = None
    ) -> ThumbnailSaveResult:
        """Store bytes under their content hash unless already present."""
        fmt = sniff_format(data)
        digest = content_hash(data)
        path = self.artifact_path(digest, fmt)

        self.output_dir.mkdir(parents=True, exist_ok=True)

        if path.exists():
            logger.debug(f"Artifact {path.name} already stored")
            return self._result(digest, fmt, path, already_existed=True)

        atomic_write_bytes(path, data, cancel)
        logger.info(f"Stored artifact {path.name} ({len(data)} bytes)")
        return self._result(digest, fmt, path, already_existed=False)

    def save_base64(
        self, payload: str, *, cancel: threading.Event | None = None
    ) -> ThumbnailSaveResult:
        """Decode base64 (optionally a data URI) and store the bytes."""
        return self.save_bytes(decode_payload(payload), cancel=cancel)

    async def save_bytes_async(self, data: bytes) -> ThumbnailSaveResult:
        return await run_cancellable(self.save_bytes, data)

    async def save_base64_async(self, payload: str) -> ThumbnailSaveResult:
        return await run_cancellable(self.save_base64, payload)

    @staticmethod
    def _result(
        digest: str, fmt: ImageFormat, path: Path, *, already_existed: bool
    ) -> ThumbnailSaveResult:
        return ThumbnailSaveResult(
            hash=digest,
            format=fmt,
            file_name=path.name,
            full_path=str(path),
            already_existed=already_existed,
        )
