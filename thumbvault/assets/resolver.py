"""Resolution of request paths to files under the asset root.

Lookup order:

1. reject traversal and absolute paths without touching the filesystem
2. the path joined under the root, if it is a file
3. for a bare file name, the first file with that exact name anywhere
   under the root (artifacts get moved into subfolders such as
   ``thumbnails/`` while old links still ask for the bare name)
"""

from __future__ import annotations

import logging
import mimetypes
import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"
CACHE_CONTROL = "public, max-age=31536000, immutable"

_SEPARATORS = re.compile(r"[\\/]")
_DRIVE = re.compile(r"^[A-Za-z]:")


class AssetOutcome(str, Enum):
    """Non-file results of a lookup."""

    LIVENESS = "liveness"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class AssetFound:
    """A file to stream back to the caller."""

    path: Path
    media_type: str
    via_search: bool = False


AssetResult = Union[AssetFound, AssetOutcome]


def guess_media_type(path: Path) -> str:
    media_type, _ = mimetypes.guess_type(path.name)
    return media_type or DEFAULT_MEDIA_TYPE


def is_unsafe_path(request_path: str) -> bool:
    """True for paths with a ``..`` segment, a leading separator or a drive."""
    if request_path.startswith(("/", "\\")) or _DRIVE.match(request_path):
        return True
    return ".." in _SEPARATORS.split(request_path)


class AssetResolver:
    """Maps URL paths onto files below a single root directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def resolve(self, request_path: str | None) -> AssetResult:
        path = request_path or ""
        if not path:
            return AssetOutcome.LIVENESS

        if is_unsafe_path(path):
            logger.warning("Rejected asset path with traversal segment")
            return AssetOutcome.BAD_REQUEST

        segments = [s for s in _SEPARATORS.split(path) if s]
        if not segments:
            return AssetOutcome.NOT_FOUND

        direct = self.root.joinpath(*segments)
        if direct.is_file():
            return AssetFound(path=direct, media_type=guess_media_type(direct))

        # Only bare file names fall back to searching subfolders
        if len(segments) == 1 and segments[0] == path:
            match = self.find_by_name(path)
            if match is not None:
                logger.debug(f"Resolved {path} by search to {match.relative_to(self.root)}")
                return AssetFound(
                    path=match, media_type=guess_media_type(match), via_search=True
                )

        return AssetOutcome.NOT_FOUND

    def find_by_name(self, file_name: str) -> Path | None:
        """First file named exactly ``file_name`` anywhere under the root."""
        if not self.root.is_dir():
            return None
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames.sort()
            if file_name in filenames:
                candidate = Path(dirpath) / file_name
                if candidate.is_file():
                    return candidate
        return None
