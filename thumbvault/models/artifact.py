"""Artifact models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ImageFormat(str, Enum):
    """Stored image formats."""

    PNG = "png"
    JPG = "jpg"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def media_type(self) -> str:
        return "image/png" if self is ImageFormat.PNG else "image/jpeg"

    @property
    def pillow_format(self) -> str:
        return "PNG" if self is ImageFormat.PNG else "JPEG"


class ThumbnailSaveResult(BaseModel):
    """Reference to a stored artifact, returned by every ingestion path."""

    hash: str = Field(..., description="Lowercase hex SHA-256 of the raw bytes")
    format: ImageFormat
    file_name: str
    full_path: str
    already_existed: bool = False
