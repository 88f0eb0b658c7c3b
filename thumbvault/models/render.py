"""Render request model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class RenderType(str, Enum):
    """Render types the renderer knows about."""

    HEADSHOT = "headshot"
    AVATAR = "avatar"
    FULL = "full"
    FULLBODY = "fullbody"
    THUMBNAIL = "thumbnail"


# Keys are lowercased type names; "thumb" is an accepted alias.
DEFAULT_DIMENSIONS: dict[str, tuple[int, int]] = {
    "headshot": (1024, 1024),
    "avatar": (420, 800),
    "full": (1024, 1024),
    "fullbody": (1024, 1024),
    "thumbnail": (150, 150),
    "thumb": (150, 150),
}
FALLBACK_DIMENSIONS = (420, 420)


class RenderRequest(BaseModel):
    """Parameters for one render; never persisted."""

    type: str = Field(default=RenderType.HEADSHOT.value)
    subject_id: int = Field(..., gt=0)
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value: object) -> object:
        if isinstance(value, RenderType):
            return value.value
        if value is None or (isinstance(value, str) and not value.strip()):
            return RenderType.HEADSHOT.value
        return value

    @property
    def dimensions(self) -> tuple[int, int]:
        """Width and height after applying type defaults and caller overrides."""
        default_w, default_h = DEFAULT_DIMENSIONS.get(
            self.type.strip().lower(), FALLBACK_DIMENSIONS
        )
        return (self.width or default_w, self.height or default_h)
