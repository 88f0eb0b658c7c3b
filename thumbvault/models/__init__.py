"""Data models for ThumbVault."""

from thumbvault.models.artifact import ImageFormat, ThumbnailSaveResult
from thumbvault.models.config import (
    SettingSource,
    ThumbVaultSettings,
    combine_url,
    compose_artifact_url,
    resolve_setting,
)
from thumbvault.models.render import RenderRequest, RenderType

__all__ = [
    # Artifacts
    "ImageFormat",
    "ThumbnailSaveResult",
    # Rendering
    "RenderRequest",
    "RenderType",
    # Settings
    "SettingSource",
    "ThumbVaultSettings",
    "combine_url",
    "compose_artifact_url",
    "resolve_setting",
]
