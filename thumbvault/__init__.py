"""ThumbVault - content-addressed avatar thumbnail cache and asset server."""

from thumbvault.errors import (
    InvalidInput,
    OperationCancelled,
    ThumbVaultError,
    UpstreamProtocolError,
    UpstreamUnavailable,
)
from thumbvault.models import ImageFormat, ThumbnailSaveResult, ThumbVaultSettings
from thumbvault.vault import ThumbVault

__version__ = "0.1.0"
__all__ = [
    "ImageFormat",
    "InvalidInput",
    "OperationCancelled",
    "ThumbVault",
    "ThumbVaultError",
    "ThumbVaultSettings",
    "ThumbnailSaveResult",
    "UpstreamProtocolError",
    "UpstreamUnavailable",
]
