"""Static asset server for stored artifacts."""

from thumbvault.assets.app import create_asset_app, create_asset_router
from thumbvault.assets.resolver import (
    CACHE_CONTROL,
    AssetFound,
    AssetOutcome,
    AssetResolver,
)

__all__ = [
    "CACHE_CONTROL",
    "AssetFound",
    "AssetOutcome",
    "AssetResolver",
    "create_asset_app",
    "create_asset_router",
]
