"""Content-addressed thumbnail storage, derivatives and remote rendering."""

from thumbvault.thumbnails.derivatives import (
    BaseResolution,
    DerivativeEngine,
    converted_name,
    derived_name,
    ensure_converted,
    ensure_resized,
    resolve_base_path,
)
from thumbvault.thumbnails.formats import normalize_format, sniff_format
from thumbvault.thumbnails.gateway import (
    ArrayPayload,
    ObjectPayload,
    RenderGateway,
    StringPayload,
    decode_render_response,
    extract_image_base64,
)
from thumbvault.thumbnails.renderer import ImageEncoder
from thumbvault.thumbnails.store import ThumbnailStore, content_hash, decode_payload
from thumbvault.thumbnails.urls import ArtifactUrlEntry, ArtifactUrlStore, UrlKind

__all__ = [
    "ArrayPayload",
    "ArtifactUrlEntry",
    "ArtifactUrlStore",
    "BaseResolution",
    "DerivativeEngine",
    "ImageEncoder",
    "ObjectPayload",
    "RenderGateway",
    "StringPayload",
    "ThumbnailStore",
    "UrlKind",
    "content_hash",
    "converted_name",
    "decode_payload",
    "decode_render_response",
    "derived_name",
    "ensure_converted",
    "ensure_resized",
    "extract_image_base64",
    "normalize_format",
    "resolve_base_path",
    "sniff_format",
]
