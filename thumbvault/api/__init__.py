"""FastAPI router for ThumbVault."""

from thumbvault.api.routes import create_router, parse_subject_ids

__all__ = ["create_router", "parse_subject_ids"]
