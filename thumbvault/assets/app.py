"""FastAPI static asset server.

Usage:
    from thumbvault.assets import create_asset_app

    app = create_asset_app("./assets")
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi import APIRouter, FastAPI
from fastapi.responses import FileResponse, PlainTextResponse, Response

from thumbvault.assets.resolver import (
    CACHE_CONTROL,
    AssetFound,
    AssetOutcome,
    AssetResolver,
)


def create_asset_router(
    resolver: AssetResolver,
    *,
    tags: list[str] | None = None,
) -> APIRouter:
    """Create the catch-all asset router with its liveness endpoints."""
    if tags is None:
        tags = ["assets"]

    router = APIRouter(tags=tags)

    @router.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        """Liveness check."""
        return "OK"

    @router.get("/health")
    async def health() -> dict[str, bool]:
        """Liveness check."""
        return {"ok": True}

    @router.api_route("/{path:path}", methods=["GET", "HEAD"])
    async def serve_asset(path: str) -> Response:
        """Serve a file by path, or by bare file name from any subfolder."""
        result = await asyncio.to_thread(resolver.resolve, path)

        if isinstance(result, AssetFound):
            return FileResponse(
                result.path,
                media_type=result.media_type,
                headers={"Cache-Control": CACHE_CONTROL},
            )
        if result is AssetOutcome.LIVENESS:
            return PlainTextResponse("OK")
        if result is AssetOutcome.BAD_REQUEST:
            return PlainTextResponse("Bad Request", status_code=400)
        return PlainTextResponse("Not Found", status_code=404)

    return router


def create_asset_app(root: str | Path) -> FastAPI:
    """Create a standalone asset server app for ``root``."""
    root = Path(root)
    root.mkdir(parents=True, exist_ok=True)

    app = FastAPI(title="ThumbVault Assets")
    app.include_router(create_asset_router(AssetResolver(root)))
    return app
