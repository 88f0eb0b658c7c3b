"""FastAPI router for ThumbVault.

Usage:
    from fastapi import FastAPI
    from thumbvault.api import create_router
    from thumbvault import ThumbVault

    app = FastAPI()
    vault = ThumbVault()

    app.include_router(create_router(vault))
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from thumbvault.errors import InvalidInput, UpstreamProtocolError, UpstreamUnavailable
from thumbvault.models.artifact import ThumbnailSaveResult
from thumbvault.vault import ThumbVault


# Request/response models
class IngestBody(BaseModel):
    base64: str = Field(..., description="Base64 image data, optionally a data URI")


class RenderBody(BaseModel):
    type: str = "headshot"
    subject_id: int
    width: int | None = None
    height: int | None = None


class SaveResponse(BaseModel):
    hash: str
    format: str
    file_name: str
    url: str
    already_existed: bool


class DerivedResponse(BaseModel):
    file_name: str
    url: str


class HeadshotResponse(BaseModel):
    final: bool = True
    url: str


class SubjectHeadshotResponse(HeadshotResponse):
    user_id: int


def parse_subject_ids(raw: str) -> list[int]:
    """Parse ``1,2,3``; invalid or non-positive ids are dropped, duplicates removed."""
    ids: list[int] = []
    for part in raw.split(","):
        part = part.strip()
        try:
            value = int(part)
        except ValueError:
            continue
        if value > 0 and value not in ids:
            ids.append(value)
    return ids


def create_router(
    vault: ThumbVault,
    *,
    prefix: str = "",
    tags: list[str] | None = None,
) -> APIRouter:
    """Create a FastAPI router for ThumbVault.

    Args:
        vault: ThumbVault instance to use
        prefix: URL prefix for all routes
        tags: OpenAPI tags for the router

    Returns:
        APIRouter that can be included in a FastAPI app
    """
    if tags is None:
        tags = ["thumbnails"]

    router = APIRouter(prefix=prefix, tags=tags)

    def to_response(saved: ThumbnailSaveResult, request: Request) -> SaveResponse:
        return SaveResponse(
            hash=saved.hash,
            format=saved.format.value,
            file_name=saved.file_name,
            url=vault.artifact_url(
                saved.file_name, scheme=request.url.scheme, host=request.url.netloc
            ),
            already_existed=saved.already_existed,
        )

    def derived_response(path: Path, request: Request) -> DerivedResponse:
        if not path.exists():
            raise HTTPException(status_code=404, detail="Base thumbnail not found")
        return DerivedResponse(
            file_name=path.name,
            url=vault.artifact_url(
                path.name, scheme=request.url.scheme, host=request.url.netloc
            ),
        )

    # --- Ingestion ---

    @router.post("/thumbnails", response_model=SaveResponse)
    async def ingest(
        body: IngestBody,
        request: Request,
    ) -> SaveResponse:
        """Store base64 image data by content hash."""
        try:
            saved = await vault.ingest(body.base64)
        except InvalidInput as e:
            raise HTTPException(status_code=400, detail=str(e))
        return to_response(saved, request)

    @router.post("/thumbnails/render", response_model=SaveResponse)
    async def render(
        body: RenderBody,
        request: Request,
    ) -> SaveResponse:
        """Render an image remotely and store it."""
        try:
            saved = await vault.render(body.type, body.subject_id, body.width, body.height)
        except InvalidInput as e:
            raise HTTPException(status_code=400, detail=str(e))
        except (UpstreamProtocolError, UpstreamUnavailable) as e:
            raise HTTPException(status_code=502, detail=str(e))
        return to_response(saved, request)

    # --- Derivatives ---

    @router.get("/thumbnails/{base_hash}/derived", response_model=DerivedResponse)
    async def derived(
        base_hash: str,
        request: Request,
        width: int = Query(..., gt=0),
        height: int = Query(..., gt=0),
        variant: str = "bust",
        format: str = "png",
    ) -> DerivedResponse:
        """Resized derivative of a stored thumbnail."""
        try:
            path = await vault.derive(base_hash, variant, width, height, format)
        except InvalidInput as e:
            raise HTTPException(status_code=400, detail=str(e))
        return derived_response(path, request)

    @router.get("/thumbnails/{base_hash}/converted", response_model=DerivedResponse)
    async def converted(
        base_hash: str,
        request: Request,
        variant: str = "full",
        format: str = "png",
    ) -> DerivedResponse:
        """Stored thumbnail re-encoded in another format."""
        try:
            path = await vault.convert(base_hash, variant, format)
        except InvalidInput as e:
            raise HTTPException(status_code=400, detail=str(e))
        return derived_response(path, request)

    # --- Headshot lookups ---

    @router.get("/thumbnail/avatar-headshot", response_model=HeadshotResponse)
    async def avatar_headshot(
        request: Request,
        user_id: Annotated[int, Query(alias="userId")] = 0,
    ) -> HeadshotResponse:
        """Known headshot URL for a user, rendering one if none is recorded."""
        if user_id <= 0:
            raise HTTPException(status_code=400, detail="userId is required")
        try:
            url = await vault.headshot_url(
                user_id, scheme=request.url.scheme, host=request.url.netloc
            )
        except (UpstreamProtocolError, UpstreamUnavailable) as e:
            raise HTTPException(status_code=502, detail=str(e))
        return HeadshotResponse(url=url)

    @router.get(
        "/thumbnail/avatar-headshots", response_model=list[SubjectHeadshotResponse]
    )
    async def avatar_headshots(
        request: Request,
        user_ids: Annotated[str, Query(alias="userIds")] = "",
    ) -> list[SubjectHeadshotResponse]:
        """Headshot URLs for a comma-separated list of users."""
        if not user_ids.strip():
            raise HTTPException(status_code=400, detail="userIds is required")
        ids = parse_subject_ids(user_ids)
        try:
            urls = await vault.headshot_urls(
                ids, scheme=request.url.scheme, host=request.url.netloc
            )
        except (UpstreamProtocolError, UpstreamUnavailable) as e:
            raise HTTPException(status_code=502, detail=str(e))
        return [SubjectHeadshotResponse(user_id=i, url=urls[i]) for i in ids]

    return router
