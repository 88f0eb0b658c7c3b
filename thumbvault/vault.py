"""Main ThumbVault class - unified interface for storing and deriving thumbnails."""

from __future__ import annotations

import asyncio
from pathlib import Path

from thumbvault.assets.resolver import AssetResolver, AssetResult
from thumbvault.models.artifact import ImageFormat, ThumbnailSaveResult
from thumbvault.models.config import ThumbVaultSettings, compose_artifact_url
from thumbvault.thumbnails.derivatives import DerivativeEngine
from thumbvault.thumbnails.gateway import RenderGateway
from thumbvault.thumbnails.renderer import ImageEncoder
from thumbvault.thumbnails.store import ThumbnailStore
from thumbvault.thumbnails.urls import ArtifactUrlStore, UrlKind


class ThumbVault:
    """Main interface wiring the store, derivatives, renderer and assets."""

    def __init__(self, settings: ThumbVaultSettings | None = None) -> None:
        self.settings = settings or ThumbVaultSettings()

        self._store: ThumbnailStore | None = None
        self._derivatives: DerivativeEngine | None = None
        self._gateway: RenderGateway | None = None
        self._urls: ArtifactUrlStore | None = None
        self._assets: AssetResolver | None = None

    @property
    def output_dir(self) -> Path:
        return self.settings.output_dir

    @property
    def store(self) -> ThumbnailStore:
        if self._store is None:
            self._store = ThumbnailStore(self.settings.output_dir)
        return self._store

    @property
    def derivatives(self) -> DerivativeEngine:
        if self._derivatives is None:
            self._derivatives = DerivativeEngine(
                ImageEncoder(jpg_quality=self.settings.jpg_quality)
            )
        return self._derivatives

    @property
    def gateway(self) -> RenderGateway:
        if self._gateway is None:
            self._gateway = RenderGateway(
                self.settings.arbiter_url,
                self.store,
                base_url=self.settings.public_base_url,
                timeout=self.settings.request_timeout,
            )
        return self._gateway

    @property
    def urls(self) -> ArtifactUrlStore:
        if self._urls is None:
            self._urls = ArtifactUrlStore(self.settings.url_db_path)
        return self._urls

    @property
    def assets(self) -> AssetResolver:
        if self._assets is None:
            self._assets = AssetResolver(self.settings.assets_root)
        return self._assets

    # --- Core operations ---

    async def ingest(self, payload: str) -> ThumbnailSaveResult:
        """Store base64 image data (optionally a data URI)."""
        return await self.store.save_base64_async(payload)

    async def render(
        self,
        type: str,
        subject_id: int,
        width: int | None = None,
        height: int | None = None,
    ) -> ThumbnailSaveResult:
        """Render remotely and store the result."""
        return await self.gateway.render_and_ingest(type, subject_id, width, height)

    async def derive(
        self,
        base_hash: str,
        variant: str,
        width: int,
        height: int,
        format: str | ImageFormat | None = "png",
    ) -> Path:
        """Resized derivative path (or the missing base path)."""
        return await self.derivatives.ensure_resized_async(
            self.output_dir, base_hash, variant, width, height, format
        )

    async def convert(
        self,
        base_hash: str,
        variant: str,
        format: str | ImageFormat | None = "png",
    ) -> Path:
        """Format-converted derivative path (or the base / missing base path)."""
        return await self.derivatives.ensure_converted_async(
            self.output_dir, base_hash, variant, format
        )

    def resolve_asset(self, request_path: str) -> AssetResult:
        return self.assets.resolve(request_path)

    # --- Subject URLs ---

    def artifact_url(
        self,
        file_name: str,
        *,
        override: str | None = None,
        scheme: str | None = None,
        host: str | None = None,
    ) -> str:
        return compose_artifact_url(
            file_name,
            override=override,
            configured=self.settings.public_base_url,
            scheme=scheme,
            host=host,
        )

    async def headshot_url(
        self,
        subject_id: int,
        *,
        scheme: str | None = None,
        host: str | None = None,
    ) -> str:
        """Known headshot URL for a subject, rendering and recording one on a miss."""
        known = await asyncio.to_thread(self.urls.get, subject_id, UrlKind.HEADSHOT)
        if known:
            return known

        saved = await self.render("headshot", subject_id)
        url = self.artifact_url(saved.file_name, scheme=scheme, host=host)
        await asyncio.to_thread(self.urls.set, subject_id, url, UrlKind.HEADSHOT)
        return url

    async def headshot_urls(
        self,
        subject_ids: list[int],
        *,
        scheme: str | None = None,
        host: str | None = None,
    ) -> dict[int, str]:
        """Headshot URLs for several subjects, rendering the missing ones in order."""
        known = await asyncio.to_thread(self.urls.get_many, subject_ids, UrlKind.HEADSHOT)
        results: dict[int, str] = {}
        for subject_id in subject_ids:
            url = known.get(subject_id)
            if not url:
                url = await self.headshot_url(subject_id, scheme=scheme, host=host)
            results[subject_id] = url
        return results

    async def close(self) -> None:
        """Release the HTTP client and database connection."""
        if self._gateway:
            await self._gateway.close()
        if self._urls:
            self._urls.close()
