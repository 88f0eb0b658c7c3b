"""Client for the external avatar renderer ("Arbiter").

The renderer answers ``GET /renderavatar`` with JSON in one of three shapes:

1. an array of ``{"type": ..., "value": "<base64>"}`` entries (or bare strings)
2. an object ``{"value": "<base64>"}``
3. a bare string ``"<base64>"``

Whatever the shape, the extracted base64 is handed to the artifact store and
never written to disk any other way.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Union

import httpx
from pydantic import ValidationError

from thumbvault.errors import InvalidInput, UpstreamProtocolError, UpstreamUnavailable
from thumbvault.models.artifact import ThumbnailSaveResult
from thumbvault.models.render import RenderRequest
from thumbvault.thumbnails.store import ThumbnailStore

logger = logging.getLogger(__name__)


def _non_blank(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


@dataclass(frozen=True)
class ArrayPayload:
    entries: list[Any]

    def extract(self) -> str | None:
        # Later entries win; blank values are skipped
        for entry in reversed(self.entries):
            if isinstance(entry, dict):
                value = _non_blank(entry.get("value"))
            else:
                value = _non_blank(entry)
            if value is not None:
                return value
        return None


@dataclass(frozen=True)
class ObjectPayload:
    body: dict[str, Any]

    def extract(self) -> str | None:
        return _non_blank(self.body.get("value"))


@dataclass(frozen=True)
class StringPayload:
    value: str

    def extract(self) -> str | None:
        return _non_blank(self.value)


RenderPayload = Union[ArrayPayload, ObjectPayload, StringPayload]


def decode_render_response(raw: str) -> RenderPayload:
    """Classify a renderer response body into one of the known shapes."""
    try:
        document = json.loads(raw)
    except ValueError as e:
        raise UpstreamProtocolError("Renderer returned invalid JSON", raw) from e

    if isinstance(document, list):
        if not document:
            raise UpstreamProtocolError("Unexpected response from renderer", raw)
        return ArrayPayload(document)
    if isinstance(document, dict):
        return ObjectPayload(document)
    if isinstance(document, str):
        return StringPayload(document)
    raise UpstreamProtocolError("Unexpected response from renderer", raw)


def extract_image_base64(raw: str) -> str:
    """Pull the base64 image out of a renderer response body."""
    value = decode_render_response(raw).extract()
    if value is None:
        raise UpstreamProtocolError("Could not extract base64 image from renderer response", raw)
    return value


class RenderGateway:
    """Renders avatars remotely and ingests the result into the store."""

    def __init__(
        self,
        arbiter_url: str,
        store: ThumbnailStore,
        *,
        base_url: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.arbiter_url = arbiter_url.rstrip("/")
        self.store = store
        self.base_url = base_url
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def build_params(self, request: RenderRequest) -> dict[str, str]:
        width, height = request.dimensions
        params = {
            "type": request.type,
            "userId": str(request.subject_id),
            "x": str(width),
            "y": str(height),
        }
        if self.base_url:
            params["baseUrl"] = self.base_url
        return params

    async def fetch(self, request: RenderRequest) -> str:
        """Call the renderer and return the raw response body."""
        url = f"{self.arbiter_url}/renderavatar"
        try:
            response = await self.client.get(url, params=self.build_params(request))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailable(
                f"Renderer returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Renderer request failed: {e}") from e
        return response.text

    async def render_and_ingest(
        self,
        type: str,
        subject_id: int,
        width: int | None = None,
        height: int | None = None,
    ) -> ThumbnailSaveResult:
        """Render one image and store it by content hash."""
        try:
            request = RenderRequest(
                type=type, subject_id=subject_id, width=width, height=height
            )
        except ValidationError as e:
            raise InvalidInput(str(e)) from e

        raw = await self.fetch(request)
        payload = extract_image_base64(raw)
        try:
            result = await self.store.save_base64_async(payload)
        except InvalidInput as e:
            raise UpstreamProtocolError("Renderer returned invalid base64", raw) from e
        logger.info(
            f"Rendered {request.type} for subject {request.subject_id} -> {result.file_name}"
        )
        return result
