"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import base64
import json
import tempfile
from io import BytesIO
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from PIL import Image

from thumbvault.models.config import ThumbVaultSettings
from thumbvault.vault import ThumbVault


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def make_image_bytes(fmt: str = "PNG", size: tuple[int, int] = (40, 20)) -> bytes:
    """Encode a small solid-color image."""
    mode = "RGBA" if fmt == "PNG" else "RGB"
    color = (200, 40, 40, 255) if mode == "RGBA" else (200, 40, 40)
    image = Image.new(mode, size, color)
    output = BytesIO()
    image.save(output, format=fmt)
    return output.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def jpg_bytes() -> bytes:
    return make_image_bytes("JPEG")


@pytest.fixture
def png_base64(png_bytes: bytes) -> str:
    return base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def settings(temp_dir: Path) -> ThumbVaultSettings:
    return ThumbVaultSettings(
        output_dir=temp_dir / "thumbnails",
        assets_root=temp_dir / "thumbnails",
        arbiter_url="http://arbiter.test",
        url_db_path=temp_dir / "urls.db",
    )


@pytest.fixture
def mock_renderer_response(png_base64: str) -> str:
    """Renderer body in the array shape: last entry blank, earlier entry usable."""
    return json.dumps(
        [
            {"type": "string", "value": png_base64},
            {"type": "string", "value": ""},
        ]
    )


def make_mock_client(body: str, status_code: int = 200) -> AsyncMock:
    """Create a mock httpx client answering every GET with ``body``."""
    calls: list[dict] = []

    async def mock_get(url, **kwargs):
        calls.append({"url": url, **kwargs})
        response = MagicMock()
        response.status_code = status_code
        response.text = body
        response.raise_for_status = MagicMock()
        if status_code >= 400:
            response.raise_for_status.side_effect = httpx.HTTPStatusError(
                f"HTTP {status_code}",
                request=httpx.Request("GET", url),
                response=httpx.Response(status_code),
            )
        return response

    mock_client = AsyncMock()
    mock_client.get = mock_get
    mock_client.calls = calls
    return mock_client


@pytest.fixture
def image_factory():
    return make_image_bytes


@pytest.fixture
def client_factory():
    return make_mock_client


@pytest.fixture
def mock_httpx_client(mock_renderer_response: str) -> AsyncMock:
    return make_mock_client(mock_renderer_response)


@pytest.fixture
def vault(settings: ThumbVaultSettings, mock_httpx_client) -> Generator[ThumbVault, None, None]:
    """ThumbVault whose renderer client is mocked."""
    vault = ThumbVault(settings)
    vault.gateway._client = mock_httpx_client
    yield vault
    vault.urls.close()


@pytest.fixture
def fastapi_app(vault: ThumbVault) -> FastAPI:
    from thumbvault.api import create_router

    app = FastAPI()
    app.include_router(create_router(vault))
    return app


@pytest.fixture
def api_client(fastapi_app: FastAPI) -> TestClient:
    """Create a test client for the FastAPI app."""
    return TestClient(fastapi_app)


# Markers for test categories
def pytest_configure(config):
    config.addinivalue_line("markers", "mock: tests using mocked renderer responses")
    config.addinivalue_line("markers", "slow: slow running tests")
