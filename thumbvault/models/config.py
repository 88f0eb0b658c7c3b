"""Settings for ThumbVault and the ordered lookup they are resolved from."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

OUTPUT_DIR_ENV = "THUMBVAULT_OUTPUT_DIR"
ASSETS_ROOT_ENV = "THUMBVAULT_ASSETS_ROOT"
ARBITER_URL_ENV = "THUMBVAULT_ARBITER_URL"
PUBLIC_BASE_URL_ENV = "THUMBVAULT_PUBLIC_BASE_URL"

PRIMARY_OUTPUT_KEY = "thumbnails.output_directory"
LEGACY_OUTPUT_KEY = "thumbnail_output_directory"

DEFAULT_OUTPUT_DIR = Path("thumbnails")
DEFAULT_ASSETS_ROOT = Path("assets")
DEFAULT_ARBITER_URL = "http://localhost:5000"
DEFAULT_URL_DB = Path("thumbvault.db")


def lookup(values: Mapping[str, Any], key: str) -> Any:
    """Look up a dotted key in nested mappings. Returns None when absent."""
    node: Any = values
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node


@dataclass(frozen=True)
class SettingSource:
    """One candidate location for a setting: a mapping and the key to read."""

    name: str
    values: Mapping[str, Any]
    key: str

    def get(self) -> str | None:
        value = lookup(self.values, self.key)
        if value is None:
            return None
        text = str(value).strip()
        return text or None


def resolve_setting(
    sources: Sequence[SettingSource], default: str | None = None
) -> str | None:
    """Return the first non-blank value from the ordered sources, else default."""
    for source in sources:
        value = source.get()
        if value is not None:
            return value
    return default


class ThumbVaultSettings(BaseModel):
    """Resolved configuration for the store, renderer client and asset server."""

    output_dir: Path = Field(
        default=DEFAULT_OUTPUT_DIR, description="Directory holding artifacts and derivatives"
    )
    assets_root: Path = Field(
        default=DEFAULT_ASSETS_ROOT, description="Root directory served by the asset server"
    )
    arbiter_url: str = Field(default=DEFAULT_ARBITER_URL, description="Renderer base URL")
    public_base_url: str | None = Field(
        default=None, description="Externally visible base URL for artifact links"
    )
    url_db_path: Path = Field(
        default=DEFAULT_URL_DB, description="SQLite file mapping subjects to artifact URLs"
    )
    jpg_quality: int = Field(default=90, ge=1, le=100, description="JPEG quality (1-100)")
    request_timeout: float = Field(default=30.0, gt=0, description="Renderer timeout in seconds")

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        env: Mapping[str, str] | None = None,
        output_dir: str | Path | None = None,
    ) -> "ThumbVaultSettings":
        """Build settings from parsed config data, the environment and an override."""
        env = os.environ if env is None else env
        override = {"output_dir": str(output_dir) if output_dir else None}

        resolved_output = resolve_setting(
            [
                SettingSource("override", override, "output_dir"),
                SettingSource("env", env, OUTPUT_DIR_ENV),
                SettingSource("config", data, PRIMARY_OUTPUT_KEY),
                SettingSource("config-legacy", data, LEGACY_OUTPUT_KEY),
            ],
            default=str(DEFAULT_OUTPUT_DIR),
        )
        assets_root = resolve_setting(
            [
                SettingSource("env", env, ASSETS_ROOT_ENV),
                SettingSource("config", data, "cdn.assets_root"),
            ],
            default=str(DEFAULT_ASSETS_ROOT),
        )
        arbiter_url = resolve_setting(
            [
                SettingSource("env", env, ARBITER_URL_ENV),
                SettingSource("config", data, "thumbnails.arbiter_url"),
            ],
            default=DEFAULT_ARBITER_URL,
        )
        public_base_url = resolve_setting(
            [
                SettingSource("env", env, PUBLIC_BASE_URL_ENV),
                SettingSource("config", data, "thumbnails.thumbnail_url"),
            ]
        )

        extra: dict[str, Any] = {}
        for field_name, key in (
            ("url_db_path", "thumbnails.url_db_path"),
            ("jpg_quality", "thumbnails.jpg_quality"),
            ("request_timeout", "thumbnails.request_timeout"),
        ):
            value = lookup(data, key)
            if value is not None:
                extra[field_name] = value

        return cls.model_validate(
            {
                "output_dir": resolved_output,
                "assets_root": assets_root,
                "arbiter_url": arbiter_url,
                "public_base_url": public_base_url,
                **extra,
            }
        )

    @classmethod
    def load(
        cls,
        path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
        output_dir: str | Path | None = None,
    ) -> "ThumbVaultSettings":
        """Load settings from an optional YAML file."""
        data: dict[str, Any] = {}
        if path is not None and path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        return cls.from_mapping(data, env=env, output_dir=output_dir)


def combine_url(base_url: str, relative: str) -> str:
    """Join a base URL and a relative path with exactly one slash between them."""
    if not base_url:
        return relative
    if not relative:
        return base_url
    return base_url.rstrip("/") + "/" + relative.lstrip("/")


def compose_artifact_url(
    file_name: str,
    *,
    override: str | None = None,
    configured: str | None = None,
    scheme: str | None = None,
    host: str | None = None,
) -> str:
    """Compose an absolute artifact URL.

    The base is the explicit override, then the configured public base URL,
    then one inferred from the inbound request's scheme and host.
    """
    inferred = f"{scheme or 'http'}://{host or 'localhost'}/"
    base = resolve_setting(
        [
            SettingSource("override", {"base": override}, "base"),
            SettingSource("configured", {"base": configured}, "base"),
        ],
        default=inferred,
    )
    return combine_url(base or inferred, file_name)
