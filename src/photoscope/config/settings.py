# src/photoscope/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/photoscope/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `PHOTOSCOPE_CONFIG_PATH`
- environment variables (e.g., `INSTAGRAM_ACCESS_TOKEN`, `PHOTOSCOPE_LOG_LEVEL`)

Design rule:
- Endpoints, timeouts and the sentinel distance live in YAML, not in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from photoscope.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `photoscope.config`."""
    text = resources.files("photoscope.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "PhotoScope"
    http_timeout_seconds: float = Field(15, gt=0)
    log_level: str = "INFO"


class InstagramSettings(BaseModel):
    base_url: str = "https://api.instagram.com/v1"
    access_token: str | None = None
    default_distance_m: int = Field(1000, gt=0)


class EnrichmentSettings(BaseModel):
    sentinel_distance_km: float = Field(10_000_000, gt=0)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    instagram: InstagramSettings = Field(default_factory=InstagramSettings)
    enrichment: EnrichmentSettings = Field(default_factory=EnrichmentSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small to avoid exposing unsafe overrides.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("PHOTOSCOPE_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    token = os.getenv("INSTAGRAM_ACCESS_TOKEN")
    if token:
        data.setdefault("instagram", {})["access_token"] = token

    base_url = os.getenv("INSTAGRAM_BASE_URL")
    if base_url:
        data.setdefault("instagram", {})["base_url"] = base_url

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("PHOTOSCOPE_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
