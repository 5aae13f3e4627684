# src/g25atlas/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/g25atlas/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `G25ATLAS_LOG_LEVEL`, `G25ATLAS_CATALOG_PATH`)
- an external YAML file via `G25ATLAS_CONFIG_PATH`

Design rule:
- Tuning knobs (jitter spiral, color scale, panel caps) live in YAML, not hard-coded in the engine.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any
from g25atlas.core.env import load_dotenv_if_present

import yaml
from pydantic import BaseModel, Field


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `g25atlas.config`."""
    text = resources.files("g25atlas.config").joinpath(filename).read_text(encoding="utf-8")
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
    name: str = "G25 Atlas"
    log_level: str = "INFO"


class EngineSettings(BaseModel):
    default_limit: int = Field(20, ge=1)
    max_limit: int = Field(500, ge=1)
    distance_decimals: int = Field(5, ge=0, le=12)
    plot_scale_fraction: float = Field(0.2, gt=0, le=1)
    min_vector_length: int = Field(25, ge=1)
    missing_distance: float = 999.0


class ProjectionSettings(BaseModel):
    jitter_step_radians: float = 2.4
    jitter_radius_deg: float = Field(0.01, ge=0)
    key_decimals: int = Field(5, ge=0, le=12)
    year_field: str = "mean_bp"
    haplogroup_field: str = "y_haplo"


class LimitsSettings(BaseModel):
    max_panel_chars: int = Field(5_000_000, ge=1)
    max_source_vectors: int = Field(20_000, ge=1)
    max_target_vectors: int = Field(50, ge=1)


class CatalogSettings(BaseModel):
    path: str = "data/samples/map-samples.json"
    vector_field: str = "g25_string"


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    projection: ProjectionSettings = Field(default_factory=ProjectionSettings)
    limits: LimitsSettings = Field(default_factory=LimitsSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("G25ATLAS_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    catalog_path = os.getenv("G25ATLAS_CATALOG_PATH")
    if catalog_path:
        data.setdefault("catalog", {})["path"] = catalog_path

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("G25ATLAS_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
