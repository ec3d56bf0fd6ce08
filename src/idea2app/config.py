"""YAML config loader and lazily-built provider settings."""

from __future__ import annotations

from pathlib import Path

import yaml

from idea2app.schemas.config import ProjectConfig, ProviderSettings

_settings: ProviderSettings | None = None


def load_config(path: str | Path) -> ProjectConfig:
    """Load and validate a project config file.

    Raises ``FileNotFoundError`` if the path doesn't exist and
    ``pydantic.ValidationError`` if the YAML content is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = yaml.safe_load(path.read_text())
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    # A block scalar left empty loads as None; treat it as missing text.
    for key in ("idea", "name"):
        if raw.get(key) is None and key in raw:
            raw[key] = ""

    return ProjectConfig(**raw)


def get_settings() -> ProviderSettings:
    """Return process-wide provider settings, reading the environment on first use."""
    global _settings
    if _settings is None:
        _settings = ProviderSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next ``get_settings`` re-reads the environment."""
    global _settings
    _settings = None
