"""YAML + env var config loading with pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mongo_sanitize.errors import ConfigurationError

logger = structlog.get_logger()

_DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def load_options_file(path: str | Path) -> dict[str, Any]:
    """Load sanitizer options from a YAML file, returning an empty dict if it is missing."""
    path = Path(path)
    if not path.exists():
        return {}
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Options file {path} must contain a mapping", field="options_file", value=str(path))
    return data


class MongoSanitizeSettings(BaseSettings):
    """Process settings loaded from env vars, pointing at a YAML options file."""

    model_config = SettingsConfigDict(
        env_prefix="MONGO_SANITIZE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "info"
    log_json: bool = False
    options_file: str = str(_DEFAULTS_PATH)

    # Env switches layered over the options file
    mode: str | None = None
    skip_routes: list[str] = Field(default_factory=list)
    debug_enabled: bool = False
    debug_level: str = "info"


_settings: MongoSanitizeSettings | None = None


def get_settings() -> MongoSanitizeSettings:
    """Get or create the singleton settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def load_settings() -> MongoSanitizeSettings:
    """Load settings from env vars (env vars override model defaults)."""
    global _settings
    _settings = MongoSanitizeSettings()
    logger.info("config_loaded", options_file=_settings.options_file, log_level=_settings.log_level)
    return _settings


def build_options(settings: MongoSanitizeSettings) -> dict[str, Any]:
    """Sanitizer options from the options file, overlaid with env switches."""
    options = load_options_file(settings.options_file)
    if settings.mode:
        options["mode"] = settings.mode
    if settings.skip_routes:
        options["skip_routes"] = [*options.get("skip_routes", []), *settings.skip_routes]
    if settings.debug_enabled:
        options["debug"] = {**options.get("debug", {}), "enabled": True, "level": settings.debug_level}
    return options
