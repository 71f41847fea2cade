"""Application configuration loader.

Loads configuration from data/config/app_config.yaml, merged over built-in
defaults. Missing file or missing keys fall back to the defaults.

Usage:
    from ebookkit.config.app_config import load_app_config

    config = load_app_config()
    config.limits.max_upload_bytes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config.yaml")


@dataclass
class LimitsConfig:
    """Upload limits."""

    max_upload_bytes: int = 100 * 1024 * 1024


@dataclass
class RenderingConfig:
    """Renderer budgets."""

    max_chapters: int = 50
    slide_max_length: int = 800


@dataclass
class PathsConfig:
    """Filesystem locations."""

    db_path: str = "db/ebooks.db"
    output_dir: str = "data/exports"


@dataclass
class AppConfig:
    """Application-wide configuration."""

    limits: LimitsConfig = field(default_factory=LimitsConfig)
    rendering: RenderingConfig = field(default_factory=RenderingConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "limits": {
            "max_upload_bytes": 100 * 1024 * 1024,
        },
        "rendering": {
            "max_chapters": 50,
            "slide_max_length": 800,
        },
        "paths": {
            "db_path": "db/ebooks.db",
            "output_dir": "data/exports",
        },
    }


def _merge(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge a loaded config section by section over the defaults."""
    result = {section: dict(values) for section, values in defaults.items()}
    for section, values in (overrides or {}).items():
        if section in result and isinstance(values, dict):
            result[section].update(values)
        else:
            logger.warning("app_config.unknown_section", section=section)
    return result


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    limits = data["limits"]
    rendering = data["rendering"]
    paths = data["paths"]

    return AppConfig(
        limits=LimitsConfig(max_upload_bytes=int(limits["max_upload_bytes"])),
        rendering=RenderingConfig(
            max_chapters=int(rendering["max_chapters"]),
            slide_max_length=int(rendering["slide_max_length"]),
        ),
        paths=PathsConfig(
            db_path=str(paths["db_path"]),
            output_dir=str(paths["output_dir"]),
        ),
    )


def load_app_config(force_reload: bool = False, config_file: Path | None = None) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.
        config_file: Override the config file location.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    path = config_file or CONFIG_FILE
    data = _get_defaults()

    if path.exists():
        logger.debug("loading_app_config", source=str(path))
        loaded = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        data = _merge(data, loaded)
    else:
        logger.info("using_default_config")

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
