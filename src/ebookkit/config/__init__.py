"""Configuration package for ebookkit."""

from ebookkit.config.app_config import (
    AppConfig,
    LimitsConfig,
    PathsConfig,
    RenderingConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "LimitsConfig",
    "PathsConfig",
    "RenderingConfig",
    "clear_config_cache",
    "load_app_config",
]
