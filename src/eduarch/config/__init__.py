"""Configuration package for EduArch."""

from eduarch.config.app_config import (
    ApiConfig,
    AppConfig,
    DatabaseConfig,
    StoreConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "ApiConfig",
    "AppConfig",
    "DatabaseConfig",
    "StoreConfig",
    "clear_config_cache",
    "load_app_config",
]
