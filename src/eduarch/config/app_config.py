"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml,
falling back to built-in defaults when the file is missing.

Usage:
    from eduarch.config.app_config import load_app_config

    config = load_app_config()
    config.store.delete_policy  # "restrict"
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")

# Environment override for the database location
DB_PATH_ENV = "EDUARCH_DB_PATH"


@dataclass
class DatabaseConfig:
    """SQLite database settings."""

    path: str = "db/eduarch.db"


@dataclass
class StoreConfig:
    """Domain store behavior."""

    # "restrict": refuse deletes with dependents, "cascade": delete them too
    delete_policy: str = "restrict"


@dataclass
class ApiConfig:
    """Web API settings."""

    title: str = "EduArch API"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class AppConfig:
    """Application-wide configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    api: ApiConfig = field(default_factory=ApiConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "database": {"path": "db/eduarch.db"},
        "store": {"delete_policy": "restrict"},
        "api": {"title": "EduArch API", "cors_origins": ["*"]},
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    db_data = data.get("database") or {}
    database = DatabaseConfig(path=db_data.get("path", defaults["database"]["path"]))

    store_data = data.get("store") or {}
    policy = store_data.get("delete_policy", defaults["store"]["delete_policy"])
    if policy not in ("restrict", "cascade"):
        logger.warning("invalid_delete_policy", value=policy, fallback="restrict")
        policy = "restrict"
    store = StoreConfig(delete_policy=policy)

    api_data = data.get("api") or {}
    api = ApiConfig(
        title=api_data.get("title", defaults["api"]["title"]),
        cors_origins=list(api_data.get("cors_origins", defaults["api"]["cors_origins"])),
    )

    return AppConfig(database=database, store=store, api=api)


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    config = _parse_config(data)

    env_path = os.environ.get(DB_PATH_ENV)
    if env_path:
        config.database.path = env_path

    _cached_config = config
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
