"""
Configuration management for albumstore.

This module loads database and cover-selection settings from TOML files into
plain dataclasses.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

# Path to the config directory
CONFIG_DIR = Path(__file__).parent

DEFAULT_TABLE_PREFIX = "oc_"
DEFAULT_COVER_KEYWORDS: tuple[str, ...] = ("cover", "albumart", "folder", "front")


class CoverFallback(Enum):
    """Policy applied when no cover candidate matches a keyword."""

    NONE = "none"
    FIRST = "first"


@dataclass
class DatabaseConfig:
    """Where the album tables live."""

    path: str = "albumstore.db"
    table_prefix: str = DEFAULT_TABLE_PREFIX


@dataclass
class CoverConfig:
    """Cover selection settings."""

    keywords: tuple[str, ...] = DEFAULT_COVER_KEYWORDS
    fallback: CoverFallback = CoverFallback.NONE


@dataclass
class AlbumStoreConfig:
    """Loaded albumstore configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    covers: CoverConfig = field(default_factory=CoverConfig)


def _parse_database(data: dict[str, object]) -> DatabaseConfig:
    """Parse the [database] section from the TOML data."""
    return DatabaseConfig(
        path=str(data.get("path", "albumstore.db")),
        table_prefix=str(data.get("table_prefix", DEFAULT_TABLE_PREFIX)),
    )


def _parse_covers(data: dict[str, object]) -> CoverConfig:
    """Parse the [covers] section from the TOML data."""
    raw_keywords = data.get("keywords", DEFAULT_COVER_KEYWORDS)
    if isinstance(raw_keywords, str):
        raw_keywords = [raw_keywords]
    elif not isinstance(raw_keywords, (list, tuple)):
        logger.warning("Cover keywords must be a list, got %r; using defaults", raw_keywords)
        raw_keywords = DEFAULT_COVER_KEYWORDS

    keywords = tuple(str(k).strip().lower() for k in raw_keywords if str(k).strip())
    if not keywords:
        logger.warning("Empty cover keyword list in config, using defaults")
        keywords = DEFAULT_COVER_KEYWORDS

    fallback_str = str(data.get("fallback", CoverFallback.NONE.value)).lower()
    try:
        fallback = CoverFallback(fallback_str)
    except ValueError:
        logger.warning("Unknown cover fallback %r in config, using 'none'", fallback_str)
        fallback = CoverFallback.NONE

    return CoverConfig(keywords=keywords, fallback=fallback)


def load_config(config_path: Path | None = None) -> AlbumStoreConfig:
    """
    Load albumstore configuration from a TOML file.

    Args:
        config_path: Path to a TOML file. If None, uses the packaged default.

    Returns:
        Loaded AlbumStoreConfig instance.
    """
    if config_path is None:
        config_path = CONFIG_DIR / "albumstore.toml"

    logger.debug("Loading albumstore config from %s", config_path)

    with config_path.open("rb") as f:
        data = tomllib.load(f)

    return AlbumStoreConfig(
        database=_parse_database(data.get("database", {})),
        covers=_parse_covers(data.get("covers", {})),
    )


# Global singleton instance (lazy loaded)
_config: AlbumStoreConfig | None = None


def get_config() -> AlbumStoreConfig:
    """
    Get the global configuration (lazy loaded singleton).

    Returns:
        The AlbumStoreConfig instance.
    """
    global _config

    if _config is None:
        _config = load_config()

    return _config


def reload_config(config_path: Path | None = None) -> AlbumStoreConfig:
    """
    Force reload of the global configuration.

    Returns:
        The newly loaded AlbumStoreConfig instance.
    """
    global _config
    _config = load_config(config_path)
    return _config
