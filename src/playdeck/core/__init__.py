"""Core infrastructure layer - no playback logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML + .env overrides)
- Logging and user-facing output (Loguru, printed through Rich)
"""

from .config import (
    Config,
    PlayerConfig,
    CatalogConfig,
    SessionConfig,
    LoggingConfig,
    load_config,
    parse_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_snapshot_path,
    create_default_config,
    ensure_directories,
)
from .output import get_console, log, safe_print, setup_loguru, setup_from_config

__all__ = [
    # Config
    "Config",
    "PlayerConfig",
    "CatalogConfig",
    "SessionConfig",
    "LoggingConfig",
    "load_config",
    "parse_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "get_snapshot_path",
    "create_default_config",
    "ensure_directories",
    # Output
    "get_console",
    "safe_print",
    "log",
    "setup_loguru",
    "setup_from_config",
]
