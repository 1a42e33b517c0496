"""XDG-compliant path management for flipsd.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and cache storage.

XDG defaults:
- Config: ~/.config/flipsd/
- Cache: ~/.cache/flipsd/ (Playground checkout and staging tree)
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "flipsd"

# Default mount point of the Flipper SD card (macOS Finder naming)
DEFAULT_SD_MOUNT = Path("/Volumes/FLIPPER SD")


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/flipsd/ (or XDG_CONFIG_HOME/flipsd/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_cache_dir() -> Path:
    """Get the cache directory path.

    Cache data includes the Playground checkout and the staging tree,
    both of which can be regenerated.

    Returns:
        Path to ~/.cache/flipsd/ (or XDG_CACHE_HOME/flipsd/).
    """
    return _get_xdg_dir("XDG_CACHE_HOME", ".cache")


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/flipsd/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_default_source_dir() -> Path:
    """Get the default Playground checkout path.

    Returns:
        Path to ~/.cache/flipsd/Playground.
    """
    return get_cache_dir() / "Playground"


def get_default_staging_dir() -> Path:
    """Get the default staging tree path.

    Returns:
        Path to ~/.cache/flipsd/staging.
    """
    return get_cache_dir() / "staging"

