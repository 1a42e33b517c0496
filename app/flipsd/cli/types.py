"""Shared option types and helpers for CLI commands.

This module provides the path options and config loading used across
multiple CLI command modules to avoid code duplication.
"""

from pathlib import Path
from typing import Annotated, Any

import typer

from flipsd.core.config import BuildConfig, ConfigError, load_config_or_default
from flipsd.utils.formatting import print_error

SdOption = Annotated[
    Path | None,
    typer.Option("--sd", help="SD card mount point (overrides config)."),
]
SourceOption = Annotated[
    Path | None,
    typer.Option("--source", help="Playground checkout directory (overrides config)."),
]
StagingOption = Annotated[
    Path | None,
    typer.Option("--staging", help="Staging directory, wiped on every run (overrides config)."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Config file (default: ~/.config/flipsd/config.toml)."),
]


def resolve_config(config_path: Path | None = None, **overrides: Any) -> BuildConfig:
    """Load configuration and apply CLI overrides, or exit with an error.

    Args:
        config_path: Explicit config file, or None for the default location.
        **overrides: Field overrides; None values are ignored.

    Returns:
        Effective BuildConfig.

    Raises:
        typer.Exit: If the config cannot be loaded or is invalid.
    """
    try:
        return load_config_or_default(config_path).with_overrides(**overrides)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
