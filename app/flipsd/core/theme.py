"""Colour theme for flipsd output.

Colours come from the bundled ``data/theme.toml``. Any subset of them
can be overridden in ``~/.config/flipsd/theme.toml``; an unreadable or
invalid override falls back to the bundled colours.
"""

import logging
import tomllib
from functools import cache
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from flipsd.core.paths import get_config_dir

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

# Styles rendered bold on top of their base colour
_BOLD_STYLES = frozenset({"error", "category"})


class ThemeColors(BaseModel):
    """Colours used by flipsd tables and messages.

    Every value is a hex code, ``#RGB`` or ``#RRGGBB``.
    """

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#ff8200"
    border: str = "#4a3b2c"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Capacity and sync status
    added: str = "#c1ff62"
    removed: str = "#f53263"
    skipped: str = "#b2bec3"

    category: str = "#ff8200"
    size: str = "#0ec1c8"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        """Validate that a colour is a hex code."""
        if not isinstance(v, str):
            msg = f"{info.field_name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        if not color.startswith("#"):
            msg = f"{info.field_name}: color must start with '#'"
            raise ValueError(msg)
        digits = color[1:]
        if len(digits) not in (3, 6):
            msg = f"{info.field_name}: color must be #RGB or #RRGGBB format"
            raise ValueError(msg)
        if not set(digits) <= _HEX_DIGITS:
            msg = f"{info.field_name}: invalid hex color '{color}'"
            raise ValueError(msg)
        return color


def get_user_theme_path() -> Path:
    """Path of the user's colour overrides (~/.config/flipsd/theme.toml)."""
    return get_config_dir() / "theme.toml"


def get_bundled_theme_path() -> Path:
    """Path of the theme shipped with the package."""
    return Path(str(resources.files("flipsd.data").joinpath("theme.toml")))


def _load_toml_colors(path: Path) -> dict[str, str] | None:
    """Read the ``[colors]`` table of a theme file.

    Args:
        path: Theme file.

    Returns:
        Colour names mapped to their string values, or None if the file
        is missing, unreadable or not valid TOML.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return None
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return None

    colors = data.get("colors", {})
    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", path)
        return None
    return {key: value for key, value in colors.items() if isinstance(value, str)}


def load_theme(user_path: Path | None = None) -> ThemeColors:
    """Load bundled colours merged with the user's overrides.

    Args:
        user_path: Override file, defaults to ``get_user_theme_path()``.

    Returns:
        Validated colours; the built-in defaults if validation fails.
    """
    colors = _load_toml_colors(get_bundled_theme_path())
    if colors is None:
        logger.error("Bundled theme is missing, installation may be corrupted")
        colors = {}

    overrides = _load_toml_colors(user_path or get_user_theme_path())
    if overrides:
        colors = {**colors, **overrides}

    try:
        return ThemeColors(**colors)
    except ValidationError as e:
        logger.warning("Invalid theme colours, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme for a set of colours.

    Each colour becomes a style of the same name; ``bold_header``, ``dim``
    and ``phase`` are derived from them.
    """
    colors = colors or load_theme()
    styles = {
        name: f"bold {value}" if name in _BOLD_STYLES else value
        for name, value in colors.model_dump().items()
    }
    styles["bold_header"] = f"bold {colors.header}"
    styles["dim"] = colors.muted
    styles["phase"] = f"bold {colors.header}"
    return Theme(styles)


@cache
def get_theme() -> Theme:
    """Rich theme for the shared consoles, loaded once per process."""
    return get_rich_theme()
