"""Build configuration and settings.

This module provides the configuration model and I/O functions for
flipsd. Configuration is stored in ~/.config/flipsd/config.toml; every
field is optional and falls back to the defaults below.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from flipsd.core.paths import (
    DEFAULT_SD_MOUNT,
    get_config_path,
    get_default_source_dir,
    get_default_staging_dir,
)
from flipsd.models.mapping import (
    CLEANABLE_CATEGORIES,
    DEFAULT_CATEGORY,
    DEFAULT_EXCLUDES,
    DEFAULT_MAPPINGS,
    ExclusionSet,
    MappingEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_REPOSITORY = "https://github.com/UberGuidoZ/Flipper"
DEFAULT_BRANCH = "main"


def _validate_dir_name(value: str) -> str:
    """Validate that a value is a single, non-empty directory name."""
    if not value or "/" in value or value in (".", ".."):
        msg = f"must be a single directory name, got {value!r}"
        raise ValueError(msg)
    return value


class MappingConfig(BaseModel):
    """A ``[[mappings]]`` table: one source directory and its category."""

    model_config = ConfigDict(extra="forbid")

    source: Annotated[str, Field(description="Top-level directory in the source repository")]
    category: Annotated[str, Field(description="Category directory on the SD card")]

    @field_validator("source", "category")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate that both sides are single directory names."""
        return _validate_dir_name(v)

    def to_entry(self) -> MappingEntry:
        """Convert to the domain mapping entry."""
        return MappingEntry(source=self.source, category=self.category)


def _default_mappings() -> list[MappingConfig]:
    return [MappingConfig(source=m.source, category=m.category) for m in DEFAULT_MAPPINGS]


class BuildConfig(BaseModel):
    """Configuration for an SD card build.

    Attributes:
        sd_mount: Mount point of the Flipper SD card.
        source_dir: Local Playground checkout.
        staging_dir: Disposable staging tree, rebuilt on every run.
        repository: Expected remote of the Playground checkout.
        branch: Branch pulled when updating the checkout.
        default_category: Category receiving unmapped source directories.
        mappings: Static source directory to category table.
        excludes: Glob patterns skipped by every copy and mirror.
        preflight_margin_percent: Buffer for the total-capacity check.
        final_margin_percent: Buffer for the free-space check.
        clean_categories: Categories whose playground directory is wiped before deploy.
    """

    model_config = ConfigDict(extra="forbid")

    sd_mount: Annotated[Path, Field(description="SD card mount point")] = DEFAULT_SD_MOUNT
    source_dir: Annotated[
        Path,
        Field(default_factory=get_default_source_dir, description="Playground checkout"),
    ]
    staging_dir: Annotated[
        Path,
        Field(default_factory=get_default_staging_dir, description="Staging tree"),
    ]
    repository: Annotated[str, Field(description="Playground git remote")] = DEFAULT_REPOSITORY
    branch: Annotated[str, Field(min_length=1, description="Branch to pull")] = DEFAULT_BRANCH
    default_category: Annotated[
        str, Field(description="Catch-all category for unmapped content")
    ] = DEFAULT_CATEGORY
    mappings: Annotated[
        list[MappingConfig],
        Field(default_factory=_default_mappings, description="Source to category table"),
    ]
    excludes: Annotated[
        list[str],
        Field(default_factory=lambda: list(DEFAULT_EXCLUDES), description="Excluded globs"),
    ]
    preflight_margin_percent: Annotated[
        int, Field(ge=0, le=100, description="Buffer against total capacity (0-100)")
    ] = 20
    final_margin_percent: Annotated[
        int, Field(ge=0, le=100, description="Buffer against free space (0-100)")
    ] = 10
    clean_categories: Annotated[
        list[str],
        Field(
            default_factory=lambda: list(CLEANABLE_CATEGORIES),
            description="Categories whose playground is wiped before deploy",
        ),
    ]

    @field_validator("sd_mount", "source_dir", "staging_dir")
    @classmethod
    def expand_path(cls, v: Path) -> Path:
        """Expand ``~`` in configured paths."""
        return v.expanduser()

    @field_validator("default_category")
    @classmethod
    def validate_default_category(cls, v: str) -> str:
        """Validate the catch-all category name."""
        return _validate_dir_name(v)

    @field_validator("clean_categories")
    @classmethod
    def validate_clean_categories(cls, v: list[str]) -> list[str]:
        """Validate cleanable category names."""
        return [_validate_dir_name(name) for name in v]

    @model_validator(mode="after")
    def validate_staging_isolated(self) -> "BuildConfig":
        """Validate that the staging tree overlaps neither the card nor the source.

        The staging tree is deleted recursively on every run.
        """
        staging = self.staging_dir.absolute()
        for name, other in (("sd_mount", self.sd_mount), ("source_dir", self.source_dir)):
            other = other.absolute()
            if staging == other or staging.is_relative_to(other) or other.is_relative_to(staging):
                msg = f"staging_dir {staging} must not overlap {name} {other}"
                raise ValueError(msg)
        return self

    @property
    def mapping_entries(self) -> tuple[MappingEntry, ...]:
        """Static mapping table as domain entries."""
        return tuple(m.to_entry() for m in self.mappings)

    @property
    def exclusions(self) -> ExclusionSet:
        """Exclusion patterns as a domain exclusion set."""
        return ExclusionSet(tuple(self.excludes))

    def with_overrides(self, **overrides: Any) -> "BuildConfig":
        """Return a validated copy with non-None overrides applied.

        Args:
            **overrides: Field values, typically from CLI options. None is ignored.

        Returns:
            New BuildConfig.

        Raises:
            ConfigValidationError: If the result is invalid.
        """
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        try:
            return BuildConfig.model_validate({**self.model_dump(), **updates})
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid configuration: {e}") from e


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when config content is invalid."""


def load_config(path: Path | None = None) -> BuildConfig:
    """Load build configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses default config path.

    Returns:
        Validated BuildConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return BuildConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> BuildConfig:
    """Load the config file, falling back to defaults when it is absent.

    An explicitly given path must exist.

    Args:
        path: Optional explicit config path.

    Returns:
        Loaded or default BuildConfig.

    Raises:
        ConfigError: If the file exists but is invalid, or an explicit path is missing.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        if path is not None:
            raise
        logger.debug("No config file found, using defaults")
        return BuildConfig()


def save_config(config: BuildConfig, path: Path | None = None) -> Path:
    """Save build configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The BuildConfig object to save.
        path: Path to save the config. If None, uses default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json")

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
