"""Category mapping and exclusion models.

A mapping routes a top-level directory of the Playground repository
to a category directory on the SD card. Every category receives the
content under its ``playground`` subdirectory so that user files and
firmware content next to it are never touched.
"""

import fnmatch
from dataclasses import dataclass
from enum import Enum

# Subdirectory under every category that flipsd owns on the card
PLAYGROUND_DIR = "playground"

# Catch-all category for upstream directories without a static mapping
DEFAULT_CATEGORY = "apps_data"

# Directory names that are never discovered as content
VCS_DIRS: frozenset[str] = frozenset({".git", ".hg", ".svn"})


class MappingOrigin(str, Enum):
    """How a mapping was resolved.

    Attributes:
        STATIC: Listed in the configured mapping table.
        DISCOVERED: Found in the source tree and routed to the default category.
    """

    STATIC = "static"
    DISCOVERED = "discovered"


@dataclass(frozen=True, slots=True)
class MappingEntry:
    """A single source directory to category pair.

    Attributes:
        source: Top-level directory name in the source repository.
        category: Top-level category directory on the SD card.
    """

    source: str
    category: str

    def __post_init__(self) -> None:
        """Validate that both sides are single path components."""
        for field_name, value in (("source", self.source), ("category", self.category)):
            if not value or "/" in value or value in (".", ".."):
                msg = f"Mapping {field_name} must be a single directory name, got {value!r}"
                raise ValueError(msg)

    @property
    def destination(self) -> str:
        """Relative destination path, always ``<category>/playground``."""
        return f"{self.category}/{PLAYGROUND_DIR}"


@dataclass(frozen=True, slots=True)
class ResolvedMapping:
    """A mapping whose source directory exists in the current checkout.

    Attributes:
        source: Source directory name.
        category: Target category directory name.
        destination: Relative path inside staging and on the card.
        origin: Whether the mapping came from the table or from discovery.
    """

    source: str
    category: str
    destination: str
    origin: MappingOrigin

    @property
    def is_discovered(self) -> bool:
        """Check if this mapping was discovered rather than configured."""
        return self.origin == MappingOrigin.DISCOVERED


DEFAULT_MAPPINGS: tuple[MappingEntry, ...] = (
    MappingEntry("Applications", "apps"),
    MappingEntry("BadUSB", "badusb"),
    MappingEntry("Sub-GHz", "subghz"),
    MappingEntry("NFC", "nfc"),
    MappingEntry("RFID", "rfid"),
    MappingEntry("Infrared", "infrared"),
    MappingEntry("Music_Player", "music_player"),
    MappingEntry("GPIO", "gpio"),
    MappingEntry("Graphics", DEFAULT_CATEGORY),
    MappingEntry("flipper_toolbox", DEFAULT_CATEGORY),
)

# Standard Flipper categories that get a playground directory in staging
STANDARD_CATEGORIES: tuple[str, ...] = (
    "apps",
    "badusb",
    "subghz",
    "nfc",
    "rfid",
    "infrared",
    "music_player",
    "gpio",
    "lfrfid",
    "ibutton",
    "apps_data",
    "dolphin",
)

# Categories whose playground directory is wiped before deployment
CLEANABLE_CATEGORIES: tuple[str, ...] = (*STANDARD_CATEGORIES, "wav_player")

DEFAULT_EXCLUDES: tuple[str, ...] = (
    ".git",
    ".DS_Store",
    "*.wav",
    "*.WAV",
    "*.mp3",
    "*.MP3",
    "Wav_Player",
)


@dataclass(frozen=True, slots=True)
class ExclusionSet:
    """Glob patterns filtered out of every copy and mirror.

    Patterns match file and directory names at any depth. Matching is
    case-sensitive, as rsync's is.

    Attributes:
        patterns: Glob patterns (fnmatch / rsync syntax).
    """

    patterns: tuple[str, ...] = DEFAULT_EXCLUDES

    def matches(self, name: str) -> bool:
        """Check if a file or directory name is excluded.

        Args:
            name: Base name of the entry (not a path).

        Returns:
            True if any pattern matches.
        """
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self.patterns)

    def rsync_args(self) -> list[str]:
        """Render the patterns as rsync ``--exclude`` options."""
        return [f"--exclude={pattern}" for pattern in self.patterns]
