"""Result models produced by a build.

These are reporting artifacts only: nothing in the pipeline branches
on them. Each stage returns its counters explicitly.
"""

from dataclasses import dataclass, field
from pathlib import Path

from flipsd.models.capacity import CapacityReport, DeviceCapacity
from flipsd.models.mapping import ResolvedMapping


@dataclass(frozen=True, slots=True)
class SummaryRule:
    """Which files count as deployed content for a category.

    Attributes:
        category: Category directory on the card.
        label: Display label.
        pattern: Glob matched recursively below the category directory.
    """

    category: str
    label: str
    pattern: str


SUMMARY_RULES: tuple[SummaryRule, ...] = (
    SummaryRule("badusb", "BadUSB payloads", "*.txt"),
    SummaryRule("subghz", "Sub-GHz captures", "*.sub"),
    SummaryRule("nfc", "NFC tags", "*.nfc"),
    SummaryRule("infrared", "Infrared remotes", "*.ir"),
    SummaryRule("lfrfid", "RFID keys", "*.rfid"),
    SummaryRule("apps", "Applications", "*.fap"),
    SummaryRule("music_player", "Music files", "*.txt"),
)


@dataclass(frozen=True, slots=True)
class CategoryCount:
    """Number of matching files found for one summary rule."""

    rule: SummaryRule
    count: int


@dataclass(frozen=True, slots=True)
class SyncOutcome:
    """Per-category content counts on the card after deployment.

    Attributes:
        counts: One entry per summary rule, in rule order.
        capacity: Card usage at the time of the summary, if available.
    """

    counts: tuple[CategoryCount, ...]
    capacity: DeviceCapacity | None = None

    @property
    def total_files(self) -> int:
        """Total number of counted files."""
        return sum(c.count for c in self.counts)

    def count_for(self, category: str) -> int:
        """Get the count for a category (0 if it has no rule)."""
        return sum(c.count for c in self.counts if c.rule.category == category)


@dataclass(frozen=True, slots=True)
class StagedEntry:
    """A mapped source directory copied into staging.

    Attributes:
        mapping: The resolved mapping that was applied.
        path: Directory inside the staging tree that received the content.
    """

    mapping: ResolvedMapping
    path: Path


@dataclass(frozen=True, slots=True)
class MetadataEntry:
    """An OS-generated metadata file or directory.

    Attributes:
        path: Absolute path of the entry.
        pattern: Pattern that matched its name.
        is_dir: Whether the entry is a directory.
    """

    path: Path
    pattern: str
    is_dir: bool


@dataclass(slots=True)
class MetadataReport:
    """Accumulated result of one metadata cleanup pass.

    Attributes:
        root: Tree that was cleaned.
        found: Matching entries found.
        removed: Entries actually deleted.
        empty_dirs_removed: Directories pruned because they ended up empty.
        errors: Paths that could not be removed, with the reason.
        dry_run: Whether nothing was actually deleted.
    """

    root: Path
    found: int = 0
    removed: int = 0
    empty_dirs_removed: int = 0
    errors: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def success(self) -> bool:
        """Check if every matched entry was handled."""
        return not self.errors


@dataclass(slots=True)
class BuildReport:
    """Everything a build run did, in pipeline order.

    Attributes:
        staged: Mappings copied into staging.
        staged_bytes: Size of the staging tree.
        preflight: Result of the total-capacity check.
        final: Result of the free-space check (None if not reached).
        cleaned: Playground directories removed from the card.
        synced: Categories mirrored onto the card.
        skipped: Staged categories with no directory on the card.
        metadata: Metadata cleanup passes, in the order they ran.
        outcome: Content summary (None if deployment did not happen).
        source_warning: Message about an unexpected source remote, if any.
        dry_run: Whether the run stopped before touching the card.
    """

    staged: list[StagedEntry] = field(default_factory=list)
    staged_bytes: int = 0
    preflight: CapacityReport | None = None
    final: CapacityReport | None = None
    cleaned: list[Path] = field(default_factory=list)
    synced: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    metadata: list[MetadataReport] = field(default_factory=list)
    outcome: SyncOutcome | None = None
    source_warning: str | None = None
    dry_run: bool = False

    @property
    def deployed(self) -> bool:
        """Check if content was mirrored onto the card."""
        return self.outcome is not None
