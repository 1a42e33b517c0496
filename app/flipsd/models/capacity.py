"""Capacity models for SD card space checks.

All figures are bytes derived from whole-kilobyte ``du``/``df`` output,
so both checks share one unit and one rounding rule.
"""

from dataclasses import dataclass
from enum import Enum


class CapacityCheck(str, Enum):
    """Which planner check produced a report.

    Attributes:
        PREFLIGHT: Before touching the card, against its total capacity.
        FINAL: After cleanup, against the free space measured then.
    """

    PREFLIGHT = "preflight"
    FINAL = "final"


@dataclass(frozen=True, slots=True)
class DeviceCapacity:
    """Capacity figures of a mounted filesystem.

    Attributes:
        total_bytes: Total size of the filesystem.
        used_bytes: Space currently in use.
        free_bytes: Space available to unprivileged users.
    """

    total_bytes: int
    used_bytes: int
    free_bytes: int


@dataclass(frozen=True, slots=True)
class CapacityReport:
    """Outcome of one capacity check.

    ``required_bytes`` is the staged size grown by the safety margin,
    using integer arithmetic. The check passes when it does not exceed
    ``available_bytes``.

    Attributes:
        check: Which check this is.
        staged_bytes: Size of the staging tree.
        total_bytes: Total capacity of the card.
        free_bytes: Free space on the card when measured.
        margin_percent: Safety margin applied to the staged size.
        reclaimable_bytes: Space held by content the mirror will replace.
    """

    check: CapacityCheck
    staged_bytes: int
    total_bytes: int
    free_bytes: int
    margin_percent: int
    reclaimable_bytes: int = 0

    def __post_init__(self) -> None:
        """Validate capacity figures after initialization."""
        if self.staged_bytes < 0:
            msg = f"Staged size cannot be negative, got {self.staged_bytes}"
            raise ValueError(msg)
        if not (0 <= self.margin_percent <= 100):
            msg = f"Margin must be between 0 and 100 percent, got {self.margin_percent}"
            raise ValueError(msg)

    @property
    def required_bytes(self) -> int:
        """Staged size including the safety margin."""
        return self.staged_bytes * (100 + self.margin_percent) // 100

    @property
    def available_bytes(self) -> int:
        """Capacity figure the requirement is compared against."""
        if self.check == CapacityCheck.PREFLIGHT:
            return self.total_bytes
        return self.free_bytes + self.reclaimable_bytes

    @property
    def fits(self) -> bool:
        """Check if the staged content fits with its margin."""
        return self.required_bytes <= self.available_bytes

    @property
    def remaining_bytes(self) -> int:
        """Headroom left after deployment (negative when it does not fit)."""
        return self.available_bytes - self.required_bytes

    def describe(self) -> str:
        """Human-readable one-line summary used in error messages."""
        what = "total capacity" if self.check == CapacityCheck.PREFLIGHT else "available space"
        verdict = "fits" if self.fits else "does not fit"
        return (
            f"Content {verdict}: need {format_size(self.required_bytes)} "
            f"({format_size(self.staged_bytes)} + {self.margin_percent}% buffer), "
            f"SD card {what} {format_size(self.available_bytes)}"
        )


def format_size(size_bytes: int | None) -> str:
    """Format byte count as human-readable string."""
    if size_bytes is None or size_bytes == 0:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(size) < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TB"
