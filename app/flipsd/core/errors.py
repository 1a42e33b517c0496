"""Exception hierarchy for flipsd.

Every fatal condition of a build surfaces as a subclass of
:class:`FlipsdError`; the CLI turns these into a non-zero exit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flipsd.models.capacity import CapacityReport


class FlipsdError(Exception):
    """Base exception for all flipsd errors."""


class PreconditionError(FlipsdError):
    """Raised when the environment is not ready for a build.

    Covers a missing or read-only SD card mount, a missing source
    checkout and missing external tools. Raised before any mutation.
    """


class SourceUpdateError(PreconditionError):
    """Raised when git fails to fetch or update the source checkout."""


class CapacityError(FlipsdError):
    """Raised when staged content does not fit on the SD card.

    Attributes:
        report: The capacity figures that failed the check.
    """

    def __init__(self, report: CapacityReport) -> None:
        self.report = report
        super().__init__(report.describe())


class TransferError(FlipsdError):
    """Raised when an rsync copy or mirror fails.

    Attributes:
        label: What was being transferred (source name or category).
        returncode: Exit code of the transfer command, None if no command ran.
        stderr: Error output of the transfer command.
    """

    def __init__(self, label: str, returncode: int | None, stderr: str = "") -> None:
        self.label = label
        self.returncode = returncode
        self.stderr = stderr.strip()
        status = f" (exit {returncode})" if returncode is not None else ""
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"Transfer of {label} failed{status}{detail}")


class CleanupError(FlipsdError):
    """Raised when the staging tree cannot be removed.

    Only ever logged: staging is disposable and its removal must not
    hide the error that ended the run.
    """


class BuildCancelledError(FlipsdError):
    """Raised when deployment is declined at the confirmation step."""
