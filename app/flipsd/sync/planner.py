"""Capacity planner: decide whether staged content fits on the card.

Two independent checks guard a deployment:

- The pre-flight check runs before the card is touched and compares
  the staged size plus a 20% buffer against the card's *total*
  capacity. Old content is still on the card at that point, so free
  space would be misleading.
- The final check runs after the old playground content is removed
  and compares the staged size plus a 10% buffer against the *free*
  space measured at that moment.

Sizes come from ``du -sk`` and ``df -kP`` and are converted to bytes
from whole kilobytes.
"""

import logging
import re
from pathlib import Path

from flipsd.core.errors import CapacityError, PreconditionError
from flipsd.models.capacity import CapacityCheck, CapacityReport, DeviceCapacity
from flipsd.utils.shell import CommandResult, run_command

logger = logging.getLogger(__name__)

KB = 1024

DEFAULT_PREFLIGHT_MARGIN = 20
DEFAULT_FINAL_MARGIN = 10

# du and df headers and number formats are locale dependent
C_LOCALE = {"LC_ALL": "C"}

# POSIX df line: filesystem, 1024-blocks, used, available, capacity%, mount point
_DF_LINE = re.compile(
    r"^(?P<fs>.*?)\s+(?P<total>\d+)\s+(?P<used>\d+)\s+(?P<free>\d+)\s+\S+\s+(?P<mount>.+)$"
)


def parse_du_output(output: str) -> int:
    """Parse ``du -sk`` output into bytes.

    Args:
        output: Raw stdout, e.g. ``"1234\\t/path"``.

    Returns:
        Size in bytes.

    Raises:
        ValueError: If the output has no leading kilobyte count.
    """
    first = output.strip().split(maxsplit=1)
    if not first or not first[0].isdigit():
        msg = f"Unexpected du output: {output.strip()!r}"
        raise ValueError(msg)
    return int(first[0]) * KB


def parse_df_output(output: str) -> DeviceCapacity:
    """Parse ``df -kP`` output into capacity figures.

    Args:
        output: Raw stdout including the header line.

    Returns:
        DeviceCapacity in bytes.

    Raises:
        ValueError: If no data line can be parsed.
    """
    lines = [line for line in output.strip().splitlines() if line.strip()]
    if len(lines) < 2:
        msg = f"Unexpected df output: {output.strip()!r}"
        raise ValueError(msg)
    match = _DF_LINE.match(lines[1].strip())
    if match is None:
        msg = f"Unexpected df line: {lines[1].strip()!r}"
        raise ValueError(msg)
    return DeviceCapacity(
        total_bytes=int(match["total"]) * KB,
        used_bytes=int(match["used"]) * KB,
        free_bytes=int(match["free"]) * KB,
    )


class CapacityPlanner:
    """Measures content and card capacity and runs both checks.

    Args:
        preflight_margin: Buffer percent for the total-capacity check.
        final_margin: Buffer percent for the free-space check.
    """

    def __init__(
        self,
        preflight_margin: int = DEFAULT_PREFLIGHT_MARGIN,
        final_margin: int = DEFAULT_FINAL_MARGIN,
    ) -> None:
        self._preflight_margin = preflight_margin
        self._final_margin = final_margin

    def measure(self, path: Path) -> int:
        """Measure a directory tree with ``du -sk``.

        Args:
            path: Directory to measure.

        Returns:
            Size in bytes.

        Raises:
            PreconditionError: If du is missing or fails.
        """
        result = self._run(["du", "-sk", str(path)], "du")
        try:
            return parse_du_output(result.stdout)
        except ValueError as e:
            raise PreconditionError(f"Cannot measure {path}: {e}") from e

    def query_device(self, mount: Path) -> DeviceCapacity:
        """Query card capacity with ``df -kP``.

        Args:
            mount: Mount point of the card.

        Returns:
            Current capacity figures.

        Raises:
            PreconditionError: If df is missing or fails.
        """
        result = self._run(["df", "-kP", str(mount)], "df")
        try:
            return parse_df_output(result.stdout)
        except ValueError as e:
            raise PreconditionError(f"Cannot query capacity of {mount}: {e}") from e

    def evaluate_preflight(self, staged_bytes: int, device: DeviceCapacity) -> CapacityReport:
        """Build the pre-flight report without raising."""
        return CapacityReport(
            check=CapacityCheck.PREFLIGHT,
            staged_bytes=staged_bytes,
            total_bytes=device.total_bytes,
            free_bytes=device.free_bytes,
            margin_percent=self._preflight_margin,
        )

    def evaluate_final(
        self,
        staged_bytes: int,
        device: DeviceCapacity,
        reclaimable_bytes: int = 0,
    ) -> CapacityReport:
        """Build the final report without raising."""
        return CapacityReport(
            check=CapacityCheck.FINAL,
            staged_bytes=staged_bytes,
            total_bytes=device.total_bytes,
            free_bytes=device.free_bytes,
            margin_percent=self._final_margin,
            reclaimable_bytes=reclaimable_bytes,
        )

    def preflight(self, staged_bytes: int, device: DeviceCapacity) -> CapacityReport:
        """Check staged size plus margin against the card's total capacity.

        Args:
            staged_bytes: Size of the staging tree.
            device: Card capacity before any cleanup.

        Returns:
            The passing report.

        Raises:
            CapacityError: If the content cannot fit even on an empty card.
        """
        report = self.evaluate_preflight(staged_bytes, device)
        return self._enforce(report)

    def final(
        self,
        staged_bytes: int,
        device: DeviceCapacity,
        reclaimable_bytes: int = 0,
    ) -> CapacityReport:
        """Check staged size plus margin against the card's free space.

        Args:
            staged_bytes: Size of the staging tree.
            device: Card capacity measured after cleanup.
            reclaimable_bytes: Space the mirror will free by replacing old content.

        Returns:
            The passing report.

        Raises:
            CapacityError: If the content does not fit in the free space.
        """
        report = self.evaluate_final(staged_bytes, device, reclaimable_bytes)
        return self._enforce(report)

    @staticmethod
    def _enforce(report: CapacityReport) -> CapacityReport:
        logger.info("%s", report.describe())
        if not report.fits:
            raise CapacityError(report)
        return report

    @staticmethod
    def _run(args: list[str], tool: str) -> CommandResult:
        try:
            result = run_command(args, timeout=None, env=C_LOCALE)
        except FileNotFoundError as e:
            raise PreconditionError(f"{tool} is required but not installed") from e
        if not result.success:
            msg = f"{tool} failed for {args[-1]}: {result.stderr.strip() or 'unknown error'}"
            raise PreconditionError(msg)
        return result
