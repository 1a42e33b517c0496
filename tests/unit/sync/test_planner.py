"""Unit tests for the capacity planner."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from flipsd.core.errors import CapacityError, PreconditionError
from flipsd.models.capacity import CapacityCheck, DeviceCapacity
from flipsd.sync.planner import CapacityPlanner, parse_df_output, parse_du_output
from flipsd.utils.shell import CommandResult


class TestParseDuOutput:
    """Tests for parse_du_output."""

    def test_parses_kilobytes(self, mock_du_output: str) -> None:
        """The leading kilobyte count is converted to bytes."""
        assert parse_du_output(mock_du_output) == 10_000 * 1024

    def test_path_with_spaces(self) -> None:
        """Only the first field matters."""
        assert parse_du_output("4\t/Volumes/FLIPPER SD/staging\n") == 4096

    @pytest.mark.parametrize("output", ["", "du: cannot access", "abc\t/tmp"])
    def test_rejects_garbage(self, output: str) -> None:
        """Unparseable output raises ValueError."""
        with pytest.raises(ValueError, match="du"):
            parse_du_output(output)


class TestParseDfOutput:
    """Tests for parse_df_output."""

    def test_parses_posix_line(self, mock_df_output: str) -> None:
        """Total, used and available columns are converted to bytes."""
        capacity = parse_df_output(mock_df_output)

        assert capacity == DeviceCapacity(
            total_bytes=31_154_688 * 1024,
            used_bytes=1_154_688 * 1024,
            free_bytes=30_000_000 * 1024,
        )

    def test_header_only(self) -> None:
        """Output without a data line raises ValueError."""
        with pytest.raises(ValueError, match="df"):
            parse_df_output("Filesystem 1024-blocks Used Available Capacity Mounted on\n")

    def test_malformed_line(self) -> None:
        """A data line without numeric columns raises ValueError."""
        with pytest.raises(ValueError, match="df line"):
            parse_df_output("Filesystem 1024-blocks\n/dev/disk4s1 lots\n")


class TestCapacityPlanner:
    """Tests for CapacityPlanner."""

    @patch("flipsd.sync.planner.run_command")
    def test_measure_runs_du(self, mock_run: MagicMock, mock_du_output: str) -> None:
        """measure() runs du -sk on the path."""
        mock_run.return_value = CommandResult(stdout=mock_du_output, stderr="", returncode=0)

        size = CapacityPlanner().measure(Path("/tmp/staging"))

        assert size == 10_240_000
        assert mock_run.call_args.args[0] == ["du", "-sk", "/tmp/staging"]
        assert mock_run.call_args.kwargs["env"] == {"LC_ALL": "C"}

    @patch("flipsd.sync.planner.run_command")
    def test_query_device_runs_df(self, mock_run: MagicMock, mock_df_output: str) -> None:
        """query_device() runs df -kP on the mount point."""
        mock_run.return_value = CommandResult(stdout=mock_df_output, stderr="", returncode=0)

        capacity = CapacityPlanner().query_device(Path("/Volumes/FLIPPER SD"))

        assert capacity.free_bytes == 30_000_000 * 1024
        assert mock_run.call_args.args[0] == ["df", "-kP", "/Volumes/FLIPPER SD"]

    @patch("flipsd.sync.planner.run_command")
    def test_missing_tool(self, mock_run: MagicMock) -> None:
        """A missing executable becomes a PreconditionError."""
        mock_run.side_effect = FileNotFoundError("du")

        with pytest.raises(PreconditionError, match="du is required"):
            CapacityPlanner().measure(Path("/tmp"))

    @patch("flipsd.sync.planner.run_command")
    def test_tool_failure(self, mock_run: MagicMock) -> None:
        """A failing df becomes a PreconditionError with its stderr."""
        mock_run.return_value = CommandResult(stdout="", stderr="No such file", returncode=1)

        with pytest.raises(PreconditionError, match="No such file"):
            CapacityPlanner().query_device(Path("/Volumes/missing"))

    @patch("flipsd.sync.planner.run_command")
    def test_unparseable_output(self, mock_run: MagicMock) -> None:
        """Garbage output becomes a PreconditionError."""
        mock_run.return_value = CommandResult(stdout="???", stderr="", returncode=0)

        with pytest.raises(PreconditionError, match="Cannot measure"):
            CapacityPlanner().measure(Path("/tmp"))

    def test_preflight_rejects_oversized_content(self) -> None:
        """10000 staged bytes need 12000 and do not fit an 11000 byte card."""
        device = DeviceCapacity(total_bytes=11_000, used_bytes=0, free_bytes=11_000)

        with pytest.raises(CapacityError) as exc_info:
            CapacityPlanner().preflight(10_000, device)

        report = exc_info.value.report
        assert report.check == CapacityCheck.PREFLIGHT
        assert report.required_bytes == 12_000
        assert "does not fit" in str(exc_info.value)

    def test_preflight_ignores_free_space(self) -> None:
        """A full card passes pre-flight when its total capacity suffices."""
        device = DeviceCapacity(total_bytes=12_000, used_bytes=12_000, free_bytes=0)

        report = CapacityPlanner().preflight(10_000, device)

        assert report.fits is True

    def test_final_accepts_with_margin(self) -> None:
        """10000 staged bytes need 11000 and fit in 12000 free bytes."""
        device = DeviceCapacity(total_bytes=20_000, used_bytes=8_000, free_bytes=12_000)

        report = CapacityPlanner().final(10_000, device)

        assert report.check == CapacityCheck.FINAL
        assert report.required_bytes == 11_000
        assert report.remaining_bytes == 1_000

    def test_final_rejects_insufficient_free_space(self) -> None:
        """The final check compares against free space, not total capacity."""
        device = DeviceCapacity(total_bytes=1_000_000, used_bytes=990_000, free_bytes=10_000)

        with pytest.raises(CapacityError, match="available space"):
            CapacityPlanner().final(10_000, device)

    def test_final_counts_reclaimable(self) -> None:
        """Space the mirror will free counts towards the final check."""
        device = DeviceCapacity(total_bytes=1_000_000, used_bytes=990_000, free_bytes=10_000)

        report = CapacityPlanner().final(10_000, device, reclaimable_bytes=1_000)

        assert report.fits is True

    def test_custom_margins(self) -> None:
        """Margins are configurable."""
        planner = CapacityPlanner(preflight_margin=0, final_margin=50)
        device = DeviceCapacity(total_bytes=10_000, used_bytes=0, free_bytes=10_000)

        assert planner.evaluate_preflight(10_000, device).fits is True
        assert planner.evaluate_final(10_000, device).fits is False
