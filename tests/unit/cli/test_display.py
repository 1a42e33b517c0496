"""Unit tests for cli/display.py.

Tests for shared Rich display functions used by the build, plan,
summary and metadata commands.
"""

import io
from pathlib import Path

import pytest
from flipsd.cli.display import (
    create_capacity_table,
    create_mapping_table,
    create_metadata_table,
    create_summary_table,
    print_build_report,
    print_metadata_report,
)
from flipsd.core.theme import get_theme
from flipsd.models.capacity import CapacityCheck, CapacityReport
from flipsd.models.mapping import MappingOrigin, ResolvedMapping
from flipsd.models.outcome import (
    BuildReport,
    CategoryCount,
    MetadataEntry,
    MetadataReport,
    StagedEntry,
    SummaryRule,
    SyncOutcome,
)
from rich.console import Console
from rich.table import Table


@pytest.fixture
def staged() -> list[StagedEntry]:
    """One static and one discovered mapping."""
    static = ResolvedMapping("NFC", "nfc", "nfc/playground", MappingOrigin.STATIC)
    found = ResolvedMapping(
        "Extra", "apps_data", "apps_data/playground/Extra", MappingOrigin.DISCOVERED
    )
    return [
        StagedEntry(mapping=static, path=Path("/s/nfc/playground")),
        StagedEntry(mapping=found, path=Path("/s/apps_data/playground/Extra")),
    ]


def _render(table: Table) -> str:
    buf = io.StringIO()
    Console(theme=get_theme(), file=buf, color_system=None, width=120).print(table)
    return buf.getvalue()


def _capture_console_output(func: object, *args: object, **kwargs: object) -> str:
    """Capture Rich console output by temporarily replacing the consoles.

    Patches the module-level consoles used by display and formatting
    functions and captures output to a StringIO buffer.
    """
    import flipsd.cli.display as display_mod
    import flipsd.utils.formatting as fmt_mod

    buf = io.StringIO()
    test_console = Console(theme=get_theme(), file=buf, color_system=None, width=120)

    originals = (display_mod.console, fmt_mod.console, fmt_mod.err_console)
    display_mod.console = test_console
    fmt_mod.console = test_console
    fmt_mod.err_console = test_console
    try:
        func(*args, **kwargs)  # type: ignore[operator]
    finally:
        display_mod.console, fmt_mod.console, fmt_mod.err_console = originals

    return buf.getvalue()


class TestCreateMappingTable:
    """Tests for create_mapping_table."""

    def test_columns(self, staged: list[StagedEntry]) -> None:
        """Table has Source, Destination and Origin columns."""
        table = create_mapping_table(staged)
        assert [col.header for col in table.columns] == ["Source", "Destination", "Origin"]
        assert table.row_count == 2

    def test_discovered_flagged(self, staged: list[StagedEntry]) -> None:
        """Discovered mappings are marked as new."""
        output = _render(create_mapping_table(staged))

        assert "apps_data/playground/Extra/" in output
        assert "new" in output
        assert "mapped" in output


class TestCreateCapacityTable:
    """Tests for create_capacity_table."""

    def test_status(self) -> None:
        """Passing and failing checks are labelled."""
        reports = [
            CapacityReport(CapacityCheck.PREFLIGHT, 1024, 10 * 1024, 10 * 1024, 20),
            CapacityReport(CapacityCheck.FINAL, 1024, 10 * 1024, 1024, 10),
        ]

        output = _render(create_capacity_table(reports))

        assert "Pre-flight (total capacity)" in output
        assert "Final (free space)" in output
        assert "OK" in output
        assert "TOO BIG" in output


class TestSummaryTable:
    """Tests for create_summary_table."""

    def test_rows(self) -> None:
        """Each rule appears with its count."""
        outcome = SyncOutcome(
            counts=(CategoryCount(SummaryRule("subghz", "Sub-GHz captures", "*.sub"), 42),)
        )

        output = _render(create_summary_table(outcome))

        assert "Sub-GHz captures" in output
        assert "/subghz/ (*.sub)" in output
        assert "42" in output


class TestMetadataDisplay:
    """Tests for metadata display helpers."""

    def test_table(self) -> None:
        """Files and directories are distinguished."""
        entries = [
            MetadataEntry(Path("/card/.DS_Store"), ".DS_Store", False),
            MetadataEntry(Path("/card/.Trashes"), ".Trashes", True),
        ]

        output = _render(create_metadata_table(entries))

        assert "file" in output
        assert "directory" in output

    def test_report_nothing_found(self) -> None:
        """An empty report says so."""
        output = _capture_console_output(print_metadata_report, MetadataReport(root=Path("/c")))
        assert "No metadata files found in /c" in output

    def test_report_with_errors(self) -> None:
        """Errors are listed and the summary shows partial removal."""
        report = MetadataReport(root=Path("/c"), found=2, removed=1, empty_dirs_removed=1)
        report.errors.append("/c/.DS_Store: Permission denied")

        output = _capture_console_output(print_metadata_report, report)

        assert "Could not remove /c/.DS_Store" in output
        assert "Removed 1 of 2 metadata entries from /c (1 empty directories pruned)" in output


class TestPrintBuildReport:
    """Tests for print_build_report."""

    def test_full_report(self, staged: list[StagedEntry]) -> None:
        """Every section of a deployed build is printed."""
        report = BuildReport(
            staged=staged,
            staged_bytes=2048,
            preflight=CapacityReport(CapacityCheck.PREFLIGHT, 2048, 10**6, 10**6, 20),
            cleaned=[Path("/sd/nfc/playground")],
            synced=["nfc", "apps_data"],
            skipped=["gpio"],
            outcome=SyncOutcome(counts=()),
        )

        output = _capture_console_output(print_build_report, report)

        assert "Staged 2 content directories (2.0 KB)" in output
        assert "1 unmapped directories" in output
        assert "Cleaned 1 playground directories" in output
        assert "Skipped categories not present on SD card: gpio" in output
        assert "Synced 2 categories: nfc, apps_data" in output
        assert "Deployment Summary" in output
