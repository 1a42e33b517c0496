"""Shared Rich display functions for build reports.

Provides reusable table builders and summary printers for the staged
mappings, capacity checks and deployed content across CLI commands
(build, plan, summary, metadata).
"""

from rich.table import Table

from flipsd.models.capacity import CapacityCheck, CapacityReport, format_size
from flipsd.models.outcome import (
    BuildReport,
    MetadataEntry,
    MetadataReport,
    StagedEntry,
    SyncOutcome,
)
from flipsd.utils.formatting import console, print_info, print_success, print_warning

_CHECK_LABELS: dict[CapacityCheck, str] = {
    CapacityCheck.PREFLIGHT: "Pre-flight (total capacity)",
    CapacityCheck.FINAL: "Final (free space)",
}


def create_mapping_table(staged: list[StagedEntry]) -> Table:
    """Create a Rich table of source directories and their staging destinations.

    Discovered mappings are flagged so new upstream content stands out.

    Args:
        staged: Staged entries in copy order.

    Returns:
        Rich Table configured for mapping display.
    """
    table = Table(
        title="Content Mapping",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Source", no_wrap=True)
    table.add_column("Destination", style="category")
    table.add_column("Origin", width=10)

    for entry in staged:
        mapping = entry.mapping
        origin = "[warning]new[/]" if mapping.is_discovered else "[muted]mapped[/]"
        table.add_row(f"{mapping.source}/", f"{mapping.destination}/", origin)

    return table


def create_capacity_table(reports: list[CapacityReport]) -> Table:
    """Create a Rich table of capacity checks.

    Args:
        reports: Capacity reports in the order they ran.

    Returns:
        Rich Table with one row per check.
    """
    table = Table(
        title="Capacity",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Check")
    table.add_column("Content", style="size", justify="right")
    table.add_column("Buffer", justify="right")
    table.add_column("Required", style="size", justify="right")
    table.add_column("Available", style="size", justify="right")
    table.add_column("Status", justify="center")

    for report in reports:
        status = "[success]OK[/]" if report.fits else "[error]TOO BIG[/]"
        table.add_row(
            _CHECK_LABELS[report.check],
            format_size(report.staged_bytes),
            f"{report.margin_percent}%",
            format_size(report.required_bytes),
            format_size(report.available_bytes),
            status,
        )

    return table


def create_summary_table(outcome: SyncOutcome) -> Table:
    """Create a Rich table of deployed content counts.

    Args:
        outcome: Per-category counts.

    Returns:
        Rich Table with one row per summary rule.
    """
    table = Table(
        title="Deployment Summary",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Content")
    table.add_column("Location", style="category")
    table.add_column("Files", justify="right")

    for item in outcome.counts:
        location = f"/{item.rule.category}/ ({item.rule.pattern})"
        table.add_row(item.rule.label, location, str(item.count))

    return table


def print_outcome(outcome: SyncOutcome) -> None:
    """Print the content summary with card usage."""
    console.print(create_summary_table(outcome))
    if outcome.capacity is not None:
        console.print(
            f"[info]SD card usage:[/] {format_size(outcome.capacity.used_bytes)} used, "
            f"{format_size(outcome.capacity.free_bytes)} available"
        )


def create_metadata_table(entries: list[MetadataEntry]) -> Table:
    """Create a Rich table of OS metadata entries.

    Args:
        entries: Entries found by a metadata scan.

    Returns:
        Rich Table with one row per entry.
    """
    table = Table(
        title="OS Metadata",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", style="bold")
    table.add_column("Type", width=10)
    table.add_column("Pattern", style="muted")

    for entry in entries:
        table.add_row(str(entry.path), "directory" if entry.is_dir else "file", entry.pattern)

    return table


def print_metadata_report(report: MetadataReport) -> None:
    """Print the outcome of a metadata cleanup pass."""
    if report.found == 0:
        print_info(f"No metadata files found in {report.root}")
        return
    if report.dry_run:
        print_info(f"Dry-run: {report.found} metadata entries would be removed from {report.root}")
        return
    for error in report.errors:
        print_warning(f"Could not remove {error}")
    message = f"Removed {report.removed} of {report.found} metadata entries from {report.root}"
    if report.empty_dirs_removed:
        message += f" ({report.empty_dirs_removed} empty directories pruned)"
    if report.success:
        print_success(message)
    else:
        print_warning(message)


def print_build_report(report: BuildReport) -> None:
    """Print everything a finished build did."""
    discovered = sum(1 for e in report.staged if e.mapping.is_discovered)
    size = format_size(report.staged_bytes)
    print_success(f"Staged {len(report.staged)} content directories ({size})")
    if discovered:
        print_warning(f"{discovered} unmapped directories routed to the default category")

    reports = [r for r in (report.preflight, report.final) if r is not None]
    if reports:
        console.print(create_capacity_table(reports))

    if report.cleaned:
        print_info(f"Cleaned {len(report.cleaned)} playground directories from SD card")
    if report.skipped:
        print_warning(f"Skipped categories not present on SD card: {', '.join(report.skipped)}")
    if report.synced:
        print_success(f"Synced {len(report.synced)} categories: {', '.join(report.synced)}")
    if report.outcome is not None:
        print_outcome(report.outcome)
