"""Build command implementation.

Runs the full SD card build in a single invocation:
prerequisites -> update -> stage -> pre-flight -> clean -> final check
-> mirror -> summary. The staging tree is removed whatever happens.
"""

from typing import Annotated

import typer

from flipsd.cli.display import (
    create_capacity_table,
    create_mapping_table,
    print_build_report,
    print_metadata_report,
)
from flipsd.cli.types import ConfigOption, SdOption, SourceOption, StagingOption, resolve_config
from flipsd.core.config import BuildConfig
from flipsd.core.errors import BuildCancelledError, CapacityError, FlipsdError
from flipsd.core.pipeline import BuildOptions, BuildPipeline
from flipsd.models.capacity import CapacityCheck, format_size
from flipsd.models.outcome import BuildReport
from flipsd.utils.formatting import (
    console,
    print_error,
    print_info,
    print_phase,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Build the SD card content and deploy it.",
    invoke_without_command=True,
)


def run_pipeline(
    config: BuildConfig,
    options: BuildOptions,
    *,
    yes: bool = True,
    quiet: bool = False,
) -> BuildReport:
    """Run a build pipeline and translate its errors into CLI output.

    Args:
        config: Effective build configuration.
        options: Run switches.
        yes: Skip the confirmation before the card is modified.
        quiet: Suppress phase headings.

    Returns:
        BuildReport of a completed run.

    Raises:
        typer.Exit: With code 0 when cancelled, code 1 on any build error.
    """
    pipeline = BuildPipeline(
        config,
        options,
        on_phase=None if quiet else print_phase,
        confirm=None if yes else _confirm_deploy,
    )

    try:
        report = pipeline.run()
    except BuildCancelledError:
        print_info("Aborted.")
        raise typer.Exit(code=0) from None
    except CapacityError as e:
        _print_staged(pipeline.report)
        console.print(create_capacity_table([e.report]))
        print_error(str(e))
        if e.report.check == CapacityCheck.PREFLIGHT:
            print_error("Aborting before cleaning SD card to preserve existing content")
            print_info("You need a larger SD card (recommend 32GB+) or fewer mapped directories.")
        else:
            print_info("Other content on the SD card is using more space than expected.")
        raise typer.Exit(code=1) from e
    except FlipsdError as e:
        print_error(str(e))
        if pipeline.report.synced:
            print_warning(f"Already synced before the failure: {', '.join(pipeline.report.synced)}")
        raise typer.Exit(code=1) from e

    if report.source_warning:
        print_warning(report.source_warning)
    _print_staged(report)
    for metadata_report in report.metadata:
        print_metadata_report(metadata_report)
    print_build_report(report)
    return report


def _print_staged(report: BuildReport) -> None:
    if report.staged:
        console.print(create_mapping_table(report.staged))


def _confirm_deploy(report: BuildReport) -> bool:
    """Ask before replacing playground content on the card."""
    size = format_size(report.staged_bytes)
    return typer.confirm(
        f"\nReplace playground content on the SD card with {size} of new content?",
        default=False,
    )


@app.callback(invoke_without_command=True)
def build(
    ctx: typer.Context,
    sd: SdOption = None,
    source: SourceOption = None,
    staging: StagingOption = None,
    config_path: ConfigOption = None,
    no_update: Annotated[
        bool,
        typer.Option("--no-update", help="Use the Playground checkout as is, without git pull."),
    ] = False,
    clone: Annotated[
        bool,
        typer.Option("--clone", help="Clone the Playground repository if it is missing."),
    ] = False,
    incremental: Annotated[
        bool,
        typer.Option(
            "--incremental",
            "-i",
            help="Keep existing playground directories; rsync --delete removes stale files.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Stage and check capacity only, no changes to card."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt and proceed."),
    ] = False,
    clean_device_metadata: Annotated[
        bool,
        typer.Option(
            "--clean-device-metadata",
            help="Also remove OS metadata files (.DS_Store, ._*) from the SD card.",
        ),
    ] = False,
) -> None:
    """Build the SD card.

    Pipeline phases:
      1. Prerequisites: SD card mounted and writable, git/rsync installed
      2. Update: git pull + submodule update (unless --no-update)
      3. Stage: copy mapped content into /<category>/playground/
      4. Pre-flight: content + 20% must fit the card's total capacity
      5. Clean: remove old playground directories (unless --incremental)
      6. Final check: content + 10% must fit the free space
      7. Deploy: rsync --delete each playground directory
      8. Summary: count deployed content

    Examples:
        flipsd build                         # Interactive build
        flipsd build -y                      # No confirmation
        flipsd build --dry-run               # Stage and check capacity only
        flipsd build --sd /media/FLIPPER     # Card mounted elsewhere
        flipsd build --clone                 # First run, fetch Playground
    """
    if ctx.invoked_subcommand is not None:
        return

    quiet = bool(ctx.obj and ctx.obj.get("quiet"))
    config = resolve_config(config_path, sd_mount=sd, source_dir=source, staging_dir=staging)
    options = BuildOptions(
        update_source=not no_update,
        clone=clone,
        incremental=incremental,
        dry_run=dry_run,
        clean_device_metadata=clean_device_metadata,
    )

    if not quiet:
        console.print("[bold_header]Flipper Zero SD Card Builder[/]")
        console.print(f"[muted]Source: {config.repository} -> {config.sd_mount}[/]")

    report = run_pipeline(config, options, yes=yes or dry_run, quiet=quiet)

    if report.dry_run:
        if report.final is not None and not report.final.fits:
            print_warning("Not enough free space on the card even after cleanup.")
        print_info("\nDry-run mode: No changes were made to the SD card.")
        return

    print_success("\nSD card build complete!")
