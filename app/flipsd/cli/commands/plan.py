"""Plan command: stage content and check capacity without touching the card."""

import typer

from flipsd.cli.commands.build import run_pipeline
from flipsd.cli.types import ConfigOption, SdOption, SourceOption, StagingOption, resolve_config
from flipsd.core.pipeline import BuildOptions
from flipsd.utils.formatting import print_success, print_warning

app = typer.Typer(
    help="Preview mapping and capacity for the current checkout.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def plan(
    ctx: typer.Context,
    sd: SdOption = None,
    source: SourceOption = None,
    staging: StagingOption = None,
    config_path: ConfigOption = None,
) -> None:
    """Show where content would go and whether it fits.

    Uses the Playground checkout as it is (no git pull). The staging
    tree is removed afterwards and the SD card is never modified.
    """
    if ctx.invoked_subcommand is not None:
        return

    quiet = bool(ctx.obj and ctx.obj.get("quiet"))
    config = resolve_config(config_path, sd_mount=sd, source_dir=source, staging_dir=staging)
    report = run_pipeline(config, BuildOptions(update_source=False, dry_run=True), quiet=quiet)
    if report.final is not None and not report.final.fits:
        print_warning("\nNot enough free space on the card even after cleanup.")
        raise typer.Exit(code=1)
    print_success("\nContent fits. Run 'flipsd build' to deploy.")
