"""Summary command: report deployed content on a mounted card."""

from dataclasses import replace

import typer

from flipsd.cli.display import print_outcome
from flipsd.cli.types import ConfigOption, SdOption, resolve_config
from flipsd.core.errors import PreconditionError
from flipsd.sync.device import DeviceSynchronizer
from flipsd.sync.planner import CapacityPlanner
from flipsd.utils.formatting import print_error, print_warning

app = typer.Typer(
    help="Show what is deployed on the SD card.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def summary(
    ctx: typer.Context,
    sd: SdOption = None,
    config_path: ConfigOption = None,
) -> None:
    """Count payloads, captures, tags, remotes and apps on the card."""
    if ctx.invoked_subcommand is not None:
        return

    config = resolve_config(config_path, sd_mount=sd)
    device = DeviceSynchronizer(config.sd_mount, config.exclusions)

    if not config.sd_mount.is_dir():
        print_error(f"Flipper SD card not found at {config.sd_mount}")
        raise typer.Exit(code=1)

    outcome = device.summarize()
    try:
        outcome = replace(outcome, capacity=CapacityPlanner().query_device(config.sd_mount))
    except PreconditionError as e:
        print_warning(f"Could not read SD card usage: {e}")

    print_outcome(outcome)
