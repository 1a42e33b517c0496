"""Update command: pull the Playground checkout."""

from typing import Annotated

import typer

from flipsd.cli.types import ConfigOption, SourceOption, resolve_config
from flipsd.core.errors import FlipsdError
from flipsd.sync.source import SourceMaterializer
from flipsd.utils.formatting import print_error, print_info, print_success, print_warning

app = typer.Typer(
    help="Update the Playground repository checkout.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def update(
    ctx: typer.Context,
    source: SourceOption = None,
    config_path: ConfigOption = None,
    clone: Annotated[
        bool,
        typer.Option("--clone", help="Clone the repository if the checkout is missing."),
    ] = False,
) -> None:
    """Pull the latest Playground content and update submodules."""
    if ctx.invoked_subcommand is not None:
        return

    config = resolve_config(config_path, source_dir=source)
    materializer = SourceMaterializer(config.source_dir, config.repository, config.branch)

    print_info(f"Updating {config.source_dir} from {config.repository} ({config.branch})...")
    try:
        status = materializer.update(clone=clone)
    except FlipsdError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if status.remote_warning:
        print_warning(status.remote_warning)
    if status.cloned:
        print_success(f"Playground repository cloned into {status.path}")
    else:
        print_success("Playground repository updated successfully")
