"""Main CLI application entry point.

Defines the Typer application, the global options and the command
registry.
"""

from typing import Annotated

import typer

from flipsd import __version__
from flipsd.cli.commands import build, config, metadata, plan, summary, update
from flipsd.utils.formatting import configure_logging

app = typer.Typer(
    name="flipsd",
    help="Build and deploy Flipper Zero SD card content.",
    epilog="Start with 'flipsd update --clone', then 'flipsd plan' and 'flipsd build'.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Command name -> sub-app, in help order
_COMMANDS: tuple[tuple[str, typer.Typer], ...] = (
    ("build", build.app),
    ("plan", plan.app),
    ("update", update.app),
    ("summary", summary.app),
    ("metadata", metadata.app),
    ("config", config.app),
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"flipsd version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every stage and external command."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Hide phase headings and banners."),
    ] = False,
) -> None:
    """flipsd - Flipper Zero SD card builder.

    Pulls the UberGuidoZ Playground repository, organizes it into
    /<category>/playground/ directories and mirrors it onto the card.
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


for _name, _sub_app in _COMMANDS:
    app.add_typer(_sub_app, name=_name)


if __name__ == "__main__":
    app()
