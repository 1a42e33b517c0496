"""Configuration file commands."""

from typing import Annotated

import tomli_w
import typer

from flipsd.cli.types import ConfigOption, resolve_config
from flipsd.core.config import BuildConfig, ConfigError, save_config
from flipsd.core.paths import get_config_path
from flipsd.utils.formatting import print_error, print_info, print_success

app = typer.Typer(
    help="Manage the flipsd configuration file.",
    no_args_is_help=True,
)


@app.command()
def path() -> None:
    """Print the default configuration file location."""
    typer.echo(str(get_config_path()))


@app.command()
def show(config_path: ConfigOption = None) -> None:
    """Print the effective configuration as TOML."""
    config = resolve_config(config_path)
    typer.echo(tomli_w.dumps(config.model_dump(mode="json")), nl=False)


@app.command()
def init(
    config_path: ConfigOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file populated with the defaults."""
    target = config_path or get_config_path()
    if target.exists() and not force:
        print_info(f"Config already exists: {target} (use --force to overwrite)")
        raise typer.Exit(code=0)

    try:
        saved = save_config(BuildConfig(), target)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written: {saved}")
