"""OS metadata scanning and cleanup commands.

Provides commands to find and remove .DS_Store, resource forks and
other OS-generated files from the SD card or any other directory.
"""

from pathlib import Path
from typing import Annotated

import typer

from flipsd.cli.display import create_metadata_table, print_metadata_report
from flipsd.sync.metadata import MetadataCleaner
from flipsd.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="OS metadata scanning and cleanup.",
    invoke_without_command=True,
    no_args_is_help=True,
)

PathArgument = Annotated[
    Path,
    typer.Argument(help="Directory to scan (e.g. the SD card mount point)."),
]


def _require_dir(path: Path) -> None:
    if not path.is_dir():
        print_error(f"Not a directory: {path}")
        raise typer.Exit(code=1)


@app.command()
def scan(path: PathArgument) -> None:
    """List OS metadata files below a directory."""
    _require_dir(path)

    entries = MetadataCleaner().scan(path)
    if not entries:
        print_success(f"No metadata files found in {path}")
        return

    console.print(create_metadata_table(entries))
    console.print(f"\n[dim]Found {len(entries)} metadata entries[/dim]")


@app.command()
def clean(
    path: PathArgument,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    prune_empty: Annotated[
        bool,
        typer.Option("--prune-empty", help="Also remove directories left empty."),
    ] = False,
) -> None:
    """Remove OS metadata files below a directory."""
    _require_dir(path)

    entries = MetadataCleaner().scan(path)
    if not entries:
        print_success(f"No metadata files found in {path}")
        return

    console.print(create_metadata_table(entries))

    if not dry_run and not yes:
        confirmed = typer.confirm(
            f"\nRemove {len(entries)} metadata entries?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    report = MetadataCleaner(dry_run=dry_run).clean(path, prune_empty=prune_empty)
    print_metadata_report(report)

    if not report.success:
        raise typer.Exit(code=1)
