"""CLI package for flipsd.

This package contains the Typer application and all subcommands.
"""

from flipsd.cli.main import app

__all__ = ["app"]
