"""CLI commands for flipsd.

This package contains all subcommand implementations.
"""

from flipsd.cli.commands import build, config, metadata, plan, summary, update

__all__ = ["build", "config", "metadata", "plan", "summary", "update"]
