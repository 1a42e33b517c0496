"""Console output and subprocess helpers shared by every flipsd layer."""

from flipsd.utils.formatting import (
    configure_logging,
    console,
    err_console,
    print_error,
    print_info,
    print_phase,
    print_success,
    print_warning,
)
from flipsd.utils.shell import CommandResult, command_exists, missing_commands, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "configure_logging",
    "console",
    "err_console",
    "missing_commands",
    "print_error",
    "print_info",
    "print_phase",
    "print_success",
    "print_warning",
    "run_command",
]
