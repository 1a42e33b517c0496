"""Subprocess helpers for the external tools flipsd drives.

rsync, du, df and git are run with captured output; callers decide
what a non-zero exit means for them.
"""

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of one external command.

    Attributes:
        stdout: Standard output.
        stderr: Standard error.
        returncode: Exit status.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if the command exited with status 0."""
        return self.returncode == 0


def run_command(
    args: list[str],
    *,
    check: bool = False,
    timeout: float | None = 60.0,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Run a command and capture its output as text.

    Copy, mirror and git commands pass ``timeout=None``: they may run for
    minutes on a slow card.

    Args:
        args: Command and arguments.
        check: Raise CalledProcessError on a non-zero exit.
        timeout: Seconds to wait, None to wait indefinitely.
        cwd: Working directory, None for the current one.
        env: Variables added to the inherited environment.

    Returns:
        CommandResult with stdout, stderr and returncode.

    Raises:
        subprocess.CalledProcessError: If check=True and the command fails.
        subprocess.TimeoutExpired: If the command exceeds timeout.
        FileNotFoundError: If the executable is not installed.
    """
    logger.debug("Running: %s", shlex.join(args))
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=check,
        timeout=timeout,
        cwd=cwd,
        env={**os.environ, **env} if env else None,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def command_exists(name: str) -> bool:
    """Check if an executable is on PATH."""
    return shutil.which(name) is not None


def missing_commands(names: tuple[str, ...]) -> list[str]:
    """Return the required executables that are not on PATH, in order given."""
    return [name for name in names if not command_exists(name)]
