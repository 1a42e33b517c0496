"""Source materializer: keep the Playground checkout current.

Wraps the git client: clones a missing checkout on request, pulls the
configured branch and updates nested submodules. Every git failure is
fatal for a build.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from flipsd.core.errors import PreconditionError, SourceUpdateError
from flipsd.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SourceStatus:
    """Result of updating the Playground checkout.

    Attributes:
        path: Checkout directory.
        cloned: Whether the checkout was freshly cloned.
        remote: Current ``remote.origin.url`` (None if unset).
        remote_warning: Message when the remote differs from the expected one.
    """

    path: Path
    cloned: bool
    remote: str | None
    remote_warning: str | None = None


class SourceMaterializer:
    """Ensures a local, up-to-date Playground checkout.

    Args:
        path: Checkout directory.
        repository: Expected remote URL.
        branch: Branch to pull.
    """

    def __init__(self, path: Path, repository: str, branch: str = "main") -> None:
        self._path = path
        self._repository = repository
        self._branch = branch

    def check(self, *, clone: bool = False) -> None:
        """Verify git is installed and the checkout exists (unless cloning).

        Args:
            clone: Whether a missing checkout may be cloned.

        Raises:
            PreconditionError: If git is missing or the checkout is absent.
        """
        if not command_exists("git"):
            raise PreconditionError("Git is required but not installed")
        if not clone and not self._path.is_dir():
            msg = f"Playground directory not found: {self._path} (use --clone to fetch it)"
            raise PreconditionError(msg)

    def update(self, *, clone: bool = False) -> SourceStatus:
        """Bring the checkout up to date with its remote.

        Args:
            clone: Clone the repository if the checkout does not exist.

        Returns:
            SourceStatus describing what happened.

        Raises:
            PreconditionError: If git is missing or the checkout is absent.
            SourceUpdateError: If a git command fails.
        """
        self.check(clone=clone)

        if not self._path.is_dir():
            logger.info("Cloning %s into %s", self._repository, self._path)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._git(
                [
                    "clone",
                    "--recursive",
                    "--branch",
                    self._branch,
                    self._repository,
                    str(self._path),
                ]
            )
            return SourceStatus(path=self._path, cloned=True, remote=self._repository)

        remote = self.current_remote()
        warning = None
        if remote != self._repository:
            warning = (
                f"Playground remote {remote or '(none)'} does not match expected "
                f"{self._repository}. Run: git remote set-url origin {self._repository}"
            )
            logger.warning("%s", warning)

        logger.info("Pulling latest changes from origin/%s", self._branch)
        self._git(["pull", "origin", self._branch], cwd=self._path)
        logger.info("Updating submodules")
        self._git(["submodule", "update", "--init", "--recursive"], cwd=self._path)

        return SourceStatus(path=self._path, cloned=False, remote=remote, remote_warning=warning)

    def current_remote(self) -> str | None:
        """Read ``remote.origin.url`` of the checkout.

        Returns:
            The URL, or None if it is not configured.
        """
        try:
            result = run_command(
                ["git", "config", "--get", "remote.origin.url"],
                cwd=str(self._path),
                timeout=10.0,
            )
        except (FileNotFoundError, OSError):
            return None
        url = result.stdout.strip()
        return url if result.success and url else None

    def _git(self, args: list[str], cwd: Path | None = None) -> None:
        try:
            result = run_command(
                ["git", *args],
                cwd=str(cwd) if cwd is not None else None,
                timeout=None,
            )
        except FileNotFoundError as e:
            raise PreconditionError("Git is required but not installed") from e
        if not result.success:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise SourceUpdateError(f"git {args[0]} failed: {detail}")
