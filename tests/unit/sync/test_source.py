"""Unit tests for the source materializer."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from flipsd.core.errors import PreconditionError, SourceUpdateError
from flipsd.sync.source import SourceMaterializer
from flipsd.utils.shell import CommandResult

REPO = "https://github.com/UberGuidoZ/Flipper"

OK = CommandResult(stdout="", stderr="", returncode=0)


def _remote(url: str) -> CommandResult:
    return CommandResult(stdout=f"{url}\n", stderr="", returncode=0)


@pytest.fixture
def git_available():
    with patch("flipsd.sync.source.command_exists", return_value=True) as mock:
        yield mock


class TestCheck:
    """Tests for SourceMaterializer.check."""

    @patch("flipsd.sync.source.command_exists", return_value=False)
    def test_git_missing(self, _mock_exists: MagicMock, tmp_path: Path) -> None:
        """A missing git client is a precondition failure."""
        with pytest.raises(PreconditionError, match="Git is required"):
            SourceMaterializer(tmp_path, REPO).check()

    @pytest.mark.usefixtures("git_available")
    def test_missing_checkout(self, tmp_path: Path) -> None:
        """A missing checkout without --clone is a precondition failure."""
        with pytest.raises(PreconditionError, match="--clone"):
            SourceMaterializer(tmp_path / "Playground", REPO).check()

    @pytest.mark.usefixtures("git_available")
    def test_missing_checkout_with_clone(self, tmp_path: Path) -> None:
        """A missing checkout is acceptable when cloning."""
        SourceMaterializer(tmp_path / "Playground", REPO).check(clone=True)


@pytest.mark.usefixtures("git_available")
class TestUpdate:
    """Tests for SourceMaterializer.update."""

    @patch("flipsd.sync.source.run_command")
    def test_pull_and_submodules(self, mock_run: MagicMock, playground: Path) -> None:
        """An existing checkout is pulled and its submodules updated."""
        mock_run.side_effect = [_remote(REPO), OK, OK]

        status = SourceMaterializer(playground, REPO, "main").update()

        commands = [c.args[0] for c in mock_run.call_args_list]
        assert commands[1] == ["git", "pull", "origin", "main"]
        assert commands[2] == ["git", "submodule", "update", "--init", "--recursive"]
        assert mock_run.call_args_list[1].kwargs["cwd"] == str(playground)
        assert status.cloned is False
        assert status.remote_warning is None

    @patch("flipsd.sync.source.run_command")
    def test_remote_mismatch_warns(self, mock_run: MagicMock, playground: Path) -> None:
        """A different remote produces a warning and the update continues."""
        mock_run.side_effect = [_remote("https://example.com/fork.git"), OK, OK]

        status = SourceMaterializer(playground, REPO).update()

        assert status.remote == "https://example.com/fork.git"
        assert status.remote_warning is not None
        assert "git remote set-url origin" in status.remote_warning
        assert mock_run.call_count == 3

    @patch("flipsd.sync.source.run_command")
    def test_clone_when_missing(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """A missing checkout is cloned recursively on request."""
        mock_run.return_value = OK
        target = tmp_path / "cache" / "Playground"

        status = SourceMaterializer(target, REPO, "dev").update(clone=True)

        assert mock_run.call_args.args[0] == [
            "git",
            "clone",
            "--recursive",
            "--branch",
            "dev",
            REPO,
            str(target),
        ]
        assert status.cloned is True
        assert target.parent.is_dir()

    @patch("flipsd.sync.source.run_command")
    def test_pull_failure(self, mock_run: MagicMock, playground: Path) -> None:
        """A failed pull raises SourceUpdateError with git's message."""
        mock_run.side_effect = [
            _remote(REPO),
            CommandResult(stdout="", stderr="fatal: could not read from remote", returncode=128),
        ]

        with pytest.raises(SourceUpdateError, match="git pull failed: fatal"):
            SourceMaterializer(playground, REPO).update()

    @patch("flipsd.sync.source.run_command")
    def test_unset_remote(self, mock_run: MagicMock, playground: Path) -> None:
        """A checkout without origin is reported as (none)."""
        mock_run.side_effect = [CommandResult(stdout="", stderr="", returncode=1), OK, OK]

        status = SourceMaterializer(playground, REPO).update()

        assert status.remote is None
        assert "(none)" in (status.remote_warning or "")
