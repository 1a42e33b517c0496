"""Device synchronizer: staging tree to SD card.

Mirrors ``<staging>/<category>/playground/`` onto
``<card>/<category>/playground/`` with ``rsync --delete``. Deletion is
scoped to that one directory, so firmware and user files elsewhere in
the category are never touched. Categories whose top-level directory
does not exist on the card are skipped: the card's folder taxonomy is
owned by the Flipper firmware.
"""

import logging
import os
import shutil
from collections.abc import Iterable
from pathlib import Path

from flipsd.core.errors import PreconditionError, TransferError
from flipsd.models.mapping import CLEANABLE_CATEGORIES, PLAYGROUND_DIR, ExclusionSet
from flipsd.models.outcome import SUMMARY_RULES, CategoryCount, SummaryRule, SyncOutcome
from flipsd.utils.shell import run_command

logger = logging.getLogger(__name__)

# FAT cards keep mtimes at 2 second resolution and reject permission changes
MIRROR_FLAGS: tuple[str, ...] = ("-rltD", "--modify-window=1")


class DeviceSynchronizer:
    """Cleans, mirrors and summarizes playground content on the card.

    Args:
        mount: Mount point of the SD card.
        exclusions: Patterns never transferred (and never deleted) by the mirror.
    """

    def __init__(self, mount: Path, exclusions: ExclusionSet | None = None) -> None:
        self._mount = mount
        self._exclusions = exclusions or ExclusionSet()

    @property
    def mount(self) -> Path:
        """Mount point of the SD card."""
        return self._mount

    def check_device(self) -> None:
        """Verify that the card is mounted and writable.

        Raises:
            PreconditionError: If the mount point is missing or read-only.
        """
        if not self._mount.is_dir():
            msg = f"Flipper SD card not found at {self._mount}"
            raise PreconditionError(msg)
        if not os.access(self._mount, os.W_OK):
            msg = f"SD card at {self._mount} is not writable. Check permissions."
            raise PreconditionError(msg)

    def playground_path(self, category: str) -> Path:
        """Path of a category's playground directory on the card."""
        return self._mount / category / PLAYGROUND_DIR

    def split_categories(self, staging_root: Path) -> tuple[list[str], list[str]]:
        """Split staged categories into sync targets and skipped ones.

        A staged category is a sync target when it has a playground
        directory in staging and its top-level directory exists on the card.

        Args:
            staging_root: Staging directory.

        Returns:
            Tuple of (targets, skipped), each sorted by name.
        """
        targets: list[str] = []
        skipped: list[str] = []
        for item in sorted(staging_root.iterdir()):
            if not (item / PLAYGROUND_DIR).is_dir():
                continue
            if (self._mount / item.name).is_dir():
                targets.append(item.name)
            else:
                logger.info("Category %s not present on card, skipping", item.name)
                skipped.append(item.name)
        return targets, skipped

    def clean(self, categories: Iterable[str] = CLEANABLE_CATEGORIES) -> list[Path]:
        """Remove existing playground directories from the card.

        Only ``<category>/playground`` itself is removed.

        Args:
            categories: Categories to clean.

        Returns:
            Removed playground directories.

        Raises:
            TransferError: If a directory cannot be removed.
        """
        removed: list[Path] = []
        for category in categories:
            path = self.playground_path(category)
            if path.is_dir() and not path.is_symlink():
                logger.info("Cleaning %s/%s/", category, PLAYGROUND_DIR)
                try:
                    shutil.rmtree(path)
                except OSError as e:
                    raise TransferError(f"{category}/{PLAYGROUND_DIR} cleanup", None, str(e)) from e
                removed.append(path)
        return removed

    def reclaimable_bytes(self, categories: Iterable[str]) -> int:
        """Size of existing playground content the mirror will replace.

        Args:
            categories: Categories that will be mirrored.

        Returns:
            Total apparent size in bytes of the existing playground files.
        """
        total = 0
        for category in categories:
            path = self.playground_path(category)
            if not path.is_dir():
                continue
            for child in path.rglob("*"):
                try:
                    if child.is_file() and not child.is_symlink():
                        total += child.stat().st_size
                except OSError:
                    continue
        return total

    def mirror(self, staging_root: Path, categories: Iterable[str]) -> list[str]:
        """Mirror each category's playground directory onto the card.

        Runs one rsync per category with ``--delete``. The first failure
        stops the remaining categories; categories mirrored before it
        stay on the card.

        Args:
            staging_root: Staging directory.
            categories: Categories to mirror, in order.

        Returns:
            Categories mirrored.

        Raises:
            PreconditionError: If rsync is not installed.
            TransferError: If a mirror fails.
        """
        synced: list[str] = []
        for category in categories:
            source = staging_root / category / PLAYGROUND_DIR
            target = self.playground_path(category)
            label = f"{category}/{PLAYGROUND_DIR}"
            try:
                target.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise TransferError(label, None, str(e)) from e
            args = [
                "rsync",
                *MIRROR_FLAGS,
                "--delete",
                *self._exclusions.rsync_args(),
                f"{source}/",
                f"{target}/",
            ]
            try:
                result = run_command(args, timeout=None)
            except FileNotFoundError as e:
                raise PreconditionError("rsync is required but not installed") from e
            if not result.success:
                raise TransferError(label, result.returncode, result.stderr)
            logger.info("Synced %s/%s/", category, PLAYGROUND_DIR)
            synced.append(category)
        return synced

    def summarize(self, rules: Iterable[SummaryRule] = SUMMARY_RULES) -> SyncOutcome:
        """Count deployed content per category.

        Files are matched recursively below each category directory.

        Args:
            rules: Which files count for which category.

        Returns:
            SyncOutcome with counts in rule order.
        """
        counts = tuple(CategoryCount(rule=rule, count=self.count_files(rule)) for rule in rules)
        return SyncOutcome(counts=counts)

    def count_files(self, rule: SummaryRule) -> int:
        """Count files matching a rule below its category directory."""
        root = self._mount / rule.category
        if not root.is_dir():
            return 0
        return sum(1 for path in root.rglob(rule.pattern) if path.is_file())
