"""OS metadata scanner and cleaner.

Finds files and directories that macOS and Windows drop on removable
media (Finder state, resource forks, Spotlight indexes, thumbnail
caches) and removes them. Used on the staging tree before it is
measured and, on request, on the SD card itself.
"""

import fnmatch
import logging
import os
import shutil
from collections.abc import Iterable
from pathlib import Path

from flipsd.models.mapping import PLAYGROUND_DIR
from flipsd.models.outcome import MetadataEntry, MetadataReport

logger = logging.getLogger(__name__)

METADATA_PATTERNS: tuple[str, ...] = (
    ".DS_Store",
    "._*",
    ".Spotlight-V100",
    ".fseventsd",
    ".Trashes",
    ".TemporaryItems",
    "Thumbs.db",
    ".DocumentRevisions-V100",
)


def match_metadata(name: str, patterns: Iterable[str] = METADATA_PATTERNS) -> str | None:
    """Return the metadata pattern matching a name, if any.

    Args:
        name: File or directory base name.
        patterns: Glob patterns to test.

    Returns:
        The first matching pattern, or None.
    """
    for pattern in patterns:
        if fnmatch.fnmatchcase(name, pattern):
            return pattern
    return None


class MetadataCleaner:
    """Scans a tree for OS metadata and deletes it.

    Args:
        patterns: Glob patterns identifying metadata entries.
        dry_run: If True, report what would be deleted without deleting.
    """

    def __init__(
        self,
        patterns: Iterable[str] = METADATA_PATTERNS,
        *,
        dry_run: bool = False,
    ) -> None:
        self._patterns = tuple(patterns)
        self._dry_run = dry_run

    def scan(self, root: Path) -> list[MetadataEntry]:
        """Find metadata entries at any depth below root.

        Matched directories are reported once and not descended into.

        Args:
            root: Directory to scan.

        Returns:
            Matching entries sorted by path.
        """
        if not root.is_dir():
            return []

        found: list[MetadataEntry] = []
        for dirpath, dirnames, filenames in os.walk(root, onerror=self._log_walk_error):
            base = Path(dirpath)
            kept_dirs: list[str] = []
            for name in dirnames:
                pattern = match_metadata(name, self._patterns)
                if pattern is None:
                    kept_dirs.append(name)
                else:
                    found.append(MetadataEntry(path=base / name, pattern=pattern, is_dir=True))
            dirnames[:] = kept_dirs
            for name in filenames:
                pattern = match_metadata(name, self._patterns)
                if pattern is not None:
                    found.append(MetadataEntry(path=base / name, pattern=pattern, is_dir=False))

        return sorted(found, key=lambda e: e.path)

    def clean(
        self,
        root: Path,
        *,
        prune_empty: bool = True,
        keep_dirs: Iterable[str] = (PLAYGROUND_DIR,),
    ) -> MetadataReport:
        """Delete metadata entries below root.

        Failures are isolated per entry and collected in the report.

        Args:
            root: Directory to clean.
            prune_empty: Also remove directories left empty (never root itself).
            keep_dirs: Directory names that are never pruned.

        Returns:
            MetadataReport with found, removed and pruned counts.
        """
        entries = self.scan(root)
        report = MetadataReport(root=root, found=len(entries), dry_run=self._dry_run)

        if self._dry_run:
            for entry in entries:
                logger.info("Dry-run: would delete %s", entry.path)
            return report

        for entry in entries:
            try:
                if entry.is_dir and not entry.path.is_symlink():
                    shutil.rmtree(entry.path)
                else:
                    entry.path.unlink()
                report.removed += 1
            except OSError as e:
                report.errors.append(f"{entry.path}: {e}")

        if prune_empty:
            report.empty_dirs_removed = self._prune_empty_dirs(root, frozenset(keep_dirs))

        if report.removed:
            logger.info("Removed %d metadata entries from %s", report.removed, root)
        return report

    @staticmethod
    def _prune_empty_dirs(root: Path, keep: frozenset[str]) -> int:
        removed = 0
        for dirpath, _dirnames, _filenames in os.walk(root, topdown=False):
            path = Path(dirpath)
            if path == root or path.name in keep or path.is_symlink():
                continue
            try:
                if not any(path.iterdir()):
                    path.rmdir()
                    removed += 1
            except OSError:
                logger.debug("Could not prune %s", path)
        return removed

    @staticmethod
    def _log_walk_error(error: OSError) -> None:
        logger.warning("Cannot scan %s: %s", error.filename, error.strerror)
