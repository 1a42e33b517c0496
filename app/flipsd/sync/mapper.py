"""Content mapper: Playground checkout to staging tree.

Copies each mapped top-level source directory into
``<staging>/<category>/playground/`` with rsync, skipping excluded
names at any depth. Source directories missing from the static table
are discovered and routed to the default category so new upstream
content is never dropped.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from flipsd.core.errors import PreconditionError, TransferError
from flipsd.models.mapping import (
    DEFAULT_CATEGORY,
    DEFAULT_MAPPINGS,
    PLAYGROUND_DIR,
    VCS_DIRS,
    ExclusionSet,
    MappingEntry,
    MappingOrigin,
    ResolvedMapping,
)
from flipsd.models.outcome import StagedEntry
from flipsd.utils.shell import run_command

logger = logging.getLogger(__name__)


def resolve_mappings(
    source_root: Path,
    entries: Iterable[MappingEntry] = DEFAULT_MAPPINGS,
    default_category: str = DEFAULT_CATEGORY,
    exclusions: ExclusionSet | None = None,
) -> list[ResolvedMapping]:
    """Resolve the mapping table against an actual source tree.

    Phase 1 applies the static table in order, skipping entries whose
    source directory is absent. Phase 2 enumerates the remaining
    top-level directories (not hidden, not VCS-internal, not symlinks,
    not excluded) and routes each to
    ``<default_category>/playground/<name>``.

    Args:
        source_root: Root of the Playground checkout.
        entries: Static mapping table.
        default_category: Category for unmapped directories.
        exclusions: Names matching these patterns are never discovered.

    Returns:
        Resolved mappings, static ones first, discovered ones sorted by name.
    """
    exclusions = exclusions or ExclusionSet()
    entries = list(entries)
    resolved: list[ResolvedMapping] = []

    for entry in entries:
        if not (source_root / entry.source).is_dir():
            logger.debug("Mapped source %s not present, skipping", entry.source)
            continue
        resolved.append(
            ResolvedMapping(
                source=entry.source,
                category=entry.category,
                destination=entry.destination,
                origin=MappingOrigin.STATIC,
            )
        )

    known = {entry.source for entry in entries}
    for item in sorted(source_root.iterdir()):
        name = item.name
        if name in known or name.startswith(".") or name in VCS_DIRS:
            continue
        if item.is_symlink() or not item.is_dir():
            continue
        if exclusions.matches(name):
            logger.debug("Unmapped directory %s is excluded, skipping", name)
            continue
        logger.info("Found unmapped directory: %s", name)
        resolved.append(
            ResolvedMapping(
                source=name,
                category=default_category,
                destination=f"{default_category}/{PLAYGROUND_DIR}/{name}",
                origin=MappingOrigin.DISCOVERED,
            )
        )

    return resolved


class ContentMapper:
    """Copies mapped Playground content into the staging tree.

    Args:
        entries: Static mapping table.
        default_category: Category for unmapped source directories.
        exclusions: Patterns skipped by every copy.
    """

    def __init__(
        self,
        entries: Iterable[MappingEntry] = DEFAULT_MAPPINGS,
        default_category: str = DEFAULT_CATEGORY,
        exclusions: ExclusionSet | None = None,
    ) -> None:
        self._entries = tuple(entries)
        self._default_category = default_category
        self._exclusions = exclusions or ExclusionSet()

    def resolve(self, source_root: Path) -> list[ResolvedMapping]:
        """Resolve this mapper's table against a source tree.

        Args:
            source_root: Root of the Playground checkout.

        Returns:
            Resolved mappings in copy order.

        Raises:
            PreconditionError: If the source root is not a directory.
        """
        if not source_root.is_dir():
            msg = f"Source directory not found: {source_root}"
            raise PreconditionError(msg)
        return resolve_mappings(
            source_root, self._entries, self._default_category, self._exclusions
        )

    def stage(self, source_root: Path, staging_root: Path) -> list[StagedEntry]:
        """Copy every resolved mapping into the staging tree.

        Stops at the first failed copy; partial staging content must
        never be deployed.

        Args:
            source_root: Root of the Playground checkout.
            staging_root: Empty staging directory.

        Returns:
            One StagedEntry per copied mapping.

        Raises:
            PreconditionError: If the source root is missing or rsync is not installed.
            TransferError: If a copy fails.
        """
        staged: list[StagedEntry] = []
        for mapping in self.resolve(source_root):
            dest = staging_root / mapping.destination
            self._copy(source_root / mapping.source, dest, mapping.source)
            staged.append(StagedEntry(mapping=mapping, path=dest))
            logger.info("Copied %s/ -> %s/", mapping.source, mapping.destination)
        return staged

    def ensure_category_skeleton(self, staging_root: Path, categories: Iterable[str]) -> None:
        """Create ``<category>/playground`` in staging for each category.

        Empty categories then still mirror onto the card. Excluded
        category names are left out.

        Args:
            staging_root: Staging directory.
            categories: Category names.
        """
        for category in categories:
            if self._exclusions.matches(category):
                continue
            (staging_root / category / PLAYGROUND_DIR).mkdir(parents=True, exist_ok=True)

    def _copy(self, source: Path, dest: Path, label: str) -> None:
        try:
            dest.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TransferError(label, None, str(e)) from e
        args = ["rsync", "-a", *self._exclusions.rsync_args(), f"{source}/", f"{dest}/"]
        try:
            result = run_command(args, timeout=None)
        except FileNotFoundError as e:
            raise PreconditionError("rsync is required but not installed") from e
        if not result.success:
            raise TransferError(label, result.returncode, result.stderr)
