"""SD card build pipeline.

Runs the build stages strictly in sequence, each consuming the
previous stage's filesystem side effects:

1. Prerequisites: card mounted and writable, tools installed
2. Source: pull the Playground checkout (optional)
3. Staging: rebuild the staging tree and copy mapped content into it
4. Metadata: strip OS metadata from staging
5. Pre-flight: staged size + 20% against total card capacity
6. Cleanup: remove old playground directories from the card
7. Final check: staged size + 10% against free card space
8. Mirror: rsync --delete each category's playground onto the card
9. Summary: count deployed content

The staging tree is removed on every exit path. Any error aborts the
remaining stages.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace

from flipsd.core.config import BuildConfig
from flipsd.core.errors import BuildCancelledError, PreconditionError
from flipsd.models.mapping import STANDARD_CATEGORIES
from flipsd.models.outcome import BuildReport
from flipsd.sync.device import DeviceSynchronizer
from flipsd.sync.mapper import ContentMapper
from flipsd.sync.metadata import MetadataCleaner
from flipsd.sync.planner import CapacityPlanner
from flipsd.sync.source import SourceMaterializer
from flipsd.sync.staging import staging_area
from flipsd.utils.shell import missing_commands

logger = logging.getLogger(__name__)

REQUIRED_TOOLS: tuple[str, ...] = ("rsync", "du", "df")

PhaseCallback = Callable[[str], None]
ConfirmCallback = Callable[[BuildReport], bool]


@dataclass(frozen=True, slots=True)
class BuildOptions:
    """Switches for a single build run.

    Attributes:
        update_source: Pull the Playground checkout before staging.
        clone: Clone the checkout if it does not exist.
        incremental: Skip wiping old playground directories; the mirror's
            --delete removes stale files instead.
        dry_run: Stop after the pre-flight check, leaving the card untouched.
            The final check is only estimated from the current free space
            plus the playground content a cleanup would remove.
        clean_device_metadata: Also strip OS metadata from the card
            before cleanup and after deployment.
    """

    update_source: bool = True
    clone: bool = False
    incremental: bool = False
    dry_run: bool = False
    clean_device_metadata: bool = False


class BuildPipeline:
    """Runs a complete SD card build.

    Stage collaborators default to instances built from the config and
    can be injected for testing.

    Args:
        config: Build configuration.
        options: Run switches.
        on_phase: Called with a short label when each stage starts.
        confirm: Called with the report after the pre-flight check; returning
            False cancels the run before the card is modified.
    """

    def __init__(
        self,
        config: BuildConfig,
        options: BuildOptions | None = None,
        *,
        on_phase: PhaseCallback | None = None,
        confirm: ConfirmCallback | None = None,
        source: SourceMaterializer | None = None,
        mapper: ContentMapper | None = None,
        planner: CapacityPlanner | None = None,
        device: DeviceSynchronizer | None = None,
        cleaner: MetadataCleaner | None = None,
    ) -> None:
        self._config = config
        self._options = options or BuildOptions()
        self._on_phase = on_phase
        self._confirm = confirm
        self._source = source or SourceMaterializer(
            config.source_dir, config.repository, config.branch
        )
        self._mapper = mapper or ContentMapper(
            config.mapping_entries, config.default_category, config.exclusions
        )
        self._planner = planner or CapacityPlanner(
            config.preflight_margin_percent, config.final_margin_percent
        )
        self._device = device or DeviceSynchronizer(config.sd_mount, config.exclusions)
        self._cleaner = cleaner or MetadataCleaner()
        # Filled in as the run progresses; readable after a failure
        self.report = BuildReport(dry_run=self._options.dry_run)

    def check_prerequisites(self) -> None:
        """Verify everything the build needs before touching anything.

        Raises:
            PreconditionError: If the card, the checkout or a tool is missing.
        """
        self._device.check_device()

        missing = missing_commands(REQUIRED_TOOLS)
        if missing:
            raise PreconditionError(f"Required tools not installed: {', '.join(missing)}")

        if self._options.update_source:
            self._source.check(clone=self._options.clone)
        elif not self._config.source_dir.is_dir():
            raise PreconditionError(f"Playground directory not found: {self._config.source_dir}")

    def run(self) -> BuildReport:
        """Run all stages in order.

        Returns:
            BuildReport of the completed run (also available as ``self.report``).

        Raises:
            PreconditionError: If prerequisites or the source update fail.
            CapacityError: If either capacity check fails.
            BuildCancelledError: If the confirm callback declines deployment.
            TransferError: If a copy, cleanup or mirror fails.
        """
        report = self.report = BuildReport(dry_run=self._options.dry_run)
        options = self._options
        config = self._config

        self._phase("Checking prerequisites")
        self.check_prerequisites()

        if options.update_source:
            self._phase("Updating Playground repository")
            status = self._source.update(clone=options.clone)
            report.source_warning = status.remote_warning

        with staging_area(config.staging_dir) as staging:
            self._phase("Copying Playground content to staging")
            report.staged = self._mapper.stage(config.source_dir, staging)
            self._mapper.ensure_category_skeleton(staging, STANDARD_CATEGORIES)

            self._phase("Cleaning OS metadata from staging")
            report.metadata.append(self._cleaner.clean(staging))

            self._phase("Checking if content will fit on SD card")
            report.staged_bytes = self._planner.measure(staging)
            device_capacity = self._planner.query_device(config.sd_mount)
            report.preflight = self._planner.preflight(report.staged_bytes, device_capacity)

            if options.dry_run:
                # Estimate only: free space once the cleanup has removed old content
                reclaimable = self._device.reclaimable_bytes(config.clean_categories)
                report.final = self._planner.evaluate_final(
                    report.staged_bytes, device_capacity, reclaimable
                )
                logger.info("Dry-run: stopping before any change to %s", config.sd_mount)
                return report

            if self._confirm is not None and not self._confirm(report):
                raise BuildCancelledError("Deployment cancelled, SD card left untouched")

            if options.clean_device_metadata:
                self._phase("Cleaning OS metadata from SD card")
                report.metadata.append(self._cleaner.clean(config.sd_mount, prune_empty=False))

            targets, report.skipped = self._device.split_categories(staging)

            reclaimable = 0
            if options.incremental:
                reclaimable = self._device.reclaimable_bytes(targets)
            else:
                self._phase("Cleaning existing playground content from SD card")
                report.cleaned = self._device.clean(config.clean_categories)

            self._phase("Final space verification")
            device_capacity = self._planner.query_device(config.sd_mount)
            report.final = self._planner.final(
                report.staged_bytes, device_capacity, reclaimable
            )

            self._phase("Deploying content to SD card")
            report.synced = self._device.mirror(staging, targets)

            if options.clean_device_metadata:
                report.metadata.append(self._cleaner.clean(config.sd_mount, prune_empty=False))

            self._phase("Creating deployment summary")
            outcome = self._device.summarize()
            report.outcome = replace(
                outcome, capacity=self._planner.query_device(config.sd_mount)
            )

        return report

    def _phase(self, label: str) -> None:
        logger.debug("Phase: %s", label)
        if self._on_phase is not None:
            self._on_phase(label)
