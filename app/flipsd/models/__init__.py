"""Data models for flipsd.

This module exports the mapping, capacity and outcome models used
across the build stages.
"""

from flipsd.models.capacity import CapacityCheck, CapacityReport, DeviceCapacity
from flipsd.models.mapping import (
    DEFAULT_CATEGORY,
    DEFAULT_EXCLUDES,
    DEFAULT_MAPPINGS,
    PLAYGROUND_DIR,
    ExclusionSet,
    MappingEntry,
    MappingOrigin,
    ResolvedMapping,
)
from flipsd.models.outcome import (
    SUMMARY_RULES,
    BuildReport,
    CategoryCount,
    MetadataEntry,
    MetadataReport,
    StagedEntry,
    SummaryRule,
    SyncOutcome,
)

__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_EXCLUDES",
    "DEFAULT_MAPPINGS",
    "PLAYGROUND_DIR",
    "SUMMARY_RULES",
    "BuildReport",
    "CapacityCheck",
    "CapacityReport",
    "CategoryCount",
    "DeviceCapacity",
    "ExclusionSet",
    "MappingEntry",
    "MappingOrigin",
    "MetadataEntry",
    "MetadataReport",
    "ResolvedMapping",
    "StagedEntry",
    "SummaryRule",
    "SyncOutcome",
]
