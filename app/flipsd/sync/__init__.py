"""Build stages: source update, content mapping, capacity planning and device sync.

Each stage is usable on its own; :mod:`flipsd.core.pipeline` runs them
in order.
"""

from flipsd.sync.device import DeviceSynchronizer
from flipsd.sync.mapper import ContentMapper, resolve_mappings
from flipsd.sync.metadata import METADATA_PATTERNS, MetadataCleaner
from flipsd.sync.planner import CapacityPlanner
from flipsd.sync.source import SourceMaterializer
from flipsd.sync.staging import staging_area

__all__ = [
    "METADATA_PATTERNS",
    "CapacityPlanner",
    "ContentMapper",
    "DeviceSynchronizer",
    "MetadataCleaner",
    "SourceMaterializer",
    "resolve_mappings",
    "staging_area",
]
