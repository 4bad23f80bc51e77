"""Bundle catalog: metadata records, descriptor loading and lookups."""
from __future__ import annotations

from .catalog import Catalog, CompatibilityReport, order_by_priority
from .metadata import (
    CATEGORY_ALIASES,
    DESCRIPTOR_NAMES,
    BundleMetadata,
    Category,
    SectionPolicy,
    find_descriptor,
    load_bundle_metadata,
    metadata_from_mapping,
)

__all__ = [
    "Catalog",
    "CompatibilityReport",
    "order_by_priority",
    "Category",
    "CATEGORY_ALIASES",
    "DESCRIPTOR_NAMES",
    "SectionPolicy",
    "BundleMetadata",
    "metadata_from_mapping",
    "find_descriptor",
    "load_bundle_metadata",
]
