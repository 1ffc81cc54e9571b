"""Resource discovery and the in-memory catalog.

Exports:
- Resource, ResourceDescriptor, Catalog: immutable value types
- build_catalog: descriptors -> Catalog (fresh inverted index every time)
- Scanner: concurrent per-root bundle discovery
- AppBundleReader, DesktopEntryReader: supported bundle conventions
"""

from lodestar.index.builder import build_catalog
from lodestar.index.bundles import AppBundleReader, BundleReader, DesktopEntryReader
from lodestar.index.models import (
    BuildStats,
    Catalog,
    MappingUsageScores,
    Resource,
    ResourceDescriptor,
    UsageScores,
)
from lodestar.index.scanner import RootScan, RootStatus, Scanner, ScanResult

__all__ = [
    "AppBundleReader",
    "BuildStats",
    "BundleReader",
    "Catalog",
    "DesktopEntryReader",
    "MappingUsageScores",
    "Resource",
    "ResourceDescriptor",
    "RootScan",
    "RootStatus",
    "ScanResult",
    "Scanner",
    "UsageScores",
    "build_catalog",
]
