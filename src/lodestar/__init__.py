"""Lodestar - discovery, indexing and ranking engine for desktop quick-launchers."""

from lodestar.engine import Engine
from lodestar.index.models import Catalog, MappingUsageScores, Resource, UsageScores

__version__ = "0.1.0"

__all__ = [
    "Catalog",
    "Engine",
    "MappingUsageScores",
    "Resource",
    "UsageScores",
    "__version__",
]
