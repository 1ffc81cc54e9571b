"""Resource and Catalog value types.

A Catalog is an immutable snapshot: it is built once per rescan, published by
the discovery coordinator and only ever read afterwards. Icons are not part of
a Resource; they live in the asset cache keyed by resource id.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Protocol

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass(frozen=True, slots=True)
class Resource:
    """A discoverable, launchable entity."""

    id: str
    name: str
    display_name: str
    location: Path
    last_modified: datetime = EPOCH
    description: str | None = None
    keywords: frozenset[str] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        """Boundary shape consumed by presentation and other providers."""
        return {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "location": str(self.location),
            "description": self.description,
            "keywords": sorted(self.keywords),
        }


@dataclass(frozen=True, slots=True)
class ResourceDescriptor:
    """Raw metadata read from one bundle, before keyword derivation.

    ``identifier`` is None when the manifest is missing or unreadable; the
    catalog builder drops such descriptors.
    """

    location: Path
    identifier: str | None
    name: str
    display_name: str | None = None
    description: str | None = None
    categories: tuple[str, ...] = ()
    extra_keywords: tuple[str, ...] = ()
    last_modified: datetime = EPOCH

    @property
    def is_malformed(self) -> bool:
        return not self.identifier or not self.identifier.strip()


@dataclass(frozen=True, slots=True)
class BuildStats:
    """Counters from one catalog build."""

    resources: int = 0
    dropped: int = 0
    duplicates: int = 0
    terms: int = 0
    duration_seconds: float = 0.0


_EMPTY: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Catalog:
    """Immutable snapshot of discovered resources plus the inverted index."""

    resources: Mapping[str, Resource] = field(default_factory=lambda: MappingProxyType({}))
    index: Mapping[str, frozenset[str]] = field(default_factory=lambda: MappingProxyType({}))
    generation: int = 0
    built_at: datetime = EPOCH
    stats: BuildStats = field(default_factory=BuildStats)
    _sorted_terms: tuple[str, ...] = field(default=(), repr=False, compare=False)

    @classmethod
    def empty(cls) -> Catalog:
        return cls()

    def __len__(self) -> int:
        return len(self.resources)

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self.resources

    def get(self, resource_id: str) -> Resource | None:
        return self.resources.get(resource_id)

    def ids(self) -> frozenset[str]:
        return frozenset(self.resources)

    def lookup(self, term: str) -> frozenset[str]:
        """Ids indexed under exactly ``term``."""
        return self.index.get(term, _EMPTY)

    def terms(self) -> Iterator[str]:
        """Index terms in sorted order, so full scans are deterministic."""
        return iter(self._sorted_terms)


class UsageScores(Protocol):
    """Read-only usage frequency lookup owned outside the engine."""

    def usage_score(self, resource_id: str) -> float: ...


class MappingUsageScores:
    """Adapts a plain ``id -> count`` mapping to the UsageScores protocol."""

    __slots__ = ("_scores",)

    def __init__(self, scores: Mapping[str, float] | None = None) -> None:
        self._scores: Mapping[str, float] = MappingProxyType(dict(scores or {}))

    def usage_score(self, resource_id: str) -> float:
        return float(self._scores.get(resource_id, 0.0))
