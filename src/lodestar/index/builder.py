"""Catalog builder: descriptors in, one immutable Catalog out.

The builder derives keyword sets and the inverted index from scratch on every
call. It never patches a previous catalog, so the published snapshot is
always internally consistent.
"""

from __future__ import annotations

import re
import time
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType

import structlog

from lodestar.config.constants import (
    DESCRIPTION_WORD_LIMIT,
    DESCRIPTION_WORD_MIN_LEN,
    PREFIX_MAX_LEN,
    PREFIX_MIN_LEN,
    PREFIX_TERM_MAX_LEN,
)
from lodestar.core.errors import ScanError
from lodestar.index.models import BuildStats, Catalog, Resource, ResourceDescriptor

logger = structlog.get_logger()

# Identifier segments too generic to be worth searching for
GENERIC_ID_SEGMENTS: frozenset[str] = frozenset({"com", "org", "net", "io", "app", "apps", "www"})

# macOS LSApplicationCategoryType values and freedesktop main categories
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "public.app-category.utilities": ("utility", "utilities", "tool", "tools"),
    "public.app-category.productivity": ("productivity", "work", "office"),
    "public.app-category.graphics-design": ("design", "graphics", "art", "creative"),
    "public.app-category.developer-tools": ("developer", "development", "code", "programming"),
    "public.app-category.entertainment": ("entertainment", "fun", "media"),
    "public.app-category.lifestyle": ("lifestyle", "personal"),
    "public.app-category.business": ("business", "enterprise", "work"),
    "public.app-category.education": ("education", "learning", "study"),
    "public.app-category.finance": ("finance", "money", "banking"),
    "public.app-category.games": ("games", "gaming", "play"),
    "public.app-category.music": ("music", "audio", "sound"),
    "public.app-category.photography": ("photo", "photography", "camera"),
    "public.app-category.video": ("video", "movie", "media"),
    "public.app-category.photo-video": ("photo", "video", "media", "camera"),
    "public.app-category.social-networking": ("social", "network", "communication"),
    "public.app-category.travel": ("travel", "maps", "navigation"),
    "public.app-category.news": ("news", "reading"),
    "public.app-category.reference": ("reference", "dictionary"),
    "public.app-category.weather": ("weather", "forecast"),
    "Utility": ("utility", "utilities", "tool", "tools"),
    "Office": ("productivity", "work", "office"),
    "Graphics": ("design", "graphics", "art", "creative"),
    "Development": ("developer", "development", "code", "programming"),
    "AudioVideo": ("media", "audio", "video"),
    "Audio": ("music", "audio", "sound"),
    "Video": ("video", "movie", "media"),
    "Network": ("network", "internet", "web"),
    "Education": ("education", "learning", "study"),
    "Game": ("games", "gaming", "play"),
    "Science": ("science", "research"),
    "Settings": ("settings", "preferences", "configuration"),
    "System": ("system", "admin"),
}

_TOKEN_SPLIT = re.compile(r"[\s\-_.:/()\[\],+&]+")


def _tokens(text: str) -> set[str]:
    return {t for t in _TOKEN_SPLIT.split(text.lower()) if t}


def identifier_components(identifier: str) -> set[str]:
    """Reverse-domain segments of an identifier minus the generic ones."""
    return {
        seg
        for seg in (part.strip().lower() for part in identifier.split("."))
        if seg and seg not in GENERIC_ID_SEGMENTS
    }


def category_keywords(categories: Iterable[str]) -> set[str]:
    words: set[str] = set()
    for category in categories:
        words.update(CATEGORY_KEYWORDS.get(category, ()))
    return words


def derive_keywords(descriptor: ResourceDescriptor, display_name: str) -> frozenset[str]:
    """Name variants, identifier components, category expansion, manifest keywords."""
    keywords: set[str] = {descriptor.name.lower(), display_name.lower()}
    keywords |= _tokens(descriptor.name)
    keywords |= _tokens(display_name)
    if descriptor.identifier:
        keywords |= identifier_components(descriptor.identifier)
    keywords |= category_keywords(descriptor.categories)
    keywords |= {k.strip().lower() for k in descriptor.extra_keywords}
    keywords.discard("")
    return frozenset(keywords)


def description_words(description: str | None) -> list[str]:
    """First few meaningful words of a description."""
    if not description:
        return []
    words = [w for w in description.lower().split() if len(w) >= DESCRIPTION_WORD_MIN_LEN]
    return words[:DESCRIPTION_WORD_LIMIT]


def prefixes(term: str) -> list[str]:
    """Length-capped prefix expansion of one term."""
    if not (PREFIX_MIN_LEN < len(term) <= PREFIX_TERM_MAX_LEN):
        return []
    return [term[:i] for i in range(PREFIX_MIN_LEN, min(len(term), PREFIX_MAX_LEN) + 1)]


def searchable_terms(resource: Resource) -> set[str]:
    terms = {resource.name.lower(), resource.display_name.lower()}
    terms |= resource.keywords
    terms.update(description_words(resource.description))
    terms.discard("")
    return terms


def to_resource(descriptor: ResourceDescriptor, identifier: str) -> Resource:
    """Turn a descriptor whose stripped ``identifier`` was validated into a Resource."""
    display_name = descriptor.display_name or descriptor.name
    return Resource(
        id=identifier,
        name=descriptor.name,
        display_name=display_name,
        location=Path(descriptor.location),
        last_modified=descriptor.last_modified,
        description=descriptor.description,
        keywords=derive_keywords(descriptor, display_name),
    )


def build_catalog(descriptors: Iterable[ResourceDescriptor], *, generation: int = 1) -> Catalog:
    """Build a fresh Catalog from one scan pass.

    Malformed descriptors are dropped. Duplicate ids resolve last-writer-wins
    in input order.
    """
    start = time.monotonic()
    resources: dict[str, Resource] = {}
    dropped = 0
    duplicates = 0

    for descriptor in descriptors:
        identifier = (descriptor.identifier or "").strip()
        if not identifier:
            dropped += 1
            err = ScanError.malformed(str(descriptor.location), "missing bundle identifier")
            logger.debug("malformed_resource_dropped", error=str(err), **err.details)
            continue
        resource = to_resource(descriptor, identifier)
        if resource.id in resources:
            duplicates += 1
            logger.debug(
                "duplicate_resource_replaced",
                id=resource.id,
                previous=str(resources[resource.id].location),
                location=str(resource.location),
            )
        resources[resource.id] = resource

    index: dict[str, set[str]] = {}
    for resource_id, resource in resources.items():
        for term in searchable_terms(resource):
            index.setdefault(term, set()).add(resource_id)
            for prefix in prefixes(term):
                index.setdefault(prefix, set()).add(resource_id)

    frozen_index = {term: frozenset(ids) for term, ids in index.items()}
    stats = BuildStats(
        resources=len(resources),
        dropped=dropped,
        duplicates=duplicates,
        terms=len(frozen_index),
        duration_seconds=time.monotonic() - start,
    )
    logger.info(
        "catalog_built",
        generation=generation,
        resources=stats.resources,
        dropped=stats.dropped,
        duplicates=stats.duplicates,
        terms=stats.terms,
    )
    return Catalog(
        resources=MappingProxyType(resources),
        index=MappingProxyType(frozen_index),
        generation=generation,
        built_at=datetime.now(tz=timezone.utc),
        stats=stats,
        _sorted_terms=tuple(sorted(frozen_index)),
    )
