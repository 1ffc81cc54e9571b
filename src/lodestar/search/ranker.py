"""Score fusion and result ordering.

This is the contract every result-producing domain honours, so results from
different providers can be merged into one list:

    combined = match * 0.6 + min(sqrt(max(usage, 0)) / 10, 1) * 0.4

A candidate with a match score of exactly 0.0 is excluded; usage alone never
surfaces a non-matching item. Ordering is descending by combined score with
ties broken by case-insensitive display name.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from lodestar.config.constants import MATCH_WEIGHT, USAGE_SCALE, USAGE_WEIGHT

T = TypeVar("T")


def normalize_usage(raw_usage: float) -> float:
    return min(math.sqrt(max(raw_usage, 0.0)) / USAGE_SCALE, 1.0)


def rank(match_score: float, raw_usage: float) -> float | None:
    """Fuse match and usage scores; None means the candidate is excluded."""
    if match_score == 0.0:
        return None
    return match_score * MATCH_WEIGHT + normalize_usage(raw_usage) * USAGE_WEIGHT


@dataclass(frozen=True, slots=True)
class ScoredResult(Generic[T]):
    """One ranked item from any provider."""

    item: T
    match_score: float
    combined: float
    display_name: str


def sort_key(result: ScoredResult[T]) -> tuple[float, str]:
    return (-result.combined, result.display_name.lower())


def sort_scored(results: Iterable[ScoredResult[T]]) -> list[ScoredResult[T]]:
    """Stable sort by the shared ordering."""
    return sorted(results, key=sort_key)


def score(item: T, display_name: str, match_score: float, raw_usage: float) -> ScoredResult[T] | None:
    """Build a ScoredResult, or None when the match score excludes it."""
    combined = rank(match_score, raw_usage)
    if combined is None:
        return None
    return ScoredResult(
        item=item, match_score=match_score, combined=combined, display_name=display_name
    )
