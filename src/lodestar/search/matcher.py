"""Query-to-text relevance scoring.

Scores are normalized to [0.0, 1.0]:
- 1.0   exact (case-insensitive) equality
- 0.95  text starts with the query
- <0.85 approximate match, scaled down so it never outranks a prefix hit
- 0.0   no acceptable match

The approximate tier uses rapidfuzz. The best-aligned window of the text is
compared to the query by Levenshtein similarity, and matches that start far
from the beginning of the text are penalised.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from rapidfuzz import fuzz
from rapidfuzz.distance import Levenshtein

from lodestar.config.constants import EXACT_SCORE, FUZZY_SCALE, PREFIX_SCORE
from lodestar.config.models import MatcherConfig


@dataclass(frozen=True, slots=True)
class Matcher:
    """Stateless matcher carrying its fuzzy tuning knobs.

    Attributes:
        window: Only the first ``window`` characters of the text are aligned.
        distance: Offset at which the proximity penalty saturates.
        threshold: Raw similarity below this is rejected.
        proximity_weight: Maximum penalty for a match far from the start.
    """

    window: int = 32
    distance: int = 100
    threshold: float = 0.3
    proximity_weight: float = 0.5

    @classmethod
    def from_config(cls, config: MatcherConfig) -> Matcher:
        return cls(
            window=config.window,
            distance=config.distance,
            threshold=config.threshold,
            proximity_weight=config.proximity_weight,
        )

    def match(self, query: str, text: str) -> float:
        q = query.lower()
        t = text.lower()
        if q == t:
            return EXACT_SCORE
        if not q or not t:
            return 0.0
        if t.startswith(q):
            return PREFIX_SCORE
        return self._scaled(self.fuzzy_raw(q, t))

    def match_best(self, query: str, candidates: Iterable[str]) -> float:
        """Best score of ``query`` against any candidate."""
        q = query.lower()
        lowered = [c.lower() for c in candidates]
        if not lowered:
            return 0.0
        if any(c == q for c in lowered):
            return EXACT_SCORE
        if not q:
            return 0.0
        if any(c and c.startswith(q) for c in lowered):
            return PREFIX_SCORE
        best = max((self.fuzzy_raw(q, c) for c in lowered if c), default=0.0)
        return self._scaled(best)

    def fuzzy_raw(self, q: str, t: str) -> float:
        """Raw approximate goodness of lowercased ``q`` within ``t``, in [0, 1]."""
        window = t[: self.window]
        if len(q) <= len(window):
            alignment = fuzz.partial_ratio_alignment(q, window)
            if alignment is None:
                return 0.0
            aligned = window[alignment.dest_start : alignment.dest_end]
            similarity = Levenshtein.normalized_similarity(q, aligned)
            start = alignment.dest_start
        else:
            similarity = Levenshtein.normalized_similarity(q, window)
            start = 0
        penalty = self.proximity_weight * min(start / self.distance, 1.0)
        return max(0.0, similarity - penalty)

    def _scaled(self, raw: float) -> float:
        if raw < self.threshold:
            return 0.0
        return raw * FUZZY_SCALE


DEFAULT_MATCHER = Matcher()


def match(query: str, text: str) -> float:
    return DEFAULT_MATCHER.match(query, text)


def match_best(query: str, candidates: Iterable[str]) -> float:
    return DEFAULT_MATCHER.match_best(query, candidates)
