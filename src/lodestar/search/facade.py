"""Query facade: the public ``search(query, limit)`` entry point.

Each call reads exactly one Catalog snapshot from ``catalog_source`` and never
waits for a scan in progress.

Search runs in two stages:
- Fast path: ids indexed under the lowercased query itself score 1.0. When
  they alone fill ``limit`` the sorted slice is returned without scoring the
  rest of the index. Other equally relevant terms are not considered then.
- Full path: every index term is scored with the Matcher, matching ids are
  rescored against their names and keywords, fused with usage and collected
  until ``limit * 3`` candidates are held.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from lodestar.config.constants import (
    EXACT_SCORE,
    KEYWORD_WEIGHT,
    OVERCOLLECT_FACTOR,
    SEARCH_MAX_LIMIT,
)
from lodestar.index.models import Catalog, MappingUsageScores, Resource, UsageScores
from lodestar.search.matcher import DEFAULT_MATCHER, Matcher
from lodestar.search.ranker import ScoredResult, score, sort_scored

logger = structlog.get_logger()


class QueryFacade:
    """Ranks catalog resources against free-text queries."""

    def __init__(
        self,
        catalog_source: Callable[[], Catalog],
        usage: UsageScores | None = None,
        matcher: Matcher = DEFAULT_MATCHER,
    ) -> None:
        self._catalog_source = catalog_source
        self._usage: UsageScores = usage if usage is not None else MappingUsageScores()
        self._matcher = matcher

    def search(self, query: str, limit: int) -> list[Resource]:
        return [r.item for r in self.search_scored(query, limit)]

    @property
    def usage(self) -> UsageScores:
        return self._usage

    def search_scored(
        self, query: str, limit: int, usage: UsageScores | None = None
    ) -> list[ScoredResult[Resource]]:
        """Ranked results. ``usage`` replaces the facade's own lookup for this call."""
        query_lower = query.strip().lower()
        if not query_lower or limit <= 0:
            return []
        limit = min(limit, SEARCH_MAX_LIMIT)
        catalog = self._catalog_source()
        usage = usage if usage is not None else self._usage

        results: list[ScoredResult[Resource]] = []
        seen: set[str] = set()

        # Fast path: the query is itself an index term
        for resource_id in sorted(catalog.lookup(query_lower)):
            resource = catalog.get(resource_id)
            if resource is None:
                continue
            seen.add(resource_id)
            scored = self._fuse(resource, EXACT_SCORE, usage)
            if scored is not None:
                results.append(scored)

        if len(results) >= limit:
            logger.debug("search_fast_path", query=query_lower, hits=len(results))
            return sort_scored(results)[:limit]

        cap = limit * OVERCOLLECT_FACTOR
        for term in catalog.terms():
            if len(results) >= cap:
                break
            term_score = self._matcher.match(query_lower, term)
            if term_score <= 0.0:
                continue
            for resource_id in sorted(catalog.lookup(term) - seen):
                resource = catalog.get(resource_id)
                if resource is None:
                    continue
                seen.add(resource_id)
                enhanced = self._enhanced_score(query_lower, resource, term_score)
                scored = self._fuse(resource, enhanced, usage)
                if scored is not None:
                    results.append(scored)
                if len(results) >= cap:
                    break

        return sort_scored(results)[:limit]

    def _enhanced_score(self, query: str, resource: Resource, base: float) -> float:
        """Best of the matched term, the names, and down-weighted keywords.

        Description words reach the score only through ``base``; they are
        already index terms.
        """
        best = max(
            base,
            self._matcher.match(query, resource.name),
            self._matcher.match(query, resource.display_name),
        )
        for keyword in resource.keywords:
            best = max(best, self._matcher.match(query, keyword) * KEYWORD_WEIGHT)
        return best

    @staticmethod
    def _fuse(
        resource: Resource, match_score: float, usage: UsageScores
    ) -> ScoredResult[Resource] | None:
        return score(resource, resource.display_name, match_score, usage.usage_score(resource.id))
