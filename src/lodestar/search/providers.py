"""Result providers: one protocol shared by every searchable domain.

Applications, folders, quick links and commands each plug in their own data
source, but they all return ``ScoredResult`` values built with the shared
ranker. The merge step below can therefore order heterogeneous results
without knowing anything about a provider's internals.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from lodestar.index.models import MappingUsageScores, Resource, UsageScores
from lodestar.search.facade import QueryFacade
from lodestar.search.ranker import ScoredResult, sort_scored

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class SearchContext:
    """Per-query inputs handed to every provider."""

    query: str
    usage: UsageScores

    @property
    def query_lower(self) -> str:
        return self.query.strip().lower()


class ResultProvider(Protocol):
    """A searchable domain."""

    def produce_scored_results(
        self, query: str, context: SearchContext
    ) -> list[ScoredResult[Any]]: ...


class Launcher(Protocol):
    """OS integration that opens a resource; the engine never launches itself."""

    def launch(self, resource: Resource) -> None: ...


class ResourceResultProvider:
    """Adapts the catalog query facade to the provider protocol."""

    def __init__(self, facade: QueryFacade, limit: int = 30) -> None:
        self._facade = facade
        self._limit = limit

    def produce_scored_results(
        self, query: str, context: SearchContext
    ) -> list[ScoredResult[Any]]:
        return list(self._facade.search_scored(query, self._limit, usage=context.usage))


def merge_results(
    providers: Sequence[ResultProvider],
    query: str,
    usage: UsageScores | None = None,
    limit: int = 10,
) -> list[ScoredResult[Any]]:
    """Collect every provider's results and order them with the shared ranking.

    A provider that raises is logged and contributes nothing.
    """
    if not query.strip() or limit <= 0:
        return []
    context = SearchContext(query=query, usage=usage or MappingUsageScores())

    collected: list[ScoredResult[Any]] = []
    for provider in providers:
        try:
            collected.extend(provider.produce_scored_results(context.query_lower, context))
        except Exception as e:
            logger.warning(
                "provider_failed",
                provider=type(provider).__name__,
                error=str(e),
            )
    return sort_scored(collected)[:limit]
