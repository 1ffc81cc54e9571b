"""Matching, ranking and the query facade."""

from lodestar.search.facade import QueryFacade
from lodestar.search.matcher import Matcher, match, match_best
from lodestar.search.providers import (
    Launcher,
    ResourceResultProvider,
    ResultProvider,
    SearchContext,
    merge_results,
)
from lodestar.search.ranker import ScoredResult, normalize_usage, rank, sort_scored

__all__ = [
    "Launcher",
    "Matcher",
    "QueryFacade",
    "ResourceResultProvider",
    "ResultProvider",
    "ScoredResult",
    "SearchContext",
    "match",
    "match_best",
    "merge_results",
    "normalize_usage",
    "rank",
    "sort_scored",
]
