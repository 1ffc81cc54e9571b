"""Config module exports."""

from lodestar.config.loader import load_config
from lodestar.config.models import (
    AssetsConfig,
    DiscoveryConfig,
    LodestarConfig,
    LoggingConfig,
    MatcherConfig,
    RootConfig,
    SearchConfig,
    WatcherConfig,
)

__all__ = [
    "load_config",
    "AssetsConfig",
    "DiscoveryConfig",
    "LodestarConfig",
    "LoggingConfig",
    "MatcherConfig",
    "RootConfig",
    "SearchConfig",
    "WatcherConfig",
]
