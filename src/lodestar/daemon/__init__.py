"""Lodestar daemon - catalog ownership, periodic refresh and root watching."""

from lodestar.daemon.coordinator import (
    CoordinatorState,
    CoordinatorStatus,
    DiscoveryCoordinator,
)
from lodestar.daemon.watcher import RootWatcher

__all__ = [
    "CoordinatorState",
    "CoordinatorStatus",
    "DiscoveryCoordinator",
    "RootWatcher",
]
