"""Composition root: wires scanner, coordinator, facade, icons and watcher.

One Engine is created by the host process and handed to whatever needs it.
Nothing in the package keeps module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog
from PIL import Image

from lodestar.assets import AssetCache, icon_cache
from lodestar.config.models import LodestarConfig
from lodestar.core.excludes import ExclusionRules
from lodestar.daemon.coordinator import DiscoveryCoordinator, ScanSource
from lodestar.daemon.watcher import RootWatcher
from lodestar.index.models import Catalog, MappingUsageScores, Resource, UsageScores
from lodestar.index.scanner import Scanner
from lodestar.search.facade import QueryFacade
from lodestar.search.matcher import Matcher
from lodestar.search.providers import ResourceResultProvider
from lodestar.search.ranker import ScoredResult

logger = structlog.get_logger()


@dataclass
class Engine:
    """The public surface used by presentation layers."""

    config: LodestarConfig
    coordinator: DiscoveryCoordinator
    facade: QueryFacade
    icons: AssetCache[Image.Image]
    watcher: RootWatcher | None = None
    _started: bool = field(default=False, init=False)

    @classmethod
    def from_config(
        cls,
        config: LodestarConfig,
        usage: UsageScores | None = None,
        scanner: ScanSource | None = None,
    ) -> Engine:
        coordinator = DiscoveryCoordinator(
            scanner=scanner or Scanner.from_config(config.discovery),
            refresh_interval=config.discovery.refresh_interval_sec,
        )
        catalog_source = lambda: coordinator.catalog  # noqa: E731
        facade = QueryFacade(
            catalog_source,
            usage=usage or MappingUsageScores(),
            matcher=Matcher.from_config(config.matcher),
        )
        icons = icon_cache(catalog_source, config.assets)
        coordinator.add_swap_listener(lambda catalog: icons.evict_absent(catalog.ids()))

        watcher = None
        if config.watcher.enabled:
            watcher = RootWatcher(
                roots=list(config.discovery.roots),
                on_change=lambda _paths: coordinator.request_rescan(),
                excludes=ExclusionRules(config.discovery.exclude_patterns),
                debounce_window=config.watcher.debounce_sec,
                max_debounce_wait=config.watcher.max_debounce_wait_sec,
            )
        return cls(
            config=config,
            coordinator=coordinator,
            facade=facade,
            icons=icons,
            watcher=watcher,
        )

    @property
    def catalog(self) -> Catalog:
        return self.coordinator.catalog

    def search(self, query: str, limit: int | None = None) -> list[Resource]:
        return self.facade.search(query, self._limit(limit))

    def search_scored(self, query: str, limit: int | None = None) -> list[ScoredResult[Resource]]:
        return self.facade.search_scored(query, self._limit(limit))

    def _limit(self, limit: int | None) -> int:
        return self.config.search.default_limit if limit is None else limit

    def provider(self) -> ResourceResultProvider:
        return ResourceResultProvider(self.facade, limit=self.config.search.provider_limit)

    async def get_asset(self, resource_id: str) -> Image.Image:
        return await self.icons.get_asset(resource_id)

    def request_rescan(self) -> None:
        self.coordinator.request_rescan()

    def resolve(self, resource_id: str) -> Resource | None:
        return self.coordinator.catalog.get(resource_id)

    async def start(self, *, initial_scan: bool = True) -> None:
        if self._started:
            return
        await self.coordinator.start(initial_scan=initial_scan)
        if self.watcher is not None:
            await self.watcher.start()
        self._started = True
        logger.info("engine_started")

    async def stop(self) -> None:
        if not self._started:
            return
        if self.watcher is not None:
            await self.watcher.stop()
        await self.coordinator.stop()
        self.icons.close()
        self._started = False
        logger.info("engine_stopped")
