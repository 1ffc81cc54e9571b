"""Lazy, concurrency-safe asset (icon) cache keyed by resource id.

Design:
- Reads are a plain dict lookup with no lock
- Misses compute the artifact on a thread pool, outside any lock
- Only the dict insert is serialized
- Two callers missing at once may both compute; the later insert wins
- Entries survive catalog rebuilds; ids that vanish can be evicted
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Generic, TypeVar

import structlog

from lodestar.core.errors import AssetError
from lodestar.index.models import Resource

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass
class AssetCache(Generic[T]):
    """Side table of expensive per-resource artifacts.

    Attributes:
        loader: Computes the artifact for a resource. Runs on the executor.
        resolve: Maps an id to its current Resource (usually the live catalog).
        placeholder: Built from the requested id and returned, uncached, for
            unknown ids or failed loads.
    """

    loader: Callable[[Resource], T]
    resolve: Callable[[str], Resource | None]
    placeholder: Callable[[str], T]
    max_workers: int = 2

    _entries: dict[str, T] = field(default_factory=dict, init=False)
    _write_lock: threading.Lock = field(default_factory=threading.Lock, init=False)
    _executor: ThreadPoolExecutor | None = field(default=None, init=False)

    async def get_asset(self, resource_id: str) -> T:
        """Return the cached artifact, computing and storing it on a miss."""
        cached = self._entries.get(resource_id)
        if cached is not None:
            return cached

        resource = self.resolve(resource_id)
        if resource is None:
            logger.debug("asset_unknown_id", id=resource_id)
            return self.placeholder(resource_id)

        loop = asyncio.get_running_loop()
        try:
            artifact = await loop.run_in_executor(self._pool(), self.loader, resource)
        except Exception as e:
            err = AssetError.load_failed(resource_id, str(e))
            logger.warning("asset_load_failed", id=resource_id, error=str(err))
            return self.placeholder(resource_id)

        with self._write_lock:
            self._entries[resource_id] = artifact
        return artifact

    def peek(self, resource_id: str) -> T | None:
        return self._entries.get(resource_id)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._entries

    def evict_absent(self, live_ids: Iterable[str]) -> int:
        """Drop entries whose ids are no longer in the catalog."""
        live = set(live_ids)
        with self._write_lock:
            stale = [rid for rid in self._entries if rid not in live]
            for rid in stale:
                del self._entries[rid]
        if stale:
            logger.debug("assets_evicted", count=len(stale))
        return len(stale)

    def clear(self) -> None:
        with self._write_lock:
            self._entries.clear()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="lodestar-assets",
            )
        return self._executor
