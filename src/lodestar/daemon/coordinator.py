"""Discovery coordinator: owns the live Catalog and serializes rescans."""

from __future__ import annotations

import asyncio
import contextlib
import contextvars
import functools
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

import structlog

from lodestar.core.errors import InternalError, LodestarError, ScanError
from lodestar.core.logging import clear_scan_id, set_scan_id
from lodestar.index.builder import build_catalog
from lodestar.index.models import BuildStats, Catalog, ResourceDescriptor
from lodestar.index.scanner import ScanResult

logger = structlog.get_logger()


class CoordinatorState(Enum):
    """Discovery coordinator state."""

    IDLE = "idle"
    SCANNING = "scanning"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass
class CoordinatorStatus:
    """Current coordinator status."""

    state: CoordinatorState
    generation: int
    resource_count: int
    last_stats: BuildStats | None = None
    last_error: str | None = None


class ScanSource(Protocol):
    def scan(self) -> ScanResult: ...


CatalogBuilder = Callable[..., Catalog]
SwapListener = Callable[[Catalog], None]


@dataclass
class DiscoveryCoordinator:
    """
    Keeps the current Catalog snapshot and refreshes it in the background.

    Design:
    - Scan + build run on a single-worker ThreadPoolExecutor
    - At most one scan is in flight; requests made meanwhile are dropped
    - A successful build replaces the snapshot reference in one assignment
    - Readers keep whatever snapshot they already hold
    - A failed build keeps serving the previous snapshot
    - A periodic task requests a rescan every ``refresh_interval`` seconds
    """

    scanner: ScanSource
    refresh_interval: float = 60.0
    builder: CatalogBuilder = build_catalog

    _state: CoordinatorState = field(default=CoordinatorState.IDLE, init=False)
    _state_lock: threading.Lock = field(default_factory=threading.Lock, init=False)
    _catalog: Catalog = field(default_factory=Catalog.empty, init=False)
    _executor: ThreadPoolExecutor | None = field(default=None, init=False)
    _loop: asyncio.AbstractEventLoop | None = field(default=None, init=False)
    _timer_task: asyncio.Task[None] | None = field(default=None, init=False)
    _scan_tasks: set[asyncio.Task[bool]] = field(default_factory=set, init=False)
    _last_stats: BuildStats | None = field(default=None, init=False)
    _last_error: str | None = field(default=None, init=False)
    _listeners: list[SwapListener] = field(default_factory=list, init=False)

    @property
    def catalog(self) -> Catalog:
        """The last successfully built snapshot. Never blocks."""
        return self._catalog

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def status(self) -> CoordinatorStatus:
        catalog = self._catalog
        return CoordinatorStatus(
            state=self._state,
            generation=catalog.generation,
            resource_count=len(catalog),
            last_stats=self._last_stats,
            last_error=self._last_error,
        )

    def add_swap_listener(self, listener: SwapListener) -> None:
        """Call ``listener(new_catalog)`` after every snapshot swap."""
        self._listeners.append(listener)

    async def start(self, *, initial_scan: bool = True) -> None:
        """Start periodic refresh and optionally kick off the first scan."""
        if self._loop is not None:
            return
        self._loop = asyncio.get_running_loop()
        with self._state_lock:
            self._state = CoordinatorState.IDLE
        self._timer_task = self._loop.create_task(self._refresh_loop())
        logger.info("discovery_coordinator_started", refresh_interval=self.refresh_interval)
        if initial_scan:
            self.request_rescan()

    async def stop(self) -> None:
        """Stop the refresh timer and wait for an in-flight scan to finish."""
        with self._state_lock:
            if self._state is CoordinatorState.STOPPED:
                return
            self._state = CoordinatorState.STOPPING

        if self._timer_task is not None and not self._timer_task.done():
            self._timer_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._timer_task
        self._timer_task = None

        if self._scan_tasks:
            await asyncio.gather(*self._scan_tasks, return_exceptions=True)

        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

        with self._state_lock:
            self._state = CoordinatorState.STOPPED
        self._loop = None
        logger.info("discovery_coordinator_stopped")

    def request_rescan(self) -> None:
        """Fire-and-forget rescan trigger. Safe to call from any thread."""
        loop = self._loop
        if loop is None:
            logger.debug("rescan_ignored", reason="not_started")
            return
        if not self._try_begin_scan():
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._spawn_scan()
        else:
            loop.call_soon_threadsafe(self._spawn_scan)

    async def rescan(self) -> bool:
        """Run one scan pass now.

        Returns False when the request was coalesced into a scan already in
        flight or the build failed; True when a new snapshot was published.
        """
        if not self._try_begin_scan():
            return False
        return await self._run_scan()

    async def wait_for_idle(self) -> None:
        """Wait until scans spawned by request_rescan() have finished."""
        while self._scan_tasks:
            await asyncio.gather(*list(self._scan_tasks), return_exceptions=True)

    def _try_begin_scan(self) -> bool:
        with self._state_lock:
            if self._state is CoordinatorState.SCANNING:
                logger.debug("rescan_coalesced")
                return False
            if self._state in (CoordinatorState.STOPPING, CoordinatorState.STOPPED):
                logger.debug("rescan_ignored", reason=self._state.value)
                return False
            self._state = CoordinatorState.SCANNING
            return True

    def _spawn_scan(self) -> None:
        with self._state_lock:
            # stop() may have run between request_rescan() and this callback
            if self._state is not CoordinatorState.SCANNING:
                logger.debug("rescan_dropped", reason=self._state.value)
                return
        task = asyncio.get_running_loop().create_task(self._run_scan())
        self._scan_tasks.add(task)
        task.add_done_callback(self._scan_tasks.discard)

    async def _run_scan(self) -> bool:
        set_scan_id()
        generation = self._catalog.generation + 1
        logger.info("scan_started", generation=generation)
        published = False
        try:
            loop = asyncio.get_running_loop()
            ctx = contextvars.copy_context()
            catalog = await loop.run_in_executor(
                self._pool(),
                functools.partial(ctx.run, self._scan_and_build, generation),
            )
        except Exception as e:
            err = e
            if not isinstance(e, LodestarError):
                err = InternalError.unexpected(str(e), generation=generation)
            self._last_error = str(err)
            logger.warning(
                "catalog_build_failed",
                error=str(err),
                kept_generation=self._catalog.generation,
            )
        else:
            self._catalog = catalog
            self._last_stats = catalog.stats
            self._last_error = None
            published = True
            logger.info(
                "catalog_swapped",
                generation=catalog.generation,
                resources=len(catalog),
            )
        finally:
            with self._state_lock:
                if self._state is CoordinatorState.SCANNING:
                    self._state = CoordinatorState.IDLE
            clear_scan_id()

        if published:
            self._notify(self._catalog)
        return published

    def _scan_and_build(self, generation: int) -> Catalog:
        """Synchronous scan + build - runs in the thread pool."""
        result = self.scanner.scan()
        if result.roots_scanned == 0:
            raise ScanError.no_readable_roots([str(r.root) for r in result.roots])
        descriptors: tuple[ResourceDescriptor, ...] = result.descriptors
        return self.builder(descriptors, generation=generation)

    def _notify(self, catalog: Catalog) -> None:
        for listener in self._listeners:
            try:
                listener(catalog)
            except Exception as e:
                logger.warning("swap_listener_failed", error=str(e))

    async def _refresh_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.refresh_interval)
                logger.debug("periodic_rescan_requested")
                self.request_rescan()
        except asyncio.CancelledError:
            pass

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1,
                thread_name_prefix="lodestar-discovery",
            )
        return self._executor
