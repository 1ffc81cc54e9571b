"""Root watcher using watchfiles to trigger rescans on installs and removals.

Design:
- Python walks each root to its scan depth, collecting directories that can
  hold bundles (bundles themselves and denylisted dirs are not descended into)
- Passes them to awatch with recursive=False (one watch per dir)
- Restarts awatch when a new watchable directory appears
- Buffers changes with a sliding-window debounce and delivers one batch
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import structlog
from watchfiles import Change, awatch

from lodestar.config.models import RootConfig
from lodestar.core.excludes import ExclusionRules
from lodestar.index.bundles import APP_EXTENSION

logger = structlog.get_logger()

DEBOUNCE_WINDOW_SEC = 0.5  # Sliding window for batching rapid changes
MAX_DEBOUNCE_WAIT_SEC = 2.0  # Maximum wait before forcing flush


def _collect_watch_dirs(roots: Sequence[RootConfig], excludes: ExclusionRules) -> list[Path]:
    """Directories whose direct children may be bundles, for every existing root."""
    dirs: list[Path] = []
    for root in roots:
        base = root.resolved_path
        if not base.is_dir():
            continue
        dirs.append(base)
        # depth 1 means only the root itself holds bundles
        max_depth = root.effective_depth
        stack: list[tuple[Path, int]] = [(base, 1)]
        while stack:
            current, depth = stack.pop()
            if depth >= max_depth:
                continue
            try:
                entries = list(os.scandir(current))
            except OSError:
                continue
            for entry in entries:
                try:
                    is_dir = entry.is_dir()
                except OSError:
                    continue
                if not is_dir or excludes.should_skip(entry.name):
                    continue
                if entry.name.lower().endswith(APP_EXTENSION):
                    continue
                child = Path(entry.path)
                dirs.append(child)
                stack.append((child, depth + 1))
    return dirs


@dataclass
class RootWatcher:
    """
    Async watcher over the scan roots with sliding-window debouncing.

    ``on_change`` receives the batched changed paths; the usual wiring is
    ``lambda _paths: coordinator.request_rescan()``. A batch is delivered once
    no change has arrived for ``debounce_window`` seconds, or at the latest
    ``max_debounce_wait`` seconds after the first change of the batch.
    """

    roots: Sequence[RootConfig]
    on_change: Callable[[list[Path]], None]
    excludes: ExclusionRules = field(default_factory=ExclusionRules)
    debounce_window: float = DEBOUNCE_WINDOW_SEC
    max_debounce_wait: float = MAX_DEBOUNCE_WAIT_SEC

    _watch_task: asyncio.Task[None] | None = field(default=None, init=False)
    _debounce_task: asyncio.Task[None] | None = field(default=None, init=False)
    _stop_event: asyncio.Event = field(default_factory=asyncio.Event, init=False)
    _wake: asyncio.Event = field(default_factory=asyncio.Event, init=False)
    _pending_changes: set[Path] = field(default_factory=set, init=False)
    _last_change_time: float = field(default=0.0, init=False)
    _first_change_time: float = field(default=0.0, init=False)
    _watched_dirs: set[Path] = field(default_factory=set, init=False)

    async def start(self) -> None:
        if self._watch_task is not None:
            return
        self._stop_event.clear()
        self._watch_task = asyncio.create_task(self._watch_loop())
        self._debounce_task = asyncio.create_task(self._debounce_loop())
        logger.info(
            "root_watcher_started",
            roots=len(self.roots),
            debounce_window=self.debounce_window,
        )

    async def stop(self) -> None:
        """Stop watching. Changes still waiting in the debounce buffer are delivered."""
        self._stop_event.set()
        self._wake.set()

        for task in (self._debounce_task, self._watch_task):
            if task is None or task.done():
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError, asyncio.TimeoutError):
                await asyncio.wait_for(task, timeout=2.0)
        self._debounce_task = None
        self._watch_task = None

        self._flush_pending()
        logger.info("root_watcher_stopped")

    def _queue_change(self, path: Path) -> None:
        now = time.monotonic()
        if not self._pending_changes:
            self._first_change_time = now
        self._pending_changes.add(path)
        self._last_change_time = now
        self._wake.set()

    def _flush_deadline(self) -> float | None:
        """Monotonic time at which the pending batch is due, or None if empty."""
        if not self._pending_changes:
            return None
        return min(
            self._last_change_time + self.debounce_window,
            self._first_change_time + self.max_debounce_wait,
        )

    def _should_flush(self) -> bool:
        deadline = self._flush_deadline()
        return deadline is not None and time.monotonic() >= deadline

    def _flush_pending(self) -> None:
        if not self._pending_changes:
            return
        batch = sorted(self._pending_changes)
        self._pending_changes.clear()
        self._first_change_time = self._last_change_time = 0.0
        logger.info("changes_detected", count=len(batch))
        try:
            self.on_change(batch)
        except Exception as e:
            logger.error("change_callback_failed", error=str(e))

    async def _debounce_loop(self) -> None:
        while not self._stop_event.is_set():
            deadline = self._flush_deadline()
            if deadline is not None and time.monotonic() >= deadline:
                self._flush_pending()
                continue
            self._wake.clear()
            timeout = None if deadline is None else deadline - time.monotonic()
            # a new change moves the deadline, so re-evaluate on wake
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._wake.wait(), timeout=timeout)

    def _handle_changes(self, changes: set[tuple[Change, str]]) -> bool:
        """Queue relevant changes. True when a new directory needs watching."""
        restart = False
        for change, raw in changes:
            path = Path(raw)
            if self.excludes.should_skip(path.name):
                logger.debug("path_ignored", path=raw)
                continue
            self._queue_change(path)
            if change != Change.added or path in self._watched_dirs:
                continue
            if path.is_dir() and not path.name.lower().endswith(APP_EXTENSION):
                logger.info("new_directory_detected", path=raw)
                restart = True
        return restart

    async def _watch_once(self, watch_dirs: list[Path]) -> bool:
        """Run awatch until stopped or a restart is needed. True means restart."""
        async for changes in awatch(
            *watch_dirs,
            recursive=False,
            step=500,
            rust_timeout=10_000,
            stop_event=self._stop_event,
            ignore_permission_denied=True,
        ):
            if self._handle_changes(changes):
                return True
        return False

    async def _watch_loop(self) -> None:
        while not self._stop_event.is_set():
            watch_dirs = _collect_watch_dirs(self.roots, self.excludes)
            self._watched_dirs = set(watch_dirs)
            if not watch_dirs:
                logger.warning("no_watchable_roots")
                return
            logger.info("watch_dirs_collected", count=len(watch_dirs))
            try:
                restart = await self._watch_once(watch_dirs)
            except Exception as e:
                if self._stop_event.is_set():
                    return
                logger.error("watcher_error", error=str(e))
                await asyncio.sleep(1.0)
                continue
            if not restart:
                return
            logger.info("watcher_restart_requested", reason="new_directories")
