"""Concurrent, depth-limited discovery of launchable bundles.

Design:
- One task per configured root, submitted to a bounded ThreadPoolExecutor
- Every task is joined before results are merged (barrier)
- A missing or unreadable root is logged at debug and skipped
- Denylisted and hidden directories are pruned before recursing
- A recognised bundle is a leaf; the walk never descends into it
"""

from __future__ import annotations

import os
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import structlog

from lodestar.config.models import DiscoveryConfig, RootConfig
from lodestar.core.errors import ScanError
from lodestar.core.excludes import ExclusionRules
from lodestar.index.bundles import BundleReader, default_readers
from lodestar.index.models import ResourceDescriptor

logger = structlog.get_logger()


class RootStatus(Enum):
    """Outcome of scanning one root."""

    OK = "ok"
    MISSING = "missing"
    DENIED = "denied"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RootScan:
    """Descriptors found under one root."""

    root: Path
    status: RootStatus
    descriptors: tuple[ResourceDescriptor, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class ScanResult:
    """Merged output of one scan pass."""

    descriptors: tuple[ResourceDescriptor, ...] = ()
    roots: tuple[RootScan, ...] = ()
    duration_seconds: float = 0.0

    @property
    def roots_scanned(self) -> int:
        return sum(1 for r in self.roots if r.status is RootStatus.OK)

    @property
    def roots_failed(self) -> int:
        return len(self.roots) - self.roots_scanned


@dataclass
class Scanner:
    """Walks a fixed list of roots and yields resource descriptors."""

    roots: Sequence[RootConfig]
    readers: Sequence[BundleReader] = field(default_factory=default_readers)
    excludes: ExclusionRules = field(default_factory=ExclusionRules)
    max_workers: int = 4

    @classmethod
    def from_config(cls, config: DiscoveryConfig) -> Scanner:
        return cls(
            roots=list(config.roots),
            excludes=ExclusionRules(config.exclude_patterns),
            max_workers=config.max_workers,
        )

    def scan(self) -> ScanResult:
        """Scan every root concurrently and merge after all tasks finish.

        Descriptors are merged in root order, so when two roots yield the same
        id the later root wins in the catalog build.
        """
        start = time.monotonic()
        if not self.roots:
            return ScanResult()

        workers = max(1, min(self.max_workers, len(self.roots)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="lodestar-scan") as pool:
            futures = [pool.submit(self._scan_root_safely, root) for root in self.roots]
            outcomes = tuple(f.result() for f in futures)

        descriptors = tuple(d for outcome in outcomes for d in outcome.descriptors)
        result = ScanResult(
            descriptors=descriptors,
            roots=outcomes,
            duration_seconds=time.monotonic() - start,
        )
        logger.info(
            "scan_completed",
            descriptors=len(descriptors),
            roots_scanned=result.roots_scanned,
            roots_failed=result.roots_failed,
            duration=round(result.duration_seconds, 3),
        )
        return result

    def _scan_root_safely(self, root: RootConfig) -> RootScan:
        path = root.resolved_path
        try:
            return self._scan_root(path, root.effective_depth)
        except Exception as e:
            err = ScanError.root_unreadable(str(path), str(e))
            logger.warning("root_scan_failed", root=str(path), error=str(err))
            return RootScan(root=path, status=RootStatus.FAILED, error=str(err))

    def _scan_root(self, root: Path, max_depth: int) -> RootScan:
        if not root.is_dir():
            logger.debug("root_missing", root=str(root))
            return RootScan(root=root, status=RootStatus.MISSING)

        try:
            top = list(os.scandir(root))
        except PermissionError as e:
            logger.debug("root_permission_denied", root=str(root), error=str(e))
            return RootScan(root=root, status=RootStatus.DENIED, error=str(e))
        except FileNotFoundError:
            logger.debug("root_missing", root=str(root))
            return RootScan(root=root, status=RootStatus.MISSING)

        found: list[ResourceDescriptor] = []
        # (entries, depth) pairs; depth 1 means direct children of the root
        stack: list[tuple[list[os.DirEntry[str]], int]] = [(top, 1)]
        while stack:
            entries, depth = stack.pop()
            for entry in sorted(entries, key=lambda e: e.name):
                if self.excludes.is_hidden(entry.name):
                    continue
                is_dir = self._is_dir(entry)
                path = Path(entry.path)

                reader = self._reader_for(path, is_dir)
                if reader is not None:
                    found.append(reader.read(path))
                    continue

                if not is_dir or depth >= max_depth:
                    continue
                if self.excludes.should_prune_dir(entry.name):
                    logger.debug("dir_pruned", path=entry.path)
                    continue
                try:
                    children = list(os.scandir(entry.path))
                except PermissionError:
                    logger.debug("dir_permission_denied", path=entry.path)
                    continue
                except OSError as e:
                    logger.debug("dir_unreadable", path=entry.path, error=str(e))
                    continue
                stack.append((children, depth + 1))

        logger.debug("root_scanned", root=str(root), descriptors=len(found))
        return RootScan(root=root, status=RootStatus.OK, descriptors=tuple(found))

    def _reader_for(self, path: Path, is_dir: bool) -> BundleReader | None:
        for reader in self.readers:
            if reader.matches(path, is_dir=is_dir):
                return reader
        return None

    @staticmethod
    def _is_dir(entry: os.DirEntry[str]) -> bool:
        try:
            return entry.is_dir()
        except OSError:
            return False
