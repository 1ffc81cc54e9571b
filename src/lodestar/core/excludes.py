"""Directory exclusion rules for resource discovery.

Tier 0 (HARDCODED_SUBSTRINGS): Never traversed, not user-configurable.
    - VCS internals, trash, caches, logs and temp directories
    - Matched as case-insensitive substrings of the directory name

Tier 1 (extra patterns): Supplied through ``DiscoveryConfig.exclude_patterns``
    and matched the same way.

Hidden entries (leading dot) are skipped independently of either tier.
"""

from __future__ import annotations

from collections.abc import Iterable

# =============================================================================
# Tier 0: HARDCODED - Never traverse, not user-configurable
# =============================================================================

HARDCODED_SUBSTRINGS: frozenset[str] = frozenset(
    (
        # VCS internals
        ".git",
        ".svn",
        ".hg",
        # Trash
        "trash",
        # Caches
        "cache",
        # Logs
        "log",
        # Scratch space
        "tmp",
        "temp",
    )
)


class ExclusionRules:
    """Decides which directories the scanner and watcher must prune."""

    __slots__ = ("_substrings",)

    def __init__(self, extra_patterns: Iterable[str] = ()) -> None:
        extra = {p.strip().lower() for p in extra_patterns if p.strip()}
        self._substrings: tuple[str, ...] = tuple(sorted(HARDCODED_SUBSTRINGS | extra))

    @property
    def substrings(self) -> tuple[str, ...]:
        return self._substrings

    def should_prune_dir(self, name: str) -> bool:
        """True when a directory named ``name`` must not be recursed into."""
        lowered = name.lower()
        return any(s in lowered for s in self._substrings)

    @staticmethod
    def is_hidden(name: str) -> bool:
        return name.startswith(".")

    def should_skip(self, name: str) -> bool:
        """True for hidden entries and denylisted directory names."""
        return self.is_hidden(name) or self.should_prune_dir(name)
