"""Memoization of compiler results, aware of dependency tracking."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from .dependencies import DependencyTracker, purge_entries

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry:
    value: Any
    dependencies: tuple[str, ...]
    source_file: str


class MemoizationCache:
    """Caches computed values together with the dependencies they produced.

    A hit replays the recorded dependencies into the tracker, so results are
    attributed exactly as if they had been computed again. Disabling the
    cache must never change the generated output.
    """

    def __init__(self, tracker: DependencyTracker, enabled: bool = True):
        self.tracker = tracker
        self.enabled = enabled
        self._entries: dict[str, CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def with_cache(self, prefix: str, key: str, compute: Callable[[], T]) -> T:
        """Return the cached value for ``prefix_key`` or compute and store it."""
        if not self.enabled:
            return compute()

        cache_key = f"{prefix}_{key}"
        entry = self._entries.get(cache_key)
        if entry is not None:
            self.hits += 1
            self.tracker.merge(entry.dependencies, entry.source_file)
            return entry.value

        self.misses += 1
        self.tracker.start()
        source_file = self.tracker.current_file
        value = compute()
        dependencies = self.tracker.end()
        self._entries[cache_key] = CacheEntry(
            value=value,
            dependencies=dependencies,
            source_file=source_file,
        )
        return value

    def purge(self, file_path: str) -> int:
        removed = purge_entries(self._entries, file_path)
        if removed:
            logger.debug("Purged %d cache entries for %s", removed, file_path)
        return removed

    def clear(self):
        self._entries = {}
        self.hits = 0
        self.misses = 0
