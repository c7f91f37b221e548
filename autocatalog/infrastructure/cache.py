"""Cross-request freshness cache for upstream reads.

Each read carries its own freshness window. Entries are immutable
snapshots, so handing the same object to concurrent requests is safe.
Disabling the cache (window 0) changes latency, never results.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Hashable

import structlog

logger = structlog.get_logger()

DEFAULT_MAX_ENTRIES = 2048


@dataclass
class CacheEntry:
    """A cached upstream value.

    Attributes:
        value: The cached snapshot.
        stored_at: Monotonic time the value was stored.
        expires_at: Monotonic time after which the value is stale.
    """

    value: Any
    stored_at: float
    expires_at: float


class FreshnessCache:
    """In-memory TTL store keyed by read name and arguments.

    Bounded: every store sweeps expired entries, and when the cache is
    still full the oldest stored entry is evicted.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        """Initialize cache.

        Args:
            clock: Monotonic time source, injectable for tests.
            max_entries: Upper bound on stored entries.
        """
        self._entries: dict[Hashable, CacheEntry] = {}
        self._clock = clock
        self._max_entries = max(max_entries, 1)

    def get(self, key: Hashable) -> CacheEntry | None:
        """Get a fresh entry.

        Args:
            key: Cache key.

        Returns:
            Entry if present and within its window, None otherwise.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry

    def store(self, key: Hashable, value: Any, freshness: int | None) -> None:
        """Store a value for ``freshness`` seconds.

        Non-positive or missing windows are not cached.
        """
        if not freshness or freshness <= 0:
            return
        now = self._clock()
        self._entries.pop(key, None)
        self._purge_expired(now)
        while len(self._entries) >= self._max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("Evicted cache entry", key=str(oldest))
        self._entries[key] = CacheEntry(
            value=value, stored_at=now, expires_at=now + freshness
        )
        logger.debug("Cached upstream read", key=str(key), freshness=freshness)

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]

    def clear(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
