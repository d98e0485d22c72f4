"""Least-recently-used cache with per-entry expiry.

Expiry is lazy: an expired entry is dropped when it is next looked up, or by
an explicit :meth:`KeyedTtlCache.purge_expired` call. No background sweep is
needed for correctness.
"""

import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

from ...models import CacheStats

logger = logging.getLogger(__name__)

V = TypeVar("V")

DEFAULT_MAX_SIZE = 50
DEFAULT_TTL_SECONDS = 300.0


@dataclass
class CacheEntry(Generic[V]):
    """A cached value with its timestamps (seconds on the cache's clock)."""

    value: V
    created_at: float
    expires_at: float
    last_accessed: float

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now


class KeyedTtlCache(Generic[V]):
    """Capacity-bounded LRU cache with a TTL per entry.

    Entries are kept in access order (oldest first), so the LRU victim is the
    head of the map; ``last_accessed`` mirrors that order on the entry itself.

    Args:
        max_size: Maximum number of entries
        default_ttl: TTL in seconds used when ``set`` is given none
        purge_expired_first: On overflow, drop expired entries before
            falling back to evicting the least recently used one
        clock: Monotonic time source in seconds (injectable for tests)
        name: Label used in log messages
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        purge_expired_first: bool = False,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.default_ttl = default_ttl
        self.purge_expired_first = purge_expired_first
        self.name = name
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[V]] = OrderedDict()
        self._hits = 0
        self._misses = 0

    def set(self, key: str, value: V, ttl: float | None = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""
        now = self._clock()
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            self._make_room(now)

        ttl = self.default_ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(
            value=value,
            created_at=now,
            expires_at=now + ttl,
            last_accessed=now,
        )

    def get(self, key: str) -> V | None:
        """Return the live value for ``key`` or None (expired entries are dropped)."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        now = self._clock()
        if entry.is_expired(now):
            del self._entries[key]
            self._misses += 1
            logger.debug(f"[{self.name}] expired: {key}")
            return None

        entry.last_accessed = now
        self._entries.move_to_end(key)
        self._hits += 1
        return entry.value

    def has(self, key: str) -> bool:
        """True if ``key`` holds a live entry. Does not touch stats or recency."""
        entry = self._entries.get(key)
        return entry is not None and not entry.is_expired(self._clock())

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Drop every entry and reset the hit/miss counters."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def keys(self) -> Iterator[str]:
        """Snapshot of the stored keys, least recently used first."""
        return iter(list(self._entries))

    def purge_expired(self) -> int:
        """Remove every expired entry. Returns how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"[{self.name}] purged {len(expired)} expired entries")
        return len(expired)

    @property
    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def stats(self) -> CacheStats:
        lookups = self._hits + self._misses
        return CacheStats(
            hits=self._hits,
            misses=self._misses,
            hit_ratio=(self._hits / lookups) * 100 if lookups else 0.0,
            size=len(self._entries),
            max_size=self.max_size,
        )

    def _make_room(self, now: float) -> None:
        if self.purge_expired_first and self.purge_expired():
            return
        lru_key, _ = self._entries.popitem(last=False)
        logger.debug(f"[{self.name}] evicted least recently used: {lru_key}")
