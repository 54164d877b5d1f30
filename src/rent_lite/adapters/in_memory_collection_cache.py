from __future__ import annotations

import logging
import time
from typing import Callable

from rent_lite.ports.collection_cache import CacheEntry, CollectionCache

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


class InMemoryCollectionCache(CollectionCache):
    """
    Process-local raw collection cache.

    - Fixed TTL, evaluated lazily on read (no background sweep)
    - Expired entries are evicted by the read that discovers them
    - Clock is injectable so tests can move time without sleeping
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")

        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() - entry.fetched_at >= self._ttl:
            # expired
            del self._entries[key]
            logger.debug("Cache entry expired", extra={"cache_key": key})
            return None

        return entry

    def peek(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def put(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = entry

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def now(self) -> float:
        return self._clock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
