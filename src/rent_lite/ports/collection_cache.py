from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from rent_lite.domain.listing import Listing


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Unfiltered raw collection the source returned for one query key."""

    items: tuple[Listing, ...]
    fetched_at: float
    total_count: int


class CollectionCache(ABC):
    """
    Port for the raw collection cache shared by listing feeds.

    Entries are replaced wholesale, never patched: a cache always holds the
    full superset retrieved for a key, never a page of it.

    Contract:
        - get() treats entries older than the TTL as absent
        - peek() ignores the TTL
        - Every operation completes without suspending, so no locking is
          needed under a single-threaded event loop
    """

    @abstractmethod
    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key`` if present and fresh."""
        ...

    @abstractmethod
    def peek(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key`` regardless of its age."""
        ...

    @abstractmethod
    def put(self, key: str, entry: CacheEntry) -> None: ...

    @abstractmethod
    def invalidate(self, key: str) -> None: ...

    @abstractmethod
    def now(self) -> float:
        """Current reading of the clock used for fetched_at and expiry."""
        ...
