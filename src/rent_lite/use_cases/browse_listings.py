"""Listing feed: cached, paginated and supersession-safe listing browsing.

One ListingFeed backs one mounted consumer (a results list). Feeds share a
CollectionCache holding the raw, unfiltered collection per query key; each
feed filters and slices that superset into pages on its own.

Concurrency (single event loop):
- Suspension points: the source fetch and the optional debounce wait
- Every page-0 request mints a RequestToken and supersedes the previous one:
  its task is cancelled and, should it still complete, its result is dropped
- Last writer wins by issuance order, never by completion order
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from rent_lite.domain.filters import FilterPipeline, rental_filter_pipeline
from rent_lite.domain.listing import DEFAULT_PAGE_SIZE, Listing, PageState, QueryParams
from rent_lite.domain.query_key import derive_key
from rent_lite.ports.collection_cache import CacheEntry, CollectionCache
from rent_lite.ports.listing_source import ListingSource

logger = logging.getLogger(__name__)

SOURCE_UNAVAILABLE_MESSAGE = (
    "Failed to load properties. Please check your connection and try again."
)


class FeedStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"  # fallback results are published alongside the error


@dataclass(frozen=True, slots=True, eq=False)
class RequestToken:
    """Marks one page-0 fetch. Compared by identity, never reused."""

    generation: int


@dataclass(frozen=True, slots=True)
class FeedSnapshot:
    items: tuple[Listing, ...]
    loading: bool
    is_refreshing: bool
    has_more: bool
    error: str | None
    total_count: int
    status: FeedStatus


class ListingFeed:
    """
    Fetch/pagination coordinator for one consumer.

    Responsibilities:
    - Serve page 0 from a fresh cache entry without touching the source
    - Fetch the raw collection on a miss, falling back to a static
      collection (with a soft error) when the source fails
    - Drop results of superseded requests
    - Grow the published list page by page from the already-held raw set
    """

    def __init__(
        self,
        source: ListingSource,
        cache: CollectionCache,
        fallback: Sequence[Listing] = (),
        pipeline: FilterPipeline | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        fetch_timeout: float | None = None,
        debounce_seconds: float = 0.0,
    ) -> None:
        """
        Initialize the feed with its collaborators.

        Args:
            source: Provider of the raw listing collection
            cache: Raw collection cache, usually shared between feeds
            fallback: Listings served when the source fails
            pipeline: Filter rules; defaults to the rental filter bar's rules
            page_size: Listings per page
            fetch_timeout: Seconds to wait for the source before falling back;
                None waits indefinitely
            debounce_seconds: Quiet period on_params_change waits for before
                loading; a newer call during the wait replaces it

        Raises:
            PagingValidationError: If page_size is outside the allowed range
            ValueError: If fetch_timeout is not positive or debounce_seconds
                is negative
        """
        page = PageState.initial(page_size)
        page.validate()
        if fetch_timeout is not None and fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be > 0 or None")
        if debounce_seconds < 0:
            raise ValueError("debounce_seconds must be >= 0")

        self._source = source
        self._cache = cache
        self._fallback = tuple(fallback)
        self._pipeline = pipeline or rental_filter_pipeline()
        self._fetch_timeout = fetch_timeout
        self._debounce_seconds = debounce_seconds

        self._generations = itertools.count(1)
        self._current: RequestToken | None = None
        self._inflight: asyncio.Task[list[Listing]] | None = None
        self._pending_change: RequestToken | None = None

        self._params = QueryParams()
        self._key = derive_key(self._params)
        self._page = page
        self._raw: tuple[Listing, ...] = ()
        self._items: list[Listing] = []
        self._total_count = 0
        self._status = FeedStatus.IDLE
        self._is_refreshing = False
        self._error: str | None = None

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------

    @property
    def items(self) -> tuple[Listing, ...]:
        return tuple(self._items)

    @property
    def loading(self) -> bool:
        return self._status is FeedStatus.LOADING

    @property
    def is_refreshing(self) -> bool:
        return self._is_refreshing

    @property
    def has_more(self) -> bool:
        return self._page.has_more

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def total_count(self) -> int:
        return self._total_count

    @property
    def status(self) -> FeedStatus:
        return self._status

    @property
    def page(self) -> PageState:
        return self._page

    @property
    def params(self) -> QueryParams:
        return self._params

    @property
    def key(self) -> str:
        return self._key

    def snapshot(self) -> FeedSnapshot:
        return FeedSnapshot(
            items=self.items,
            loading=self.loading,
            is_refreshing=self._is_refreshing,
            has_more=self.has_more,
            error=self._error,
            total_count=self._total_count,
            status=self._status,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def initialize(self, params: QueryParams) -> None:
        await self._load_first_page(params, force=False)

    async def on_params_change(self, params: QueryParams) -> None:
        """
        Reload page 0 for new search parameters.

        With a debounce configured, a burst of calls (e.g. keystrokes) loads
        only the last one; earlier calls return without touching state.
        """
        if self._debounce_seconds:
            ticket = self._pending_change = RequestToken(next(self._generations))
            await asyncio.sleep(self._debounce_seconds)
            if self._pending_change is not ticket:
                logger.debug(
                    "Debounced params change dropped",
                    extra={"generation": ticket.generation},
                )
                return
        await self._load_first_page(params, force=False)

    async def refresh(self) -> None:
        """Drop the cached raw set for the current query and fetch it again."""
        self._is_refreshing = True
        self._cache.invalidate(self._key)
        await self._load_first_page(self._params, force=True)

    async def load_more(self) -> None:
        """
        Append the next page to the published items.

        No-op before the first load, while a fetch is in flight, or when
        everything is already shown. Never calls the source: the next window
        is sliced from the raw set already held for the current key.
        """
        if self._status is FeedStatus.IDLE or self.loading or not self._page.has_more:
            return

        next_page = self._page.current_page + 1
        self._status = FeedStatus.LOADING

        # A feed showing the fallback keeps paging the fallback
        entry = self._cache.peek(self._key) if self._error is None else None
        raw = entry.items if entry is not None else self._raw
        filtered = self._pipeline.apply(raw, self._params)

        start = self._page.window_end
        self._page = self._page.at(next_page, len(filtered))
        self._items.extend(filtered[start : self._page.window_end])
        self._total_count = len(filtered)
        self._settle()

        logger.debug(
            "Appended page",
            extra={"cache_key": self._key, "page": next_page, "shown": len(self._items)},
        )

    def close(self) -> None:
        """Unmount: abort the in-flight fetch and ignore whatever it returns."""
        self._supersede()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load_first_page(self, params: QueryParams, *, force: bool) -> None:
        self._supersede()

        self._params = params
        self._key = key = derive_key(params)
        self._page = PageState.initial(self._page.page_size)
        self._status = FeedStatus.LOADING
        self._error = None

        if not force:
            entry = self._cache.get(key)
            if entry is not None:
                logger.debug("Cache hit", extra={"cache_key": key})
                self._publish_first_page(entry.items, error=None)
                return

        token = RequestToken(next(self._generations))
        self._current = token
        self._inflight = asyncio.create_task(self._fetch_raw())

        try:
            raw = await self._inflight
        except asyncio.CancelledError:
            if self._current is not token:
                logger.debug(
                    "Superseded request cancelled",
                    extra={"cache_key": key, "generation": token.generation},
                )
                return
            # Cancelled by our own caller, not by a newer request
            self._supersede()
            self._status = FeedStatus.IDLE
            self._is_refreshing = False
            raise
        except Exception as exc:
            if self._current is not token:
                return
            self._finish()

            logger.warning(
                "Listing source unavailable, serving fallback",
                extra={
                    "cache_key": key,
                    "error_type": type(exc).__name__,
                    "error_message": str(exc),
                    "fallback_count": len(self._fallback),
                },
            )

            # The fallback never enters the cache; paging reads it from self._raw
            self._publish_first_page(self._fallback, error=SOURCE_UNAVAILABLE_MESSAGE)
            return

        items = tuple(raw)
        self._cache.put(
            key,
            CacheEntry(items=items, fetched_at=self._cache.now(), total_count=len(items)),
        )

        if self._current is not token:
            logger.debug(
                "Discarding superseded result",
                extra={"cache_key": key, "generation": token.generation},
            )
            return
        self._finish()

        logger.info(
            "Fetched raw collection",
            extra={"cache_key": key, "generation": token.generation, "count": len(items)},
        )
        self._publish_first_page(items, error=None)

    async def _fetch_raw(self) -> list[Listing]:
        if self._fetch_timeout is None:
            return await self._source.fetch_all()
        return await asyncio.wait_for(self._source.fetch_all(), self._fetch_timeout)

    def _publish_first_page(self, raw: Sequence[Listing], error: str | None) -> None:
        filtered = self._pipeline.apply(raw, self._params)

        self._raw = tuple(raw)
        self._items = filtered[: self._page.page_size]
        self._page = self._page.at(0, len(filtered))
        self._total_count = len(filtered)
        self._error = error
        self._is_refreshing = False
        self._settle()

    def _settle(self) -> None:
        self._status = FeedStatus.ERROR if self._error else FeedStatus.READY

    def _supersede(self) -> None:
        self._current = None
        self._pending_change = None
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        self._inflight = None

    def _finish(self) -> None:
        self._current = None
        self._inflight = None
