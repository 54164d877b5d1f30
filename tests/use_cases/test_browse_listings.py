"""
Test suite for the ListingFeed coordinator.

Sections:
- Page 0: cache hits, misses, TTL expiry, refresh
- Paging: append-only growth of the published list
- Fallback: substitute results with a soft error, never cached
- Debounce: bursts of params changes load only the last one
- Supersession: last request issued wins, regardless of completion order
"""

from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from rent_lite.adapters.in_memory_collection_cache import InMemoryCollectionCache
from rent_lite.adapters.in_memory_listing_source import InMemoryListingSource
from rent_lite.domain.listing import Listing, PagingValidationError, QueryParams
from rent_lite.domain.query_key import derive_key
from rent_lite.ports.listing_source import ListingSource
from rent_lite.use_cases.browse_listings import (
    SOURCE_UNAVAILABLE_MESSAGE,
    FeedStatus,
    ListingFeed,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class ScriptedListingSource(ListingSource):
    """Each fetch takes the next (delay, listings) step of the script."""

    def __init__(self, steps: list[tuple[float, list[Listing]]]) -> None:
        self._steps = list(steps)
        self.fetch_count = 0
        self.cancelled = 0

    async def fetch_all(self) -> list[Listing]:
        delay, listings = self._steps[self.fetch_count]
        self.fetch_count += 1
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        return list(listings)


class StubbornListingSource(ListingSource):
    """Ignores cancellation: the transport keeps going and still returns data."""

    def __init__(self, steps: list[tuple[float, list[Listing]]], linger: float) -> None:
        self._steps = list(steps)
        self._linger = linger
        self.fetch_count = 0
        self.completed_after_cancel = 0

    async def fetch_all(self) -> list[Listing]:
        delay, listings = self._steps[self.fetch_count]
        self.fetch_count += 1
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            await asyncio.sleep(self._linger)
            self.completed_after_cancel += 1
        return list(listings)


class HangingListingSource(ListingSource):
    async def fetch_all(self) -> list[Listing]:
        await asyncio.Event().wait()
        return []


def make_listings(count: int, location: str = "Whitefield, Karnataka", prefix: str = "") -> list[Listing]:
    return [
        Listing(
            id=f"{prefix}{i}",
            title=f"Listing {i}",
            location=location,
            rent=Decimal("20000.00"),
            room_type="1BHK",
        )
        for i in range(count)
    ]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> InMemoryCollectionCache:
    return InMemoryCollectionCache(ttl_seconds=300, clock=clock)


@pytest.fixture()
def fallback() -> list[Listing]:
    return [
        Listing(
            id="fb-1",
            title="Fallback 1BHK",
            location="Koramangala, Karnataka",
            rent=Decimal("22000.00"),
            room_type="1BHK",
        ),
        Listing(
            id="fb-2",
            title="Fallback studio",
            location="Madhapur, Telangana",
            rent=Decimal("16000.00"),
            room_type="1RK",
        ),
    ]


def ids(feed: ListingFeed) -> list[str]:
    return [item.id for item in feed.items]


# ==============================================================================
# Construction
# ==============================================================================


def test_new_feed_is_idle(cache: InMemoryCollectionCache) -> None:
    feed = ListingFeed(source=InMemoryListingSource([]), cache=cache)

    assert feed.status is FeedStatus.IDLE
    assert feed.items == ()
    assert feed.loading is False
    assert feed.error is None


@pytest.mark.parametrize("page_size", [0, 201])
def test_rejects_invalid_page_size(cache: InMemoryCollectionCache, page_size: int) -> None:
    with pytest.raises(PagingValidationError):
        ListingFeed(source=InMemoryListingSource([]), cache=cache, page_size=page_size)


def test_rejects_non_positive_timeout(cache: InMemoryCollectionCache) -> None:
    with pytest.raises(ValueError):
        ListingFeed(source=InMemoryListingSource([]), cache=cache, fetch_timeout=0)


# ==============================================================================
# Page 0
# ==============================================================================


@pytest.mark.asyncio
async def test_koramangala_scenario(cache: InMemoryCollectionCache) -> None:
    raw = (
        make_listings(2, location="Koramangala, Karnataka", prefix="k")
        + make_listings(4, location="Indiranagar, Karnataka", prefix="i")
    )
    feed = ListingFeed(source=InMemoryListingSource(raw), cache=cache, page_size=20)

    await feed.initialize(QueryParams(location_text="Koramangala", filters={}))

    assert feed.total_count == 2
    assert len(feed.items) == 2
    assert feed.has_more is False
    assert feed.status is FeedStatus.READY
    assert feed.loading is False


@pytest.mark.asyncio
async def test_miss_stores_unfiltered_raw_collection(cache: InMemoryCollectionCache) -> None:
    raw = make_listings(3, location="Koramangala") + make_listings(2, location="HSR", prefix="h")
    feed = ListingFeed(source=InMemoryListingSource(raw), cache=cache)
    params = QueryParams(location_text="HSR")

    await feed.initialize(params)

    entry = cache.get(derive_key(params))
    assert entry is not None
    assert entry.items == tuple(raw)
    assert entry.total_count == 5
    assert ids(feed) == ["h0", "h1"]


@pytest.mark.asyncio
async def test_cache_hit_avoids_fetch(cache: InMemoryCollectionCache) -> None:
    source = InMemoryListingSource(make_listings(5))
    params = QueryParams(filters={"room_type": ["1BHK"]})

    await ListingFeed(source=source, cache=cache).initialize(params)
    second = ListingFeed(source=source, cache=cache)
    await second.initialize(params)

    assert source.fetch_count == 1
    assert len(second.items) == 5
    assert second.status is FeedStatus.READY


@pytest.mark.asyncio
async def test_cache_hit_with_reordered_selections(cache: InMemoryCollectionCache) -> None:
    source = InMemoryListingSource(make_listings(3))
    feed = ListingFeed(source=source, cache=cache)

    await feed.initialize(QueryParams(filters={"room_type": ["1BHK", "2BHK"]}))
    await feed.on_params_change(QueryParams(filters={"room_type": ["2BHK", "1BHK"]}))

    assert source.fetch_count == 1


@pytest.mark.asyncio
async def test_ttl_expiry_triggers_new_fetch(
    cache: InMemoryCollectionCache, clock: FakeClock
) -> None:
    source = InMemoryListingSource(make_listings(3))
    feed = ListingFeed(source=source, cache=cache)
    params = QueryParams()

    await feed.initialize(params)
    clock.now += 299
    await feed.on_params_change(params)
    assert source.fetch_count == 1

    clock.now += 1
    await feed.on_params_change(params)
    assert source.fetch_count == 2


@pytest.mark.asyncio
async def test_refresh_bypasses_fresh_cache(cache: InMemoryCollectionCache) -> None:
    source = InMemoryListingSource(make_listings(3))
    feed = ListingFeed(source=source, cache=cache)

    await feed.initialize(QueryParams())
    await feed.refresh()

    assert source.fetch_count == 2
    assert feed.is_refreshing is False
    assert len(feed.items) == 3


@pytest.mark.asyncio
async def test_refresh_flag_set_while_fetching(cache: InMemoryCollectionCache) -> None:
    source = InMemoryListingSource(make_listings(3))
    feed = ListingFeed(source=source, cache=cache)
    await feed.initialize(QueryParams())
    source.delay_seconds = 0.05

    task = asyncio.create_task(feed.refresh())
    await asyncio.sleep(0.01)

    assert feed.is_refreshing is True
    assert feed.loading is True
    await task
    assert feed.is_refreshing is False
    assert feed.loading is False


@pytest.mark.asyncio
async def test_params_change_resets_to_first_page(cache: InMemoryCollectionCache) -> None:
    feed = ListingFeed(
        source=InMemoryListingSource(make_listings(45)), cache=cache, page_size=20
    )
    await feed.initialize(QueryParams())
    await feed.load_more()
    assert len(feed.items) == 40

    await feed.on_params_change(QueryParams(location_text="whitefield"))

    assert feed.page.current_page == 0
    assert len(feed.items) == 20
    assert feed.has_more is True


@pytest.mark.asyncio
async def test_empty_result_is_not_an_error(cache: InMemoryCollectionCache) -> None:
    feed = ListingFeed(source=InMemoryListingSource(make_listings(3)), cache=cache)

    await feed.initialize(QueryParams(location_text="Pune"))

    assert feed.items == ()
    assert feed.has_more is False
    assert feed.error is None
    assert feed.status is FeedStatus.READY


# ==============================================================================
# Paging
# ==============================================================================


@pytest.mark.asyncio
async def test_append_correctness(cache: InMemoryCollectionCache) -> None:
    source = InMemoryListingSource(make_listings(45))
    feed = ListingFeed(source=source, cache=cache, page_size=20)

    await feed.initialize(QueryParams())
    sizes = [(len(feed.items), feed.has_more)]
    await feed.load_more()
    sizes.append((len(feed.items), feed.has_more))
    await feed.load_more()
    sizes.append((len(feed.items), feed.has_more))

    assert sizes == [(20, True), (40, True), (45, False)]
    assert source.fetch_count == 1
    assert feed.total_count == 45


@pytest.mark.asyncio
async def test_append_keeps_already_published_items(cache: InMemoryCollectionCache) -> None:
    feed = ListingFeed(
        source=InMemoryListingSource(make_listings(45)), cache=cache, page_size=20
    )
    await feed.initialize(QueryParams())
    first_page = feed.items

    await feed.load_more()

    assert feed.items[:20] == first_page
    assert [item.id for item in feed.items[20:]] == [str(i) for i in range(20, 40)]


@pytest.mark.asyncio
async def test_load_more_without_more_is_noop(cache: InMemoryCollectionCache) -> None:
    feed = ListingFeed(source=InMemoryListingSource(make_listings(5)), cache=cache)
    await feed.initialize(QueryParams())
    before = feed.snapshot()

    await feed.load_more()

    assert feed.snapshot() == before
    assert feed.page.current_page == 0


@pytest.mark.asyncio
async def test_load_more_before_initialize_is_noop(cache: InMemoryCollectionCache) -> None:
    source = InMemoryListingSource(make_listings(5))
    feed = ListingFeed(source=source, cache=cache)

    await feed.load_more()

    assert feed.items == ()
    assert feed.status is FeedStatus.IDLE
    assert source.fetch_count == 0


@pytest.mark.asyncio
async def test_load_more_while_loading_is_noop(cache: InMemoryCollectionCache) -> None:
    source = InMemoryListingSource(make_listings(45), delay_seconds=0.05)
    feed = ListingFeed(source=source, cache=cache, page_size=20)

    task = asyncio.create_task(feed.initialize(QueryParams()))
    await asyncio.sleep(0.01)
    await feed.load_more()

    assert feed.page.current_page == 0
    await task
    assert len(feed.items) == 20


@pytest.mark.asyncio
async def test_load_more_survives_expired_entry(
    cache: InMemoryCollectionCache, clock: FakeClock
) -> None:
    source = InMemoryListingSource(make_listings(45))
    feed = ListingFeed(source=source, cache=cache, page_size=20)
    await feed.initialize(QueryParams())

    clock.now += 3600
    await feed.load_more()

    assert len(feed.items) == 40
    assert source.fetch_count == 1


@pytest.mark.asyncio
async def test_load_more_uses_held_raw_set_after_eviction(
    cache: InMemoryCollectionCache,
) -> None:
    source = InMemoryListingSource(make_listings(45))
    feed = ListingFeed(source=source, cache=cache, page_size=20)
    await feed.initialize(QueryParams())

    cache.clear()
    await feed.load_more()

    assert len(feed.items) == 40
    assert source.fetch_count == 1


# ==============================================================================
# Fallback
# ==============================================================================


@pytest.mark.asyncio
async def test_fallback_on_source_failure(
    cache: InMemoryCollectionCache, fallback: list[Listing]
) -> None:
    source = InMemoryListingSource([], error=ConnectionError("offline"))
    feed = ListingFeed(source=source, cache=cache, fallback=fallback)

    await feed.initialize(QueryParams(location_text="koramangala"))

    assert ids(feed) == ["fb-1"]
    assert feed.error == SOURCE_UNAVAILABLE_MESSAGE
    assert feed.loading is False
    assert feed.status is FeedStatus.ERROR
    assert feed.total_count == 1


@pytest.mark.asyncio
async def test_failed_fetch_leaves_cache_empty_and_retries(
    cache: InMemoryCollectionCache, fallback: list[Listing]
) -> None:
    source = InMemoryListingSource(make_listings(3), error=ConnectionError("offline"))
    feed = ListingFeed(source=source, cache=cache, fallback=fallback)
    params = QueryParams()

    await feed.initialize(params)
    assert cache.peek(derive_key(params)) is None

    source.error = None
    await feed.on_params_change(params)

    assert source.fetch_count == 2
    assert feed.error is None
    assert ids(feed) == ["0", "1", "2"]


@pytest.mark.asyncio
async def test_failed_refresh_elsewhere_does_not_leak_into_live_paging(
    cache: InMemoryCollectionCache,
) -> None:
    live = ListingFeed(
        source=InMemoryListingSource(make_listings(45)), cache=cache, page_size=20
    )
    await live.initialize(QueryParams())

    failing = ListingFeed(
        source=InMemoryListingSource([], error=ConnectionError("offline")),
        cache=cache,
        fallback=make_listings(3, prefix="fb"),
        page_size=20,
    )
    await failing.initialize(QueryParams())
    await failing.refresh()
    assert ids(failing) == ["fb0", "fb1", "fb2"]

    await live.load_more()

    assert len(live.items) == 40
    assert live.total_count == 45
    assert live.has_more is True
    assert all(not item.id.startswith("fb") for item in live.items)


@pytest.mark.asyncio
async def test_fallback_feed_keeps_paging_fallback_after_live_fill(
    cache: InMemoryCollectionCache,
) -> None:
    failing_source = InMemoryListingSource([], error=ConnectionError("offline"))
    offline_feed = ListingFeed(
        source=failing_source,
        cache=cache,
        fallback=make_listings(25, prefix="fb"),
        page_size=20,
    )
    await offline_feed.initialize(QueryParams())

    live = ListingFeed(
        source=InMemoryListingSource(make_listings(45)), cache=cache, page_size=20
    )
    await live.initialize(QueryParams())
    await offline_feed.load_more()

    assert len(offline_feed.items) == 25
    assert all(item.id.startswith("fb") for item in offline_feed.items)
    assert offline_feed.total_count == 25
    assert offline_feed.has_more is False


@pytest.mark.asyncio
async def test_fallback_pages_like_live_data(cache: InMemoryCollectionCache) -> None:
    fallback = make_listings(25, prefix="fb")
    source = InMemoryListingSource([], error=RuntimeError("boom"))
    feed = ListingFeed(source=source, cache=cache, fallback=fallback, page_size=20)

    await feed.initialize(QueryParams())
    await feed.load_more()

    assert len(feed.items) == 25
    assert feed.has_more is False
    assert feed.error == SOURCE_UNAVAILABLE_MESSAGE


@pytest.mark.asyncio
async def test_timeout_falls_back(
    cache: InMemoryCollectionCache, fallback: list[Listing]
) -> None:
    feed = ListingFeed(
        source=HangingListingSource(), cache=cache, fallback=fallback, fetch_timeout=0.01
    )

    await feed.initialize(QueryParams())

    assert ids(feed) == ["fb-1", "fb-2"]
    assert feed.error == SOURCE_UNAVAILABLE_MESSAGE


@pytest.mark.asyncio
async def test_refresh_resolves_when_source_fails(
    cache: InMemoryCollectionCache, fallback: list[Listing]
) -> None:
    source = InMemoryListingSource(make_listings(3))
    feed = ListingFeed(source=source, cache=cache, fallback=fallback)
    await feed.initialize(QueryParams())

    source.error = TimeoutError("slow backend")
    await feed.refresh()

    assert ids(feed) == ["fb-1", "fb-2"]
    assert feed.is_refreshing is False
    assert feed.error == SOURCE_UNAVAILABLE_MESSAGE


# ==============================================================================
# Supersession
# ==============================================================================


@pytest.mark.asyncio
async def test_last_writer_wins(cache: InMemoryCollectionCache) -> None:
    raw_a = make_listings(3, location="Koramangala", prefix="a")
    raw_b = make_listings(3, location="Indiranagar", prefix="b")
    source = ScriptedListingSource([(0.2, raw_a), (0.01, raw_b)])
    feed = ListingFeed(source=source, cache=cache)

    task_a = asyncio.create_task(feed.on_params_change(QueryParams(location_text="a-search")))
    await asyncio.sleep(0.01)
    task_b = asyncio.create_task(feed.on_params_change(QueryParams(area_text="Indiranagar")))
    await asyncio.gather(task_a, task_b)
    await asyncio.sleep(0.25)

    assert ids(feed) == ["b0", "b1", "b2"]
    assert feed.params == QueryParams(area_text="Indiranagar")
    assert feed.status is FeedStatus.READY


@pytest.mark.asyncio
async def test_superseded_fetch_is_cancelled(cache: InMemoryCollectionCache) -> None:
    source = ScriptedListingSource([(0.2, make_listings(1)), (0.0, make_listings(2))])
    feed = ListingFeed(source=source, cache=cache)

    task = asyncio.create_task(feed.initialize(QueryParams(location_text="first")))
    await asyncio.sleep(0.01)
    await feed.on_params_change(QueryParams())
    await task

    assert source.cancelled == 1
    assert cache.get(derive_key(QueryParams(location_text="first"))) is None


@pytest.mark.asyncio
async def test_cache_hit_supersedes_inflight_fetch(cache: InMemoryCollectionCache) -> None:
    source = ScriptedListingSource(
        [(0.0, make_listings(2, prefix="cached")), (0.1, make_listings(5, prefix="late"))]
    )
    feed = ListingFeed(source=source, cache=cache)
    await feed.initialize(QueryParams())

    task = asyncio.create_task(feed.on_params_change(QueryParams(location_text="late")))
    await asyncio.sleep(0.01)
    await feed.on_params_change(QueryParams())
    await task
    await asyncio.sleep(0.15)

    assert ids(feed) == ["cached0", "cached1"]


@pytest.mark.asyncio
async def test_superseded_request_is_not_an_error(
    cache: InMemoryCollectionCache, fallback: list[Listing]
) -> None:
    source = ScriptedListingSource([(0.1, []), (0.0, make_listings(1))])
    feed = ListingFeed(source=source, cache=cache, fallback=fallback)

    task = asyncio.create_task(feed.initialize(QueryParams(location_text="x")))
    await asyncio.sleep(0.01)
    await feed.on_params_change(QueryParams())
    await task

    assert feed.error is None
    assert ids(feed) == ["0"]


@pytest.mark.asyncio
async def test_close_discards_inflight_result(cache: InMemoryCollectionCache) -> None:
    source = ScriptedListingSource([(0.1, make_listings(3))])
    feed = ListingFeed(source=source, cache=cache)

    task = asyncio.create_task(feed.initialize(QueryParams()))
    await asyncio.sleep(0.01)
    feed.close()
    await task

    assert feed.items == ()
    assert source.cancelled == 1


@pytest.mark.asyncio
async def test_caller_cancellation_propagates(cache: InMemoryCollectionCache) -> None:
    feed = ListingFeed(source=HangingListingSource(), cache=cache)

    task = asyncio.create_task(feed.initialize(QueryParams()))
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert feed.status is FeedStatus.IDLE
    assert feed.loading is False


@pytest.mark.asyncio
async def test_superseded_fetch_that_completes_anyway_is_discarded(
    cache: InMemoryCollectionCache,
) -> None:
    raw_a = make_listings(3, prefix="a")
    raw_b = make_listings(3, prefix="b")
    source = StubbornListingSource([(0.2, raw_a), (0.01, raw_b)], linger=0.05)
    feed = ListingFeed(source=source, cache=cache)

    task_a = asyncio.create_task(feed.on_params_change(QueryParams(location_text="first")))
    await asyncio.sleep(0.01)
    await feed.on_params_change(QueryParams())
    assert ids(feed) == ["b0", "b1", "b2"]

    await task_a

    assert source.completed_after_cancel == 1
    assert ids(feed) == ["b0", "b1", "b2"]
    assert feed.params == QueryParams()
    assert feed.status is FeedStatus.READY


# ==============================================================================
# Debounce
# ==============================================================================


def test_rejects_negative_debounce(cache: InMemoryCollectionCache) -> None:
    with pytest.raises(ValueError):
        ListingFeed(source=InMemoryListingSource([]), cache=cache, debounce_seconds=-1)


@pytest.mark.asyncio
async def test_debounce_loads_only_last_change_of_a_burst(
    cache: InMemoryCollectionCache,
) -> None:
    source = InMemoryListingSource(make_listings(3))
    feed = ListingFeed(source=source, cache=cache, debounce_seconds=0.05)

    tasks = []
    for text in ("w", "white", "whitefield"):
        tasks.append(asyncio.create_task(feed.on_params_change(QueryParams(location_text=text))))
        await asyncio.sleep(0.01)
    await asyncio.gather(*tasks)

    assert source.fetch_count == 1
    assert feed.params == QueryParams(location_text="whitefield")
    assert len(feed.items) == 3


@pytest.mark.asyncio
async def test_debounced_change_leaves_state_untouched_while_waiting(
    cache: InMemoryCollectionCache,
) -> None:
    source = InMemoryListingSource(make_listings(3))
    feed = ListingFeed(source=source, cache=cache, debounce_seconds=0.05)
    await feed.initialize(QueryParams())

    task = asyncio.create_task(feed.on_params_change(QueryParams(location_text="pune")))
    await asyncio.sleep(0.01)

    assert feed.params == QueryParams()
    assert feed.status is FeedStatus.READY
    assert len(feed.items) == 3
    await task
    assert feed.items == ()


@pytest.mark.asyncio
async def test_refresh_cancels_pending_debounced_change(
    cache: InMemoryCollectionCache,
) -> None:
    source = InMemoryListingSource(make_listings(3))
    feed = ListingFeed(source=source, cache=cache, debounce_seconds=0.05)
    await feed.initialize(QueryParams())

    task = asyncio.create_task(feed.on_params_change(QueryParams(location_text="pune")))
    await asyncio.sleep(0.01)
    await feed.refresh()
    await task

    assert source.fetch_count == 2
    assert feed.params == QueryParams()
    assert len(feed.items) == 3
