"""
Wiring for client-side listing feeds.

Every feed built here shares one process-wide raw collection cache, so
results fetched by one consumer are reused by the others. Tests and callers
that need isolation pass their own cache.
"""

from __future__ import annotations

from rent_lite.adapters.http_listing_source import HttpListingSource
from rent_lite.adapters.in_memory_collection_cache import InMemoryCollectionCache
from rent_lite.domain.filters import FilterPipeline
from rent_lite.infra import config
from rent_lite.infra.fallback_listings import FALLBACK_LISTINGS
from rent_lite.ports.collection_cache import CollectionCache
from rent_lite.ports.listing_source import ListingSource
from rent_lite.use_cases.browse_listings import ListingFeed

# Lazy initialization - created on the first feed
_shared_cache: CollectionCache | None = None


def get_shared_cache() -> CollectionCache:
    """Get or create the process-wide raw collection cache."""
    global _shared_cache
    if _shared_cache is None:
        _shared_cache = InMemoryCollectionCache(ttl_seconds=config.cache_ttl_seconds())
    return _shared_cache


def reset_shared_cache() -> None:
    """Forget the process-wide cache (e.g. on logout)."""
    global _shared_cache
    _shared_cache = None


def build_listing_feed(
    source: ListingSource | None = None,
    cache: CollectionCache | None = None,
    pipeline: FilterPipeline | None = None,
    page_size: int | None = None,
) -> ListingFeed:
    """
    Factory that returns a ListingFeed for one consumer.

    Args:
        source: Raw collection provider; defaults to the listings HTTP API
        cache: Raw collection cache; defaults to the shared cache
        pipeline: Filter rules; defaults to the rental filter bar's rules
        page_size: Listings per page; defaults to LISTINGS_PAGE_SIZE

    Returns:
        ListingFeed: Feed in the idle state, ready for initialize()
    """
    return ListingFeed(
        source=source if source is not None else HttpListingSource(config.listings_api_url()),
        cache=cache if cache is not None else get_shared_cache(),
        fallback=FALLBACK_LISTINGS,
        pipeline=pipeline,
        page_size=page_size if page_size is not None else config.page_size(),
        fetch_timeout=config.fetch_timeout_seconds(),
        debounce_seconds=config.debounce_seconds(),
    )
