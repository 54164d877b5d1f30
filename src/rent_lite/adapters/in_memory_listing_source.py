from __future__ import annotations

import asyncio
from typing import Sequence

from rent_lite.domain.listing import Listing
from rent_lite.ports.listing_source import ListingSource


class InMemoryListingSource(ListingSource):
    """
    Canonical contract implementation for tests and offline demos.

    - Returns listings in insertion order
    - Optional delay simulates network latency (and is cancellable)
    - Optional error is raised on every fetch
    - Counts fetches so callers can assert cache behaviour
    """

    def __init__(
        self,
        listings: Sequence[Listing],
        delay_seconds: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self._listings = list(listings)
        self.delay_seconds = delay_seconds
        self.error = error
        self.fetch_count = 0

    async def fetch_all(self) -> list[Listing]:
        self.fetch_count += 1

        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error

        return list(self._listings)
