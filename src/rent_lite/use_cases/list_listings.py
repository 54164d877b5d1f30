from __future__ import annotations

from dataclasses import dataclass

from rent_lite.domain.listing import Listing
from rent_lite.ports.listing_repository import ListingRepository


@dataclass(frozen=True, slots=True)
class ListListingsResponse:
    listings: list[Listing]
    total_count: int


class ListListings:
    """
    Serve the full raw listing collection.

    No filtering, paging or caching happens here: listing feeds download the
    whole collection once per query key and narrow it down client side.
    """

    def __init__(self, listing_repository: ListingRepository) -> None:
        self._repository = listing_repository

    def execute(self) -> ListListingsResponse:
        listings = self._repository.list_recent()

        return ListListingsResponse(listings=listings, total_count=len(listings))
