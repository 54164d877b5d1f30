from __future__ import annotations

from abc import ABC, abstractmethod

from rent_lite.domain.listing import Listing


class ListingSource(ABC):
    """
    Port for retrieving the raw listing collection.

    The collection is fetched whole, without parameters; filtering and paging
    happen client side against the cached superset.

    Contract:
        - Returns listings in the order the feed should present them
        - May raise on any failure; callers treat every exception as the
          source being unavailable
        - Must tolerate cancellation of the awaiting task (a newer request
          supersedes this one)
    """

    @abstractmethod
    async def fetch_all(self) -> list[Listing]:
        """
        Fetch the full raw listing collection.

        Returns:
            Every listing the source currently offers
        """
        ...
