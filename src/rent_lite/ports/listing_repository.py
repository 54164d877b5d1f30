from __future__ import annotations

from abc import ABC, abstractmethod

from rent_lite.domain.listing import Listing


class ListingRepository(ABC):
    """
    Port for listing persistence on the backend.

    Implementations return the full catalogue newest first; the API serves it
    as the raw collection consumed by listing feeds.
    """

    @abstractmethod
    def list_recent(self) -> list[Listing]:
        """
        List every listing ordered by creation time, newest first.

        Returns:
            All stored listings

        Raises:
            SourceUnavailableError: If the store cannot be reached
        """
        ...
