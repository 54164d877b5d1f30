from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from rent_lite.domain.errors import ValidationError

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 200


# ==============================================================================
# Domain Exceptions
# ==============================================================================


class PagingValidationError(ValidationError):
    """Raised when paging parameters are invalid."""

    pass


class FilterValidationError(ValidationError):
    """Raised when filter configuration is invalid."""

    pass


@dataclass(frozen=True, slots=True)
class Listing:
    id: str
    title: str
    location: str
    rent: Decimal
    room_type: str
    tags: tuple[str, ...] = ()
    created_at: datetime | None = None
    owner_id: str | None = None
    image_url: str = ""


@dataclass(frozen=True, slots=True)
class QueryParams:
    """
    User-supplied search parameters for one feed invocation.

    Free text is stripped of surrounding whitespace and filter selections are
    frozen into tuples, so an instance can be shared without defensive copies.
    """

    location_text: str = ""
    area_text: str = ""
    filters: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "location_text", (self.location_text or "").strip())
        object.__setattr__(self, "area_text", (self.area_text or "").strip())
        object.__setattr__(
            self,
            "filters",
            MappingProxyType(
                {category: tuple(values) for category, values in (self.filters or {}).items()}
            ),
        )


@dataclass(frozen=True, slots=True)
class PageState:
    """
    Pagination window over the filtered collection.

    The reset state reports has_more=True with nothing counted yet; once a
    page is published, has_more is derived from the filtered total.
    """

    page_size: int = DEFAULT_PAGE_SIZE
    current_page: int = 0
    has_more: bool = True
    total_filtered_count: int = 0

    def validate(self) -> None:
        """
        Validate paging parameters.

        Raises:
            PagingValidationError: If paging parameters are invalid
        """
        if self.current_page < 0:
            raise PagingValidationError("current_page must be >= 0")
        if self.page_size <= 0:
            raise PagingValidationError("page_size must be > 0")
        if self.page_size > MAX_PAGE_SIZE:
            raise PagingValidationError(f"page_size must be <= {MAX_PAGE_SIZE}")

    @classmethod
    def initial(cls, page_size: int) -> PageState:
        return cls(page_size=page_size)

    def at(self, page: int, total_filtered_count: int) -> PageState:
        """Page state after publishing ``page`` of a filtered set of the given size."""
        return PageState(
            page_size=self.page_size,
            current_page=page,
            has_more=(page + 1) * self.page_size < total_filtered_count,
            total_filtered_count=total_filtered_count,
        )

    @property
    def window_end(self) -> int:
        return (self.current_page + 1) * self.page_size
