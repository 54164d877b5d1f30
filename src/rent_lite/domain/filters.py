"""Filter pipeline for raw listing collections.

The pipeline is pure: it never mutates or reorders the raw collection, so the
same cached superset can be re-filtered for every page and parameter change.

Semantics:
- Free text (location, area): case-insensitive substring of "title location"
- Categories combine with AND; selections inside a category combine with OR
- A category without selections imposes no constraint
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping, Sequence
from urllib.parse import parse_qs, urlencode

from rent_lite.domain.listing import FilterValidationError, Listing, QueryParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PriceBucket:
    """Half-open rent interval ``minimum <= rent < maximum``; None leaves a side open."""

    label: str
    minimum: Decimal | None = None
    maximum: Decimal | None = None

    def validate(self) -> None:
        """
        Validate bucket bounds.

        Raises:
            FilterValidationError: If the interval is empty or bounds are not Decimal
        """
        for name, bound in (("minimum", self.minimum), ("maximum", self.maximum)):
            if bound is not None and not isinstance(bound, Decimal):
                raise FilterValidationError(
                    f"{name} must be Decimal or None (no floats past the boundary)",
                    bucket=self.label,
                )
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.minimum >= self.maximum
        ):
            raise FilterValidationError("minimum must be below maximum", bucket=self.label)

    def contains(self, rent: Decimal) -> bool:
        if self.minimum is not None and rent < self.minimum:
            return False
        if self.maximum is not None and rent >= self.maximum:
            return False
        return True


class CategoryFilter(ABC):
    """Rule for one filter category; called only when the category has selections."""

    @abstractmethod
    def matches(self, listing: Listing, selected: Sequence[str]) -> bool: ...

    def allowed_values(self) -> tuple[str, ...] | None:
        """Closed set of selectable values, or None when any value is accepted."""
        return None


class PriceBucketFilter(CategoryFilter):
    """Rent falls in any selected bucket. Labels missing from the table match everything."""

    def __init__(self, buckets: Iterable[PriceBucket]) -> None:
        self._buckets: dict[str, PriceBucket] = {}
        for bucket in buckets:
            bucket.validate()
            self._buckets[bucket.label] = bucket

    def allowed_values(self) -> tuple[str, ...]:
        return tuple(self._buckets)

    def matches(self, listing: Listing, selected: Sequence[str]) -> bool:
        for label in selected:
            bucket = self._buckets.get(label)
            if bucket is None or bucket.contains(listing.rent):
                return True
        return False


class AttributeFilter(CategoryFilter):
    """Listing attribute equals one of the selected values."""

    def __init__(self, attribute: str, choices: Iterable[str] | None = None) -> None:
        self._attribute = attribute
        self._choices = tuple(choices) if choices is not None else None

    def matches(self, listing: Listing, selected: Sequence[str]) -> bool:
        return getattr(listing, self._attribute) in selected

    def allowed_values(self) -> tuple[str, ...] | None:
        return self._choices


class TagFilter(CategoryFilter):
    """Some selected value is a case-insensitive substring of some tag."""

    def matches(self, listing: Listing, selected: Sequence[str]) -> bool:
        tags = [tag.lower() for tag in listing.tags]
        return any(value.lower() in tag for value in selected for tag in tags)


class FlagFilter(CategoryFilter):
    """Boolean toggle: when "true" is selected, some tag must mention ``keyword``."""

    def __init__(self, keyword: str) -> None:
        self._keyword = keyword.lower()

    def matches(self, listing: Listing, selected: Sequence[str]) -> bool:
        if "true" not in selected:
            return True
        return any(self._keyword in tag.lower() for tag in listing.tags)

    def allowed_values(self) -> tuple[str, ...]:
        return ("true", "false")


class FilterPipeline:
    def __init__(self, categories: Mapping[str, CategoryFilter] | None = None) -> None:
        self._categories = dict(categories or {})

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(self._categories)

    def apply(self, items: Sequence[Listing], params: QueryParams) -> list[Listing]:
        """
        Narrow ``items`` down to the listings matching ``params``.

        Args:
            items: Raw collection (left untouched)
            params: Current query parameters

        Returns:
            New list holding the matching listings in their original order
        """
        active = []
        for category, selected in params.filters.items():
            if not selected:
                continue
            rule = self._categories.get(category)
            if rule is None:
                logger.debug("Ignoring unknown filter category", extra={"category": category})
                continue
            active.append((rule, selected))

        location = params.location_text.lower()
        area = params.area_text.lower()

        return [
            item
            for item in items
            if self._matches_text(item, location, area)
            and all(rule.matches(item, selected) for rule, selected in active)
        ]

    def validate(self, params: QueryParams) -> None:
        """
        Check every selection against the categories this pipeline knows.

        apply() tolerates unknown categories and labels; this is the strict
        check for parameters arriving from outside (e.g. a shared link).

        Raises:
            FilterValidationError: With one entry per offending category
        """
        errors: list[dict[str, str]] = []

        for category, selected in params.filters.items():
            if category not in self.categories:
                errors.append({"field": category, "message": "Unknown filter category"})
                continue

            allowed = self._categories[category].allowed_values()
            if allowed is None:
                continue
            invalid = [value for value in selected if value not in allowed]
            if invalid:
                errors.append(
                    {
                        "field": category,
                        "message": f"Invalid selection: {', '.join(invalid)}",
                    }
                )

        if errors:
            raise FilterValidationError(errors=errors)

    @staticmethod
    def _matches_text(item: Listing, location: str, area: str) -> bool:
        if not location and not area:
            return True
        searchable = f"{item.title} {item.location}".lower()
        return location in searchable and area in searchable


RENT_BUCKETS: tuple[PriceBucket, ...] = (
    PriceBucket("< ₹15k", maximum=Decimal("15000")),
    PriceBucket("₹15k-25k", minimum=Decimal("15000"), maximum=Decimal("25000")),
    PriceBucket("₹25k-40k", minimum=Decimal("25000"), maximum=Decimal("40000")),
    PriceBucket("> ₹40k", minimum=Decimal("40000")),
)


def rental_filter_pipeline() -> FilterPipeline:
    """Filter categories offered by the listing browser's filter bar."""
    return FilterPipeline(
        {
            "price": PriceBucketFilter(RENT_BUCKETS),
            "room_type": AttributeFilter("room_type"),
            "furnishing": TagFilter(),
            "pets": FlagFilter("pet"),
        }
    )


def apply_filters(
    items: Sequence[Listing],
    params: QueryParams,
    pipeline: FilterPipeline | None = None,
) -> list[Listing]:
    return (pipeline or rental_filter_pipeline()).apply(items, params)


def validate_filters(params: QueryParams, pipeline: FilterPipeline | None = None) -> None:
    (pipeline or rental_filter_pipeline()).validate(params)


def describe_filters(params: QueryParams) -> str:
    """One-line summary of the active search, e.g. for a results banner."""
    parts: list[str] = []

    if params.location_text:
        parts.append(f'location "{params.location_text}"')
    if params.area_text:
        parts.append(f'area "{params.area_text}"')

    for category, selected in params.filters.items():
        if not selected:
            continue
        parts.append(f"{category.replace('_', ' ')}: {', '.join(selected)}")

    if not parts:
        return "All listings"

    return f"Filtered by {'; '.join(parts)}"


# ==============================================================================
# Query string form (shareable links)
# ==============================================================================

LOCATION_PARAM = "q"
AREA_PARAM = "area"
VALUE_SEPARATOR = ","


def to_query_string(params: QueryParams) -> str:
    """
    Encode params as a URL query string, omitting everything left at its default.

    Free text goes under ``q`` and ``area``; each non-empty category becomes
    one comma-joined parameter, categories in sorted order.
    """
    pairs: list[tuple[str, str]] = []

    if params.location_text:
        pairs.append((LOCATION_PARAM, params.location_text))
    if params.area_text:
        pairs.append((AREA_PARAM, params.area_text))

    for category in sorted(params.filters):
        selected = params.filters[category]
        if selected:
            pairs.append((category, VALUE_SEPARATOR.join(selected)))

    return urlencode(pairs)


def parse_query_string(query: str, pipeline: FilterPipeline | None = None) -> QueryParams:
    """
    Decode a query string produced by to_query_string.

    Args:
        query: Query string, with or without the leading "?"
        pipeline: Categories to validate against; defaults to the rental rules

    Returns:
        QueryParams: Validated parameters

    Raises:
        FilterValidationError: If a category or selection is not recognised
    """
    parsed = parse_qs(query.lstrip("?"))

    location = parsed.pop(LOCATION_PARAM, [""])[-1]
    area = parsed.pop(AREA_PARAM, [""])[-1]

    filters: dict[str, tuple[str, ...]] = {}
    for category, raw_values in parsed.items():
        values = tuple(
            value
            for raw in raw_values
            for value in raw.split(VALUE_SEPARATOR)
            if value
        )
        if values:
            filters[category] = values

    params = QueryParams(location_text=location, area_text=area, filters=filters)
    validate_filters(params, pipeline)
    return params
