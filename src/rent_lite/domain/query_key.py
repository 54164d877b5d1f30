"""Canonical cache keys for listing queries."""

from __future__ import annotations

import json

from rent_lite.domain.listing import QueryParams


def derive_key(params: QueryParams) -> str:
    """
    Derive the cache key for a set of query parameters.

    Selections inside a category are order-independent (toggling checkboxes
    in a different order must hit the same entry) but are not de-duplicated.
    Categories without selections are dropped, so ``{}`` and ``{"price": []}``
    share a key.

    Args:
        params: Query parameters for the current feed invocation

    Returns:
        Compact JSON string with sorted keys
    """
    filters = {
        category: sorted(values)
        for category, values in params.filters.items()
        if values
    }

    return json.dumps(
        {
            "location": params.location_text,
            "area": params.area_text,
            "filters": filters,
        },
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
