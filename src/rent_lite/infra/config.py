"""Environment configuration for the client-side listing feed."""

from __future__ import annotations

import os
from typing import TypeVar

from rent_lite.adapters.in_memory_collection_cache import DEFAULT_TTL_SECONDS
from rent_lite.domain.listing import DEFAULT_PAGE_SIZE

DEFAULT_LISTINGS_API_URL = "http://localhost:8000"

_Number = TypeVar("_Number", int, float)


def listings_api_url() -> str:
    return os.getenv("LISTINGS_API_URL") or DEFAULT_LISTINGS_API_URL


def page_size() -> int:
    return _positive("LISTINGS_PAGE_SIZE", _int_env("LISTINGS_PAGE_SIZE", DEFAULT_PAGE_SIZE))


def cache_ttl_seconds() -> float:
    return _positive(
        "LISTINGS_CACHE_TTL_SECONDS",
        _float_env("LISTINGS_CACHE_TTL_SECONDS", DEFAULT_TTL_SECONDS),
    )


def fetch_timeout_seconds() -> float | None:
    """Upper bound on a source fetch before falling back; unset means wait indefinitely."""
    if not os.getenv("LISTINGS_FETCH_TIMEOUT_SECONDS"):
        return None
    return _positive(
        "LISTINGS_FETCH_TIMEOUT_SECONDS",
        _float_env("LISTINGS_FETCH_TIMEOUT_SECONDS", 0.0),
    )


def debounce_seconds() -> float:
    """Quiet period before a params change loads; 0 disables debouncing."""
    value = _float_env("LISTINGS_DEBOUNCE_SECONDS", 0.0)
    if value < 0:
        raise RuntimeError(f"LISTINGS_DEBOUNCE_SECONDS must be >= 0, got {value!r}")
    return value


def _positive(name: str, value: _Number) -> _Number:
    if value <= 0:
        raise RuntimeError(f"{name} must be > 0, got {value!r}")
    return value


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default

    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default

    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from None
