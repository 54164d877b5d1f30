"""Listing source backed by the listings HTTP API."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError as PydanticValidationError

from rent_lite.domain.errors import SourceUnavailableError
from rent_lite.domain.listing import Listing
from rent_lite.entrypoints.http.dtos.listing import ListingCollectionResponseDTO
from rent_lite.entrypoints.http.mappers.listing_mapper import ListingMapper
from rent_lite.ports.listing_source import ListingSource

logger = logging.getLogger(__name__)

LISTINGS_PATH = "/v1/listings"


class HttpListingSource(ListingSource):
    """
    Fetches the raw collection from ``GET {base_url}/v1/listings``.

    - Uses httpx.AsyncClient; cancelling the awaiting task aborts the transfer
    - Transport errors, non-2xx responses and malformed payloads all raise
      SourceUnavailableError
    - A shared client may be injected (tests use httpx.MockTransport);
      otherwise a short-lived client is opened per fetch
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._timeout = timeout

    async def fetch_all(self) -> list[Listing]:
        url = f"{self._base_url}{LISTINGS_PATH}"

        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SourceUnavailableError(
                "Listings API returned an error status",
                status_code=exc.response.status_code,
                url=url,
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailableError(
                "Listings API request failed",
                error_type=type(exc).__name__,
                url=url,
            ) from exc

        try:
            payload = ListingCollectionResponseDTO.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise SourceUnavailableError("Listings API returned a malformed payload", url=url) from exc

        logger.info(
            "Fetched listings",
            extra={"url": url, "count": len(payload.listings)},
        )

        return [ListingMapper.to_domain(dto) for dto in payload.listings]
