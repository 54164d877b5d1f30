from __future__ import annotations

from decimal import Decimal

from rent_lite.domain.listing import Listing
from rent_lite.entrypoints.http.dtos.listing import (
    ListingCollectionResponseDTO,
    ListingResponseDTO,
)
from rent_lite.use_cases.list_listings import ListListingsResponse


class ListingMapper:
    """Maps between REST DTOs and domain listings, in both directions."""

    @staticmethod
    def to_listing_response(listing: Listing) -> ListingResponseDTO:
        """
        Converts domain Listing entity to REST response DTO.

        Handles Decimal → str conversion at the boundary.

        Args:
            listing: Domain Listing entity

        Returns:
            ListingResponseDTO: REST response DTO with string rent
        """
        return ListingResponseDTO(
            id=listing.id,
            owner_id=listing.owner_id,
            title=listing.title,
            location=listing.location,
            rent=str(listing.rent),  # Decimal → str at boundary
            room_type=listing.room_type,
            tags=list(listing.tags),
            image_url=listing.image_url,
            created_at=listing.created_at,
        )

    @staticmethod
    def to_response(result: ListListingsResponse) -> ListingCollectionResponseDTO:
        return ListingCollectionResponseDTO(
            listings=[ListingMapper.to_listing_response(listing) for listing in result.listings],
            total=result.total_count,
        )

    @staticmethod
    def to_domain(dto: ListingResponseDTO) -> Listing:
        """
        Converts a listing received over the wire back into a domain entity.

        Args:
            dto: Validated listing payload

        Returns:
            Listing: Domain entity with Decimal rent
        """
        return Listing(
            id=dto.id,
            title=dto.title,
            location=dto.location,
            rent=Decimal(dto.rent),  # str → Decimal at boundary
            room_type=dto.room_type,
            tags=tuple(dto.tags),
            created_at=dto.created_at,
            owner_id=dto.owner_id,
            image_url=dto.image_url,
        )
