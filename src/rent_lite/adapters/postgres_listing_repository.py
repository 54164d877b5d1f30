"""PostgreSQL implementation of ListingRepository."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from rent_lite.domain.errors import SourceUnavailableError
from rent_lite.domain.listing import Listing
from rent_lite.infra.db.models.listing import ListingRow
from rent_lite.ports.listing_repository import ListingRepository

logger = logging.getLogger(__name__)


class PostgresListingRepository(ListingRepository):
    """
    PostgreSQL implementation of ListingRepository.

    - Uses SQLAlchemy ORM for database access
    - Orders by created_at DESC (newest first); feeds preserve this order
    - Converts ListingRow (infrastructure) to Listing (domain)
    - Connection-level failures surface as SourceUnavailableError
    """

    def __init__(self, session: Session) -> None:
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self._session = session

    def list_recent(self) -> list[Listing]:
        query = select(ListingRow).order_by(ListingRow.created_at.desc())

        try:
            rows = self._session.execute(query).scalars().all()
        except OperationalError as exc:
            logger.warning(
                "Listings store unreachable",
                extra={"error_type": type(exc.orig).__name__},
            )
            raise SourceUnavailableError("Listings store unavailable") from exc

        return [self._to_domain(row) for row in rows]

    def _to_domain(self, row: ListingRow) -> Listing:
        """
        Convert database model (ListingRow) to domain entity (Listing).

        Args:
            row: SQLAlchemy ListingRow model

        Returns:
            Listing domain entity
        """
        return Listing(
            id=str(row.id),  # Convert UUID to string
            title=row.title,
            location=f"{row.city}, {row.state}",
            rent=row.rent,  # Already Decimal from NUMERIC column
            room_type=row.property_type,
            tags=tuple(row.highlights or ()),
            created_at=row.created_at,
            owner_id=str(row.user_id) if row.user_id else None,
            image_url=self._primary_image_url(row.images or []),
        )

    @staticmethod
    def _primary_image_url(images: list[dict[str, Any]]) -> str:
        """Primary image if one is flagged, else the first image, else empty."""
        for image in images:
            if image.get("is_primary") and image.get("url"):
                return str(image["url"])
        if images:
            return str(images[0].get("url") or "")
        return ""
