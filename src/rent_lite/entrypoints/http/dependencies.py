"""
Dependency injection for FastAPI routes.

Key principle: Database sessions should be per-request, not cached.
"""

from __future__ import annotations

from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from rent_lite.adapters.postgres_listing_repository import PostgresListingRepository
from rent_lite.infra.db.session import get_session
from rent_lite.use_cases.list_listings import ListListings


def get_db() -> Generator[Session, None, None]:
    """
    Provides a database session for a single request.

    The underlying get_session() is a context manager that handles:
    - Session creation
    - Auto-commit on success
    - Auto-rollback on exception
    - Session cleanup

    Yields:
        Session: SQLAlchemy database session (per-request)
    """
    with get_session() as session:
        yield session


def get_list_listings_use_case(db: Session = Depends(get_db)) -> ListListings:
    """
    Factory function that returns a configured ListListings use case.

    Args:
        db: Database session (injected by FastAPI via Depends(get_db))

    Returns:
        ListListings: Use case wired to a per-request repository
    """
    repository = PostgresListingRepository(session=db)
    return ListListings(listing_repository=repository)
