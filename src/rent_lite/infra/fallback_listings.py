"""Static listings shown when the listings API cannot be reached."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from rent_lite.domain.listing import Listing

FALLBACK_LISTINGS: tuple[Listing, ...] = (
    Listing(
        id="fallback-1",
        title="Furnished 1BHK near Sony Signal",
        location="Koramangala, Karnataka",
        rent=Decimal("22000.00"),
        room_type="1BHK",
        tags=("Fully furnished", "Power backup"),
        created_at=datetime(2025, 12, 1, tzinfo=timezone.utc),
    ),
    Listing(
        id="fallback-2",
        title="Spacious 2BHK with balcony",
        location="Indiranagar, Karnataka",
        rent=Decimal("38000.00"),
        room_type="2BHK",
        tags=("Semi-furnished", "Pet friendly", "Parking"),
        created_at=datetime(2025, 11, 24, tzinfo=timezone.utc),
    ),
    Listing(
        id="fallback-3",
        title="Single room in shared flat",
        location="HSR Layout, Karnataka",
        rent=Decimal("12500.00"),
        room_type="Shared",
        tags=("Fully furnished", "Wifi"),
        created_at=datetime(2025, 11, 18, tzinfo=timezone.utc),
    ),
    Listing(
        id="fallback-4",
        title="3BHK gated community apartment",
        location="Gachibowli, Telangana",
        rent=Decimal("45000.00"),
        room_type="3BHK",
        tags=("Unfurnished", "Gym", "Pet friendly"),
        created_at=datetime(2025, 11, 2, tzinfo=timezone.utc),
    ),
    Listing(
        id="fallback-5",
        title="Studio close to metro",
        location="Madhapur, Telangana",
        rent=Decimal("16000.00"),
        room_type="1RK",
        tags=("Semi-furnished",),
        created_at=datetime(2025, 10, 27, tzinfo=timezone.utc),
    ),
)
