#!/usr/bin/env python3
"""
Seed the listings table with deterministic random data.

Features:
- Deterministic: fixed seed → same dataset every run
- Idempotent: safe to run multiple times (clears before seeding)
- Realism-lite: rent correlated with property type + locality band

Usage:
    python scripts/seed_listings.py
"""

from __future__ import annotations

import random
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rent_lite.infra.db.models.listing import ListingRow
from rent_lite.infra.db.session import get_session


# ==============================================================================
# Configuration
# ==============================================================================

RANDOM_SEED = 42  # Fixed seed for deterministic results
NUM_LISTINGS = 120  # Enough for several pages at the default page size


# ==============================================================================
# Indian Rental Market Data
# ==============================================================================

# Localities grouped by rent band multiplier
LOCALITIES = {
    ("Bengaluru", "Karnataka"): {
        "Koramangala": Decimal("1.30"),
        "Indiranagar": Decimal("1.35"),
        "HSR Layout": Decimal("1.15"),
        "Whitefield": Decimal("1.00"),
        "Electronic City": Decimal("0.80"),
    },
    ("Hyderabad", "Telangana"): {
        "Gachibowli": Decimal("1.10"),
        "Hitec City": Decimal("1.15"),
        "Kondapur": Decimal("0.95"),
        "Madhapur": Decimal("1.05"),
        "Kukatpally": Decimal("0.75"),
    },
}

# Base monthly rent (INR) per property type
BASE_RENT = {
    "Shared": Decimal("9000"),
    "1RK": Decimal("11000"),
    "1BHK": Decimal("16000"),
    "2BHK": Decimal("26000"),
    "3BHK": Decimal("38000"),
}

FURNISHING = ["Fully furnished", "Semi-furnished", "Unfurnished"]
EXTRAS = ["Pet friendly", "Parking", "Power backup", "Gym", "Wifi", "Balcony"]

TITLE_TEMPLATES = [
    "Bright {kind} in {locality}",
    "Spacious {kind} near {locality} main road",
    "{kind} close to metro, {locality}",
    "Renovated {kind} in gated society",
]


# ==============================================================================
# Seed Generation
# ==============================================================================


def calculate_rent(property_type: str, multiplier: Decimal) -> Decimal:
    """
    Calculate rent from property type and locality band.

    Adds +/- 15% variance and rounds to the nearest 500.
    """
    variance = Decimal(str(random.uniform(0.85, 1.15)))
    rent = BASE_RENT[property_type] * multiplier * variance

    return ((rent / 500).quantize(Decimal("1")) * 500).quantize(Decimal("0.01"))


def generate_listing(now: datetime) -> ListingRow:
    """Generate a single random listing with realistic data."""
    (city, state), localities = random.choice(list(LOCALITIES.items()))
    locality, multiplier = random.choice(list(localities.items()))

    property_type = random.choices(
        list(BASE_RENT),
        weights=[2, 2, 4, 4, 2],  # 1BHK/2BHK dominate
        k=1,
    )[0]

    highlights = [random.choice(FURNISHING)]
    highlights += random.sample(EXTRAS, k=random.randint(0, 3))

    image_count = random.randint(0, 4)
    images = [
        {
            "url": f"https://images.rent-lite.example/listings/{random.getrandbits(32):08x}.jpg",
            "is_primary": i == 0,
        }
        for i in range(image_count)
    ]

    return ListingRow(
        title=random.choice(TITLE_TEMPLATES).format(kind=property_type, locality=locality),
        property_type=property_type,
        city=locality,
        state=state,
        country="India",
        rent=calculate_rent(property_type, multiplier),
        images=images,
        highlights=highlights,
        created_at=now - timedelta(hours=random.randint(1, 24 * 60)),
    )


def seed_listings(num_listings: int = NUM_LISTINGS, seed: int = RANDOM_SEED) -> None:
    """
    Seed the database with random listing data.

    Args:
        num_listings: Number of listings to generate
        seed: Random seed for deterministic results
    """
    random.seed(seed)
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    print(f"🌱 Seeding database with {num_listings} listings (seed={seed})...")

    with get_session() as session:
        # Step 1: Clear existing data (idempotent)
        deleted_count = session.query(ListingRow).delete()
        print(f"   Deleted {deleted_count} existing listings")

        # Step 2: Generate and insert new listings
        listings = [generate_listing(now) for _ in range(num_listings)]

        session.add_all(listings)
        session.flush()

        print(f"✅ Successfully seeded {len(listings)} listings!")

        for i, listing in enumerate(listings[:5], 1):
            print(
                f"   {i}. {listing.property_type} in {listing.city} - "
                f"₹{listing.rent:,.2f} ({', '.join(listing.highlights)})"
            )

        if len(listings) > 5:
            print(f"   ... and {len(listings) - 5} more")


# ==============================================================================
# Main
# ==============================================================================


if __name__ == "__main__":
    try:
        seed_listings()
    except Exception as e:
        print(f"❌ Error seeding database: {e}", file=sys.stderr)
        sys.exit(1)
