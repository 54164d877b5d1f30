from rent_lite.infra.db.models.listing import ListingRow

__all__ = ["ListingRow"]
