from fastapi import APIRouter, Depends

from rent_lite.entrypoints.http.dependencies import get_list_listings_use_case
from rent_lite.entrypoints.http.dtos.listing import ListingCollectionResponseDTO
from rent_lite.entrypoints.http.error_responses import ErrorResponse
from rent_lite.entrypoints.http.mappers.listing_mapper import ListingMapper
from rent_lite.use_cases.list_listings import ListListings


router = APIRouter(tags=["Listings"])


@router.get(
    "/listings",
    response_model=ListingCollectionResponseDTO,
    summary="List all listings",
    description="""
    Return the full raw listing collection, newest first.

    Clients cache this collection per search and filter/page it locally,
    so no query parameters are accepted.
    """,
    responses={
        503: {"model": ErrorResponse, "description": "Listings store unavailable"},
        500: {"model": ErrorResponse, "description": "Unexpected error"},
    },
)
def get_listings(
    use_case: ListListings = Depends(get_list_listings_use_case),
) -> ListingCollectionResponseDTO:
    """List listings endpoint following execute → map → return pattern."""
    result = use_case.execute()

    return ListingMapper.to_response(result)
