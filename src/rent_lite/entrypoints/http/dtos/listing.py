from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ListingResponseDTO(BaseModel):
    id: str
    owner_id: str | None = None
    title: str
    location: str
    rent: str = Field(
        description="Monthly rent (decimal as string)",
        pattern=r"^\d+(\.\d{1,2})?$",
        examples=["18500.00"],
    )
    room_type: str
    tags: list[str] = Field(default_factory=list)
    image_url: str = ""
    created_at: datetime | None = None


class ListingCollectionResponseDTO(BaseModel):
    """Full raw listing collection, newest first."""

    listings: list[ListingResponseDTO]
    total: int

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "listings": [
                    {
                        "id": "3f1c2a9e-6a57-4a5e-9a0b-4a8f6f0c2d11",
                        "owner_id": "b7f9b0de-0f0e-4a4f-8f5c-1f0d6c1c9a21",
                        "title": "Sunny 2BHK near Sony Signal",
                        "location": "Koramangala, Karnataka",
                        "rent": "28000.00",
                        "room_type": "2BHK",
                        "tags": ["Semi-furnished", "Pet friendly"],
                        "image_url": "https://images.example.com/listings/1.jpg",
                        "created_at": "2026-01-07T10:15:00Z",
                    }
                ],
                "total": 1,
            }
        }
    )
