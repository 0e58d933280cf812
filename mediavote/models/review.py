"""Media review models."""

from datetime import datetime
from pydantic import BaseModel, Field

from mediavote.models.deletion import MediaType


class MediaReviewCreate(BaseModel):
    """Model for writing a review."""
    media_id: int = Field(..., ge=1)
    media_type: MediaType
    rating: int | None = Field(default=None, ge=1, le=10)
    content: str | None = Field(default=None, max_length=5000)

    model_config = {"extra": "forbid"}


class MediaReview(BaseModel):
    """Media review model for API responses."""
    id: str = Field(..., alias="_id")
    user_id: str
    media_id: int
    media_type: MediaType
    rating: int | None = None
    content: str | None = None
    created_at: datetime

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


class Leader(BaseModel):
    """User with the most qualifying events in a window."""
    user_id: str
    count: int
