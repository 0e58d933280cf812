"""Deletion request and deletion vote models."""

from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, computed_field

from mediavote.tally import percentage
from mediavote.utils.helpers import utcnow


class MediaType(str, Enum):
    """Kind of library media a deletion request targets."""
    MOVIE = "movie"
    TV = "tv"


class DeletionRequestStatus(str, Enum):
    """Lifecycle status of a deletion request.

    PENDING is reserved for a moderation step and is not entered by
    create(), which opens voting immediately.
    """
    PENDING = "pending"
    VOTING = "voting"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


OPEN_STATUSES = (DeletionRequestStatus.PENDING, DeletionRequestStatus.VOTING)


class DeletionRequestCreate(BaseModel):
    """Model for creating a deletion request."""
    media_id: int = Field(..., ge=1)
    media_type: MediaType
    tmdb_id: int = Field(..., ge=1)
    title: str | None = Field(default=None, max_length=500)
    poster_path: str | None = None
    reason: str | None = Field(default=None, max_length=2000)

    model_config = {"extra": "forbid"}


class DeletionRequest(BaseModel):
    """Deletion request model for API responses."""
    id: str = Field(..., alias="_id")
    media_id: int
    media_type: MediaType
    tmdb_id: int
    title: str
    poster_path: str | None = None
    status: DeletionRequestStatus
    reason: str | None = None
    requested_by: str
    voting_ends_at: datetime
    votes_for: int = 0
    votes_against: int = 0
    processed_at: datetime | None = None
    processed_by: str | None = None
    executed_at: datetime | None = None
    executed_by: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    @classmethod
    def from_doc(cls, doc: dict) -> "DeletionRequest":
        doc = dict(doc)
        doc["_id"] = str(doc["_id"])
        return cls(**doc)

    def is_voting_active_at(self, now: datetime) -> bool:
        """Whether votes are accepted at the given instant."""
        return self.status == DeletionRequestStatus.VOTING and now < self.voting_ends_at

    @computed_field
    @property
    def is_voting_active(self) -> bool:
        return self.is_voting_active_at(utcnow())

    @computed_field
    @property
    def total_votes(self) -> int:
        return self.votes_for + self.votes_against

    @computed_field
    @property
    def vote_percentage(self) -> float:
        """Percentage of votes in favour of deletion (0-100)."""
        return percentage(self.votes_for, self.votes_against)


class DeletionVoteCreate(BaseModel):
    """Model for casting a vote. True votes for deletion, False to keep."""
    vote: bool

    model_config = {"extra": "forbid"}


class DeletionVote(BaseModel):
    """Deletion vote model for API responses."""
    id: str = Field(..., alias="_id")
    deletion_request_id: str
    user_id: str
    vote: bool
    created_at: datetime

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    @classmethod
    def from_doc(cls, doc: dict) -> "DeletionVote":
        doc = dict(doc)
        doc["_id"] = str(doc["_id"])
        doc["deletion_request_id"] = str(doc["deletion_request_id"])
        return cls(**doc)


class PageInfo(BaseModel):
    """Pagination details for list responses."""
    pages: int
    page_size: int
    results: int
    page: int


class DeletionRequestPage(BaseModel):
    """Paginated deletion request results."""
    page_info: PageInfo
    results: list[DeletionRequest]
