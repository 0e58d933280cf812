"""Authentication models."""

from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field


class Permission(str, Enum):
    """Capabilities checked by the permission collaborator.

    ADMIN implies every other permission.
    """
    ADMIN = "admin"
    MANAGE_REQUESTS = "manage_requests"
    MANAGE_BADGES = "manage_badges"


class AuthUser(BaseModel):
    """Authenticated user identity."""
    user_id: str = Field(..., min_length=1, max_length=128)
    display_name: str | None = None
    permissions: list[Permission] = Field(default_factory=list)


class UserCreate(BaseModel):
    """Model for registering a user."""
    user_id: str = Field(..., min_length=1, max_length=128)
    display_name: str | None = Field(default=None, max_length=100)
    permissions: list[Permission] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


class AuthSessionResponse(BaseModel):
    """Response payload for a newly issued session."""
    session_token: str
    expires_at: datetime
    user: AuthUser
