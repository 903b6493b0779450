"""
Pydantic schemas for User API.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from filmscape.api.models.common import Pagination
from filmscape.api.models.review import ReviewResponse

USERNAME_PATTERN = "^[A-Za-z0-9]+$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserCreate(BaseModel):
    """Request body for creating a user."""

    username: str = Field(..., min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    bio: str | None = Field(None, max_length=500)
    profile_picture: str | None = Field(None, max_length=500)


class UserUpdate(BaseModel):
    """Request body for updating a user (all fields optional)."""

    username: str | None = Field(None, min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    bio: str | None = Field(None, max_length=500)
    profile_picture: str | None = Field(None, max_length=500)


class UserResponse(BaseModel):
    """Response model for user."""

    id: int
    username: str
    email: str
    bio: str | None = None
    profile_picture: str | None = None
    is_admin: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class UserStats(BaseModel):
    total_reviews: int
    total_watchlist: int


class UserProfile(UserResponse):
    """User with activity counts and latest reviews."""

    stats: UserStats
    recent_reviews: list[ReviewResponse]


class UserEnvelope(BaseModel):
    message: str | None = None
    user: UserResponse


class UserProfileEnvelope(BaseModel):
    user: UserProfile


class UserList(BaseModel):
    users: list[UserResponse]
    pagination: Pagination
