"""
Pydantic schemas for Review API.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from filmscape.api.models.common import MovieSummary, Pagination, UserSummary


class ReviewCreate(BaseModel):
    """Request body for submitting a review."""

    rating: int = Field(..., ge=1, le=10)
    review_text: str | None = Field(None, max_length=2000)
    is_spoiler: bool = False
    is_public: bool = True


class ReviewUpdate(BaseModel):
    """Request body for editing a review (all fields optional)."""

    rating: int | None = Field(None, ge=1, le=10)
    review_text: str | None = Field(None, max_length=2000)
    is_spoiler: bool | None = None
    is_public: bool | None = None


class ReviewResponse(BaseModel):
    """Response model for review."""

    id: int
    user_id: int
    movie_id: int
    rating: int
    review_text: str | None = None
    is_spoiler: bool
    is_public: bool
    likes_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user: UserSummary | None = None
    movie: MovieSummary | None = None

    class Config:
        from_attributes = True


class ReviewEnvelope(BaseModel):
    message: str | None = None
    review: ReviewResponse


class ReviewList(BaseModel):
    reviews: list[ReviewResponse]
    pagination: Pagination
