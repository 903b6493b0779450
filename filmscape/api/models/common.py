"""
Shared pydantic schemas: pagination envelope and embedded summaries.
"""

import math

from pydantic import BaseModel


class Pagination(BaseModel):
    """Pagination block attached to list responses."""

    current_page: int
    total_pages: int
    total: int
    limit: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total=total,
            limit=limit,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


def page_offset(page: int, limit: int) -> int:
    """Rows to skip for a 1-based page number."""
    return (page - 1) * limit


class MessageResponse(BaseModel):
    """Body of responses that only carry a message."""

    message: str


class UserSummary(BaseModel):
    """User fields embedded in reviews."""

    id: int
    username: str
    profile_picture: str | None = None

    class Config:
        from_attributes = True


class MovieSummary(BaseModel):
    """Movie fields embedded in reviews and watchlist entries."""

    id: int
    imdb_id: str
    title: str
    year: int
    poster: str | None = None
    genre: str | None = None
    runtime: str | None = None
    imdb_rating: float | None = None
    average_rating: float

    class Config:
        from_attributes = True
