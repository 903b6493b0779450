"""
Pydantic schemas for Watchlist API.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from filmscape.api.models.common import MovieSummary
from filmscape.database.models import WatchlistStatus


class WatchlistCreate(BaseModel):
    """Request body for adding a movie to a watchlist."""

    movie_id: int = Field(..., gt=0)
    status: WatchlistStatus = WatchlistStatus.WANT_TO_WATCH
    notes: str | None = Field(None, max_length=500)
    priority: int = Field(0, ge=0, le=5)


class WatchlistUpdate(BaseModel):
    """Request body for updating a watchlist entry (all fields optional)."""

    status: WatchlistStatus | None = None
    notes: str | None = Field(None, max_length=500)
    priority: int | None = Field(None, ge=0, le=5)


class WatchlistEntryResponse(BaseModel):
    """Response model for a watchlist entry."""

    id: int
    user_id: int
    movie_id: int
    status: WatchlistStatus
    notes: str | None = None
    priority: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    movie: MovieSummary | None = None

    class Config:
        from_attributes = True


class WatchlistEnvelope(BaseModel):
    message: str | None = None
    watchlist_item: WatchlistEntryResponse


class WatchlistResponse(BaseModel):
    watchlist: list[WatchlistEntryResponse]
