"""
Pydantic schemas for API request/response validation.
"""

from filmscape.api.models.common import Pagination, MessageResponse, UserSummary, MovieSummary
from filmscape.api.models.review import (
    ReviewCreate, ReviewUpdate, ReviewResponse, ReviewEnvelope, ReviewList,
)
from filmscape.api.models.user import (
    UserCreate, UserUpdate, UserResponse, UserProfile, UserEnvelope, UserProfileEnvelope, UserList,
)
from filmscape.api.models.movie import (
    MovieCreate, MovieUpdate, MovieImportRequest, MovieResponse, MovieDetail,
    MovieEnvelope, MovieDetailEnvelope, MovieList,
)
from filmscape.api.models.watchlist import (
    WatchlistCreate, WatchlistUpdate, WatchlistEntryResponse, WatchlistEnvelope, WatchlistResponse,
)

__all__ = [
    "Pagination",
    "MessageResponse",
    "UserSummary",
    "MovieSummary",
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewEnvelope",
    "ReviewList",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "UserProfile",
    "UserEnvelope",
    "UserProfileEnvelope",
    "UserList",
    "MovieCreate",
    "MovieUpdate",
    "MovieImportRequest",
    "MovieResponse",
    "MovieDetail",
    "MovieEnvelope",
    "MovieDetailEnvelope",
    "MovieList",
    "WatchlistCreate",
    "WatchlistUpdate",
    "WatchlistEntryResponse",
    "WatchlistEnvelope",
    "WatchlistResponse",
]
