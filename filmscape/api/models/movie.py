"""
Pydantic schemas for Movie API.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from filmscape.api.models.common import Pagination
from filmscape.api.models.review import ReviewResponse
from filmscape.database.models import MIN_MOVIE_YEAR, max_movie_year

IMDB_ID_PATTERN = r"^tt\d{7,8}$"


def _check_year_upper_bound(year: int | None) -> int | None:
    if year is not None and year > max_movie_year():
        raise ValueError(f"Year must be at most {max_movie_year()}")
    return year


class MovieDetails(BaseModel):
    """Optional descriptive fields shared by create and update bodies."""

    rated: str | None = Field(None, max_length=10)
    released: str | None = Field(None, max_length=50)
    runtime: str | None = Field(None, max_length=20)
    genre: str | None = Field(None, max_length=255)
    director: str | None = Field(None, max_length=255)
    writer: str | None = None
    actors: str | None = None
    plot: str | None = None
    language: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    awards: str | None = None
    poster: str | None = Field(None, max_length=500)
    imdb_rating: float | None = Field(None, ge=0, le=10)
    imdb_votes: str | None = Field(None, max_length=20)
    type: str | None = Field(None, max_length=20)
    box_office: str | None = Field(None, max_length=50)
    production: str | None = Field(None, max_length=255)
    website: str | None = Field(None, max_length=500)


class MovieCreate(MovieDetails):
    """Request body for adding a movie. Rating aggregates are not accepted."""

    imdb_id: str = Field(..., pattern=IMDB_ID_PATTERN)
    title: str = Field(..., min_length=1, max_length=255)
    year: int = Field(..., ge=MIN_MOVIE_YEAR)

    year_not_too_far_ahead = field_validator("year")(_check_year_upper_bound)


class MovieUpdate(MovieDetails):
    """Request body for updating a movie (all fields optional)."""

    title: str | None = Field(None, min_length=1, max_length=255)
    year: int | None = Field(None, ge=MIN_MOVIE_YEAR)

    year_not_too_far_ahead = field_validator("year")(_check_year_upper_bound)


class MovieImportRequest(BaseModel):
    """Request body for importing a movie from the OMDb catalog."""

    imdb_id: str = Field(..., pattern=IMDB_ID_PATTERN)


class MovieResponse(MovieDetails):
    """Response model for a single movie."""

    id: int
    imdb_id: str
    title: str
    year: int
    average_rating: float
    total_reviews: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class MovieDetail(MovieResponse):
    """Movie with its reviews, newest first."""

    reviews: list[ReviewResponse]


class MovieEnvelope(BaseModel):
    message: str | None = None
    movie: MovieResponse


class MovieDetailEnvelope(BaseModel):
    movie: MovieDetail


class MovieList(BaseModel):
    """Response model for a page of movies."""

    movies: list[MovieResponse]
    pagination: Pagination
