"""
Movie API endpoints.
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query, HTTPException
from sqlalchemy.orm import Session

from filmscape.api.dependencies import get_db, require_admin, get_catalog_client
from filmscape.api.models.common import MessageResponse, Pagination, page_offset
from filmscape.api.models.movie import (
    MovieCreate, MovieUpdate, MovieImportRequest, MovieResponse, MovieDetail,
    MovieEnvelope, MovieDetailEnvelope, MovieList,
)
from filmscape.api.models.review import ReviewResponse, ReviewList
from filmscape.core.catalog import OMDbClient, CatalogError, CatalogNotFoundError
from filmscape.database import crud
from filmscape.database.models import User, MIN_MOVIE_YEAR

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/movies", tags=["movies"])

SortField = Literal['title', 'year', 'imdb_rating', 'average_rating', 'total_reviews', 'created_at']


def _get_movie_or_404(db: Session, movie_id: int):
    movie = crud.get_movie(db, movie_id)
    if not movie:
        raise HTTPException(status_code=404, detail="Movie not found")
    return movie


@router.get("", response_model=MovieList)
def list_movies(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = Query(None, min_length=1, max_length=100),
    genre: str | None = Query(None, min_length=1, max_length=50),
    year: int | None = Query(None, ge=MIN_MOVIE_YEAR),
    min_rating: float | None = Query(None, ge=0, le=10),
    sort_by: SortField = Query('created_at'),
    sort_order: Literal['ASC', 'DESC'] = Query('DESC'),
    db: Session = Depends(get_db),
):
    """List movies with filtering, sorting and pagination."""
    movies, total = crud.search_movies(
        db,
        search=search,
        genre=genre,
        year=year,
        min_rating=min_rating,
        sort_by=sort_by,
        sort_order=sort_order,
        skip=page_offset(page, limit),
        limit=limit,
    )
    return MovieList(
        movies=[MovieResponse.model_validate(m) for m in movies],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=MovieEnvelope, status_code=201)
def create_movie(
    movie_in: MovieCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Add a movie to the catalog (admin only)."""
    try:
        movie = crud.create_movie(db, **movie_in.model_dump(exclude_none=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("Admin %s added movie %s (%s)", admin.id, movie.id, movie.imdb_id)
    return MovieEnvelope(message="Movie added successfully", movie=MovieResponse.model_validate(movie))


@router.post("/import", response_model=MovieEnvelope, status_code=201)
def import_movie(
    import_in: MovieImportRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    catalog: OMDbClient = Depends(get_catalog_client),
):
    """Create a movie from its OMDb catalog entry (admin only)."""
    if crud.get_movie_by_imdb_id(db, import_in.imdb_id):
        raise HTTPException(status_code=409, detail="A movie with this IMDb ID already exists")
    try:
        fields = catalog.fetch_movie_fields(import_in.imdb_id)
    except CatalogNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CatalogError as e:
        raise HTTPException(status_code=502, detail=str(e))

    try:
        movie = crud.create_movie(db, **{k: v for k, v in fields.items() if v is not None})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("Admin %s imported movie %s from OMDb", admin.id, movie.imdb_id)
    return MovieEnvelope(message="Movie imported successfully", movie=MovieResponse.model_validate(movie))


@router.get("/imdb/{imdb_id}", response_model=MovieDetailEnvelope)
def get_movie_by_imdb_id(imdb_id: str, db: Session = Depends(get_db)):
    """Get movie details with reviews by IMDb ID."""
    movie = crud.get_movie_by_imdb_id(db, imdb_id)
    if not movie:
        raise HTTPException(status_code=404, detail="Movie not found")
    return MovieDetailEnvelope(movie=MovieDetail.model_validate(movie))


@router.get("/{movie_id}", response_model=MovieDetailEnvelope)
def get_movie(movie_id: int, db: Session = Depends(get_db)):
    """Get movie details with reviews by ID."""
    movie = _get_movie_or_404(db, movie_id)
    return MovieDetailEnvelope(movie=MovieDetail.model_validate(movie))


@router.put("/{movie_id}", response_model=MovieEnvelope)
def update_movie(
    movie_id: int,
    movie_in: MovieUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Update catalog fields of a movie (admin only)."""
    _get_movie_or_404(db, movie_id)

    updates = movie_in.model_dump(exclude_unset=True)
    for field in ('title', 'year'):
        if field in updates and updates[field] is None:
            del updates[field]
    try:
        movie = crud.update_movie(db, movie_id, **updates)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return MovieEnvelope(message="Movie updated successfully", movie=MovieResponse.model_validate(movie))


@router.delete("/{movie_id}", response_model=MessageResponse)
def delete_movie(
    movie_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Delete a movie with its reviews and watchlist entries (admin only)."""
    if not crud.delete_movie(db, movie_id):
        raise HTTPException(status_code=404, detail="Movie not found")
    logger.info("Admin %s deleted movie %s", admin.id, movie_id)
    return MessageResponse(message="Movie deleted successfully")


@router.get("/{movie_id}/reviews", response_model=ReviewList)
def list_movie_reviews(
    movie_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
):
    """Get a page of a movie's reviews, newest first."""
    _get_movie_or_404(db, movie_id)
    reviews = crud.get_reviews_by_movie(db, movie_id, skip=page_offset(page, limit), limit=limit)
    total = crud.count_reviews_by_movie(db, movie_id)
    return ReviewList(
        reviews=[ReviewResponse.model_validate(r) for r in reviews],
        pagination=Pagination.build(page, limit, total),
    )
