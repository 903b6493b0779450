"""
Review API endpoints.

Every mutation recomputes the movie's aggregate rating in the same
transaction, so the response already reflects the new average.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from filmscape.api.dependencies import get_db, get_current_user, ensure_same_user
from filmscape.api.models.common import MessageResponse, Pagination, page_offset
from filmscape.api.models.review import (
    ReviewCreate, ReviewUpdate, ReviewResponse, ReviewEnvelope, ReviewList,
)
from filmscape.database import crud
from filmscape.database.models import User

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


def _get_review_or_404(db: Session, review_id: int):
    review = crud.get_review(db, review_id)
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    return review


@router.post("/movies/{movie_id}", response_model=ReviewEnvelope, status_code=201)
def submit_review(
    movie_id: int,
    review_in: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Submit the acting user's review of a movie."""
    if not crud.get_movie(db, movie_id):
        raise HTTPException(status_code=404, detail="Movie not found")
    try:
        review = crud.create_review(
            db,
            user_id=current_user.id,
            movie_id=movie_id,
            rating=review_in.rating,
            review_text=review_in.review_text,
            is_spoiler=review_in.is_spoiler,
            is_public=review_in.is_public,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ReviewEnvelope(
        message="Review submitted successfully",
        review=ReviewResponse.model_validate(review),
    )


@router.put("/{review_id}", response_model=ReviewEnvelope)
def update_review(
    review_id: int,
    review_in: ReviewUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Edit one of the acting user's reviews."""
    review = _get_review_or_404(db, review_id)
    ensure_same_user(current_user, review.user_id, "You can only edit your own reviews")

    updates = review_in.model_dump(exclude_unset=True)
    for field in ('rating', 'is_spoiler', 'is_public'):
        if field in updates and updates[field] is None:
            del updates[field]
    try:
        review = crud.update_review(db, review_id, **updates)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ReviewEnvelope(
        message="Review updated successfully",
        review=ReviewResponse.model_validate(review),
    )


@router.delete("/{review_id}", response_model=MessageResponse)
def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete one of the acting user's reviews."""
    review = _get_review_or_404(db, review_id)
    ensure_same_user(current_user, review.user_id, "You can only delete your own reviews")
    crud.delete_review(db, review_id)
    return MessageResponse(message="Review deleted successfully")


@router.get("/user/{user_id}", response_model=ReviewList)
def list_user_reviews(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
):
    """Get a page of a user's reviews, newest first."""
    if not crud.get_user(db, user_id):
        raise HTTPException(status_code=404, detail="User not found")
    reviews = crud.get_reviews_by_user(db, user_id, skip=page_offset(page, limit), limit=limit)
    total = crud.count_reviews_by_user(db, user_id)
    return ReviewList(
        reviews=[ReviewResponse.model_validate(r) for r in reviews],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("", response_model=ReviewList)
def list_recent_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
):
    """Get the most recent public reviews across all movies."""
    reviews, total = crud.get_recent_reviews(db, skip=page_offset(page, limit), limit=limit)
    return ReviewList(
        reviews=[ReviewResponse.model_validate(r) for r in reviews],
        pagination=Pagination.build(page, limit, total),
    )
