"""
User profile and watchlist API endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from filmscape.api.dependencies import get_db, get_current_user, require_admin, ensure_same_user
from filmscape.api.models.common import MessageResponse, Pagination, page_offset
from filmscape.api.models.review import ReviewResponse
from filmscape.api.models.user import (
    UserCreate, UserUpdate, UserResponse, UserProfile, UserStats,
    UserEnvelope, UserProfileEnvelope, UserList,
)
from filmscape.api.models.watchlist import (
    WatchlistCreate, WatchlistUpdate, WatchlistEntryResponse, WatchlistEnvelope, WatchlistResponse,
)
from filmscape.database import crud
from filmscape.database.models import User, WatchlistStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

RECENT_REVIEWS_ON_PROFILE = 5


@router.post("", response_model=UserEnvelope, status_code=201)
def create_user(user_in: UserCreate, db: Session = Depends(get_db)):
    """Create a new user."""
    user = crud.create_user(
        db,
        username=user_in.username,
        email=user_in.email,
        bio=user_in.bio,
        profile_picture=user_in.profile_picture,
    )
    logger.info("Created user %s (%s)", user.id, user.username)
    return UserEnvelope(message="User created successfully", user=UserResponse.model_validate(user))


@router.get("", response_model=UserList)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """List users, newest first (admin only)."""
    users = crud.get_users(db, skip=page_offset(page, limit), limit=limit)
    total = crud.get_user_count(db)
    return UserList(
        users=[UserResponse.model_validate(u) for u in users],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{user_id}", response_model=UserProfileEnvelope)
def get_user(user_id: int, db: Session = Depends(get_db)):
    """Get user profile with activity stats and recent reviews."""
    user = crud.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    recent = crud.get_reviews_by_user(db, user_id, limit=RECENT_REVIEWS_ON_PROFILE)
    profile = UserProfile(
        **UserResponse.model_validate(user).model_dump(),
        stats=UserStats(**crud.get_user_stats(db, user_id)),
        recent_reviews=[ReviewResponse.model_validate(r) for r in recent],
    )
    return UserProfileEnvelope(user=profile)


@router.put("/{user_id}", response_model=UserEnvelope)
def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update a profile (self or admin)."""
    if current_user.id != user_id and not current_user.is_admin:
        raise HTTPException(status_code=403, detail="You can only update your own profile")
    if not crud.get_user(db, user_id):
        raise HTTPException(status_code=404, detail="User not found")

    updates = user_in.model_dump(exclude_unset=True)
    for field in ('username', 'email'):
        if field in updates and updates[field] is None:
            del updates[field]
    user = crud.update_user(db, user_id, **updates)
    return UserEnvelope(message="Profile updated successfully", user=UserResponse.model_validate(user))


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete an account with its reviews and watchlist (self or admin)."""
    if current_user.id != user_id and not current_user.is_admin:
        raise HTTPException(status_code=403, detail="You can only delete your own account")
    if not crud.delete_user(db, user_id):
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("User %s deleted by %s", user_id, current_user.id)
    return MessageResponse(message="User deleted successfully")


# ==================== WATCHLIST ====================

@router.get("/{user_id}/watchlist", response_model=WatchlistResponse)
def get_watchlist(
    user_id: int,
    status: WatchlistStatus | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the acting user's watchlist, newest first."""
    ensure_same_user(current_user, user_id, "You can only access your own watchlist")
    entries = crud.get_watchlist(db, user_id, status=status)
    return WatchlistResponse(watchlist=[WatchlistEntryResponse.model_validate(e) for e in entries])


@router.post("/{user_id}/watchlist", response_model=WatchlistEnvelope, status_code=201)
def add_to_watchlist(
    user_id: int,
    entry_in: WatchlistCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Add a movie to the acting user's watchlist."""
    ensure_same_user(current_user, user_id, "You can only add to your own watchlist")
    if not crud.get_movie(db, entry_in.movie_id):
        raise HTTPException(status_code=404, detail="Movie not found")
    try:
        entry = crud.add_to_watchlist(
            db,
            user_id=user_id,
            movie_id=entry_in.movie_id,
            status=entry_in.status,
            notes=entry_in.notes,
            priority=entry_in.priority,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return WatchlistEnvelope(
        message="Movie added to watchlist successfully",
        watchlist_item=WatchlistEntryResponse.model_validate(entry),
    )


@router.put("/{user_id}/watchlist/{movie_id}", response_model=WatchlistEnvelope)
def update_watchlist_entry(
    user_id: int,
    movie_id: int,
    entry_in: WatchlistUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update status, notes or priority of a watchlist entry."""
    ensure_same_user(current_user, user_id, "You can only update your own watchlist")
    try:
        entry = crud.update_watchlist_entry(
            db, user_id, movie_id, **entry_in.model_dump(exclude_unset=True)
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not entry:
        raise HTTPException(status_code=404, detail="This movie is not in your watchlist")
    return WatchlistEnvelope(
        message="Watchlist item updated successfully",
        watchlist_item=WatchlistEntryResponse.model_validate(entry),
    )


@router.delete("/{user_id}/watchlist/{movie_id}", response_model=MessageResponse)
def remove_from_watchlist(
    user_id: int,
    movie_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Remove a movie from the acting user's watchlist."""
    ensure_same_user(current_user, user_id, "You can only remove from your own watchlist")
    if not crud.remove_from_watchlist(db, user_id, movie_id):
        raise HTTPException(status_code=404, detail="This movie is not in your watchlist")
    return MessageResponse(message="Movie removed from watchlist successfully")
