"""
CRUD operations for User, Movie, Review, and WatchlistEntry models.

Review mutations keep the owning movie's aggregate rating in step: the
review change is flushed, the aggregate recomputed, and both committed
together. Uniqueness violations surface as ``DuplicateEntryError``.
"""

import logging
from typing import List, Optional, Dict, Any, Tuple
from sqlalchemy import func, and_, asc, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from filmscape.core import aggregation
from filmscape.database.exceptions import DuplicateEntryError
from filmscape.database.models import (
    User, Movie, Review, WatchlistEntry, WatchlistStatus, MIN_MOVIE_YEAR, max_movie_year,
)

logger = logging.getLogger(__name__)

MOVIE_SORT_FIELDS = {
    'title': Movie.title,
    'year': Movie.year,
    'imdb_rating': Movie.imdb_rating,
    'average_rating': Movie.average_rating,
    'total_reviews': Movie.total_reviews,
    'created_at': Movie.created_at,
}
MOVIE_DERIVED_FIELDS = {'average_rating', 'total_reviews'}
MOVIE_UPDATABLE_FIELDS = {
    'imdb_id', 'title', 'year', 'rated', 'released', 'runtime', 'genre', 'director',
    'writer', 'actors', 'plot', 'language', 'country', 'awards', 'poster',
    'imdb_rating', 'imdb_votes', 'type', 'box_office', 'production', 'website',
}
USER_UPDATABLE_FIELDS = {'username', 'email', 'bio', 'profile_picture'}
REVIEW_UPDATABLE_FIELDS = {'rating', 'review_text', 'is_spoiler', 'is_public'}
WATCHLIST_UPDATABLE_FIELDS = {'status', 'notes', 'priority'}


def _is_unique_violation(exc: IntegrityError) -> bool:
    return "unique" in str(exc.orig).lower()


def _flush_or_conflict(session: Session, resource: str, message: str) -> None:
    """Flush pending changes, turning a unique-constraint failure into DuplicateEntryError."""
    try:
        session.flush()
    except IntegrityError as exc:
        session.rollback()
        if _is_unique_violation(exc):
            logger.info("Rejected duplicate %s: %s", resource, message)
            raise DuplicateEntryError(resource, message) from exc
        raise


def _commit_with_rating(session: Session, movie_ids) -> None:
    """Recompute aggregates for ``movie_ids`` and commit everything as one unit."""
    try:
        for movie_id in sorted(set(movie_ids)):
            aggregation.recompute_movie_rating(session, movie_id)
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Rating recompute failed for movies %s; review change rolled back",
                         sorted(set(movie_ids)))
        raise


def _validate_rating(rating: int) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int) or not (1 <= rating <= 10):
        raise ValueError("Rating must be an integer between 1 and 10")


def _validate_year(year: int) -> None:
    if not (MIN_MOVIE_YEAR <= year <= max_movie_year()):
        raise ValueError(f"Year must be between {MIN_MOVIE_YEAR} and {max_movie_year()}")


def _validate_watchlist_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    if 'status' in fields and fields['status'] is not None:
        try:
            fields['status'] = WatchlistStatus(fields['status'])
        except ValueError:
            raise ValueError("Status must be want_to_watch, watching, or watched") from None
    if fields.get('priority') is not None and not (0 <= fields['priority'] <= 5):
        raise ValueError("Priority must be between 0 and 5")
    if fields.get('notes') is not None and len(fields['notes']) > 500:
        raise ValueError("Notes cannot exceed 500 characters")
    return fields


# ==================== USER CRUD OPERATIONS ====================

def create_user(
    session: Session,
    username: str,
    email: str,
    bio: Optional[str] = None,
    profile_picture: Optional[str] = None,
    is_admin: bool = False,
) -> User:
    """
    Create a new user.

    Args:
        session: Database session
        username: Unique username
        email: Unique email address
        bio: Short biography (optional)
        profile_picture: Profile picture URL (optional)
        is_admin: Whether the user manages the movie catalog

    Returns:
        Created User object

    Raises:
        DuplicateEntryError: If the username or email is already taken
    """
    _check_user_identity_free(session, username=username, email=email)

    user = User(
        username=username,
        email=email,
        bio=bio,
        profile_picture=profile_picture,
        is_admin=is_admin,
    )
    session.add(user)
    _flush_or_conflict(session, "user", "Username or email already exists")
    session.commit()
    session.refresh(user)
    return user


def _check_user_identity_free(
    session: Session,
    username: Optional[str] = None,
    email: Optional[str] = None,
    exclude_user_id: Optional[int] = None,
) -> None:
    if username:
        query = session.query(User).filter(User.username == username)
        if exclude_user_id is not None:
            query = query.filter(User.id != exclude_user_id)
        if query.first():
            raise DuplicateEntryError("user", "Username already taken")
    if email:
        query = session.query(User).filter(User.email == email)
        if exclude_user_id is not None:
            query = query.filter(User.id != exclude_user_id)
        if query.first():
            raise DuplicateEntryError("user", "Email already registered")


def get_user(session: Session, user_id: int) -> Optional[User]:
    """
    Get a user by ID.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        User object or None if not found
    """
    return session.query(User).filter(User.id == user_id).first()


def get_users(
    session: Session,
    skip: int = 0,
    limit: int = 100
) -> List[User]:
    """
    Get a list of users, newest first, with pagination.

    Args:
        session: Database session
        skip: Number of records to skip
        limit: Maximum number of records to return

    Returns:
        List of User objects
    """
    return session.query(User).order_by(
        desc(User.created_at), desc(User.id)
    ).offset(skip).limit(limit).all()


def get_user_count(session: Session) -> int:
    """Get total count of users."""
    return session.query(func.count(User.id)).scalar()


def update_user(
    session: Session,
    user_id: int,
    **kwargs
) -> Optional[User]:
    """
    Update user profile fields.

    Args:
        session: Database session
        user_id: User ID
        **kwargs: Fields to update (username, email, bio, profile_picture)

    Returns:
        Updated User object or None if not found

    Raises:
        DuplicateEntryError: If the new username or email belongs to another user
    """
    user = get_user(session, user_id)
    if not user:
        return None

    updates = {k: v for k, v in kwargs.items() if k in USER_UPDATABLE_FIELDS}
    _check_user_identity_free(
        session,
        username=updates.get('username'),
        email=updates.get('email'),
        exclude_user_id=user_id,
    )
    for key, value in updates.items():
        setattr(user, key, value)
    _flush_or_conflict(session, "user", "Username or email already exists")
    session.commit()
    session.refresh(user)
    return user


def delete_user(session: Session, user_id: int) -> bool:
    """
    Delete a user together with their reviews and watchlist.

    Aggregates of every movie the user reviewed are recomputed in the same
    transaction.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        True if user was deleted, False if not found
    """
    user = get_user(session, user_id)
    if not user:
        return False

    reviewed_movie_ids = [review.movie_id for review in user.reviews]
    session.delete(user)
    session.flush()
    _commit_with_rating(session, reviewed_movie_ids)
    return True


def get_user_stats(session: Session, user_id: int) -> Dict[str, int]:
    """
    Get review and watchlist counts for a user.

    Returns:
        Dictionary with total_reviews and total_watchlist
    """
    return {
        'total_reviews': count_reviews_by_user(session, user_id),
        'total_watchlist': count_watchlist(session, user_id),
    }


# ==================== MOVIE CRUD OPERATIONS ====================

def create_movie(
    session: Session,
    imdb_id: str,
    title: str,
    year: int,
    **details
) -> Movie:
    """
    Create a new movie.

    Args:
        session: Database session
        imdb_id: External catalog ID (e.g. 'tt0133093')
        title: Movie title
        year: Release year
        **details: Optional descriptive fields (genre, director, plot, ...)

    Returns:
        Created Movie object

    Raises:
        ValueError: If the year is out of range or a derived field is passed
        DuplicateEntryError: If a movie with this IMDb ID exists
    """
    derived = MOVIE_DERIVED_FIELDS.intersection(details)
    if derived:
        raise ValueError(f"Derived fields cannot be set directly: {', '.join(sorted(derived))}")
    _validate_year(year)

    if get_movie_by_imdb_id(session, imdb_id):
        raise DuplicateEntryError("movie", "A movie with this IMDb ID already exists")

    fields = {k: v for k, v in details.items() if k in MOVIE_UPDATABLE_FIELDS}
    movie = Movie(imdb_id=imdb_id, title=title, year=year, **fields)
    session.add(movie)
    _flush_or_conflict(session, "movie", "A movie with this IMDb ID already exists")
    session.commit()
    session.refresh(movie)
    return movie


def get_movie(session: Session, movie_id: int) -> Optional[Movie]:
    """
    Get a movie by ID.

    Args:
        session: Database session
        movie_id: Movie ID

    Returns:
        Movie object or None if not found
    """
    return session.query(Movie).filter(Movie.id == movie_id).first()


def get_movie_by_imdb_id(session: Session, imdb_id: str) -> Optional[Movie]:
    """Get a movie by its IMDb ID, or None."""
    return session.query(Movie).filter(Movie.imdb_id == imdb_id).first()


def get_movie_count(session: Session) -> int:
    """Get total count of movies."""
    return session.query(func.count(Movie.id)).scalar()


def search_movies(
    session: Session,
    search: Optional[str] = None,
    genre: Optional[str] = None,
    year: Optional[int] = None,
    min_rating: Optional[float] = None,
    sort_by: str = 'created_at',
    sort_order: str = 'DESC',
    skip: int = 0,
    limit: int = 20
) -> Tuple[List[Movie], int]:
    """
    Filter, sort and paginate movies.

    Args:
        session: Database session
        search: Case-insensitive title substring
        genre: Case-insensitive genre substring
        year: Exact release year
        min_rating: Minimum average review rating
        sort_by: One of MOVIE_SORT_FIELDS
        sort_order: 'ASC' or 'DESC'
        skip: Number of records to skip
        limit: Maximum number of records to return

    Returns:
        (page of Movie objects, total number of matches)

    Raises:
        ValueError: If sort_by or sort_order is not recognised
    """
    if sort_by not in MOVIE_SORT_FIELDS:
        raise ValueError(f"Invalid sort field: {sort_by}")
    if sort_order.upper() not in ('ASC', 'DESC'):
        raise ValueError("Sort order must be ASC or DESC")

    query = session.query(Movie)

    if search:
        query = query.filter(Movie.title.ilike(f"%{search}%"))

    if genre:
        query = query.filter(Movie.genre.ilike(f"%{genre}%"))

    if year:
        query = query.filter(Movie.year == year)

    if min_rating is not None:
        query = query.filter(Movie.average_rating >= min_rating)

    total = query.count()

    direction = asc if sort_order.upper() == 'ASC' else desc
    query = query.order_by(direction(MOVIE_SORT_FIELDS[sort_by]), direction(Movie.id))

    return query.offset(skip).limit(limit).all(), total


def update_movie(
    session: Session,
    movie_id: int,
    **kwargs
) -> Optional[Movie]:
    """
    Update catalog fields of a movie.

    The derived rating fields are rejected; they only change through
    review mutations.

    Args:
        session: Database session
        movie_id: Movie ID
        **kwargs: Fields to update

    Returns:
        Updated Movie object or None if not found

    Raises:
        ValueError: If a derived field is passed or the year is out of range
        DuplicateEntryError: If the new IMDb ID belongs to another movie
    """
    derived = MOVIE_DERIVED_FIELDS.intersection(kwargs)
    if derived:
        raise ValueError(f"Derived fields cannot be set directly: {', '.join(sorted(derived))}")

    movie = get_movie(session, movie_id)
    if not movie:
        return None

    if kwargs.get('year') is not None:
        _validate_year(kwargs['year'])
    new_imdb_id = kwargs.get('imdb_id')
    if new_imdb_id and new_imdb_id != movie.imdb_id and get_movie_by_imdb_id(session, new_imdb_id):
        raise DuplicateEntryError("movie", "A movie with this IMDb ID already exists")

    for key, value in kwargs.items():
        if key in MOVIE_UPDATABLE_FIELDS:
            setattr(movie, key, value)
    _flush_or_conflict(session, "movie", "A movie with this IMDb ID already exists")
    session.commit()
    session.refresh(movie)
    return movie


def delete_movie(session: Session, movie_id: int) -> bool:
    """
    Delete a movie with its reviews and watchlist entries.

    Returns:
        True if movie was deleted, False if not found
    """
    movie = get_movie(session, movie_id)
    if movie:
        session.delete(movie)
        session.commit()
        return True
    return False


# ==================== REVIEW CRUD OPERATIONS ====================

def create_review(
    session: Session,
    user_id: int,
    movie_id: int,
    rating: int,
    review_text: Optional[str] = None,
    is_spoiler: bool = False,
    is_public: bool = True,
) -> Review:
    """
    Submit a review and update the movie's aggregate rating.

    Args:
        session: Database session
        user_id: Reviewing user ID
        movie_id: Reviewed movie ID
        rating: Integer rating (1 to 10)
        review_text: Review body (optional)
        is_spoiler: Whether the text contains spoilers
        is_public: Whether the review appears in the public feed

    Returns:
        Created Review object

    Raises:
        ValueError: If rating is not an integer between 1 and 10
        DuplicateEntryError: If the user already reviewed this movie
    """
    _validate_rating(rating)
    if review_text is not None and len(review_text) > 2000:
        raise ValueError("Review text cannot exceed 2000 characters")

    if get_review_by_user_movie(session, user_id, movie_id):
        raise DuplicateEntryError("review", "You have already reviewed this movie")

    review = Review(
        user_id=user_id,
        movie_id=movie_id,
        rating=rating,
        review_text=review_text,
        is_spoiler=is_spoiler,
        is_public=is_public,
    )
    session.add(review)
    _flush_or_conflict(session, "review", "You have already reviewed this movie")
    _commit_with_rating(session, [movie_id])
    session.refresh(review)
    logger.info("User %s reviewed movie %s (rating=%s)", user_id, movie_id, rating)
    return review


def get_review(session: Session, review_id: int) -> Optional[Review]:
    """
    Get a review by ID.

    Args:
        session: Database session
        review_id: Review ID

    Returns:
        Review object or None if not found
    """
    return session.query(Review).filter(Review.id == review_id).first()


def get_review_by_user_movie(
    session: Session,
    user_id: int,
    movie_id: int
) -> Optional[Review]:
    """
    Get the review a user wrote for a movie.

    Args:
        session: Database session
        user_id: User ID
        movie_id: Movie ID

    Returns:
        Review object or None if not found
    """
    return session.query(Review).filter(
        and_(Review.user_id == user_id, Review.movie_id == movie_id)
    ).first()


def get_reviews_by_user(
    session: Session,
    user_id: int,
    skip: int = 0,
    limit: int = 100
) -> List[Review]:
    """Get a user's reviews, newest first."""
    return session.query(Review).filter(
        Review.user_id == user_id
    ).order_by(desc(Review.created_at), desc(Review.id)).offset(skip).limit(limit).all()


def count_reviews_by_user(session: Session, user_id: int) -> int:
    """Count the reviews written by a user."""
    return session.query(func.count(Review.id)).filter(Review.user_id == user_id).scalar()


def get_reviews_by_movie(
    session: Session,
    movie_id: int,
    skip: int = 0,
    limit: int = 100
) -> List[Review]:
    """Get the reviews of a movie, newest first."""
    return session.query(Review).filter(
        Review.movie_id == movie_id
    ).order_by(desc(Review.created_at), desc(Review.id)).offset(skip).limit(limit).all()


def count_reviews_by_movie(session: Session, movie_id: int) -> int:
    """Count the reviews of a movie."""
    return session.query(func.count(Review.id)).filter(Review.movie_id == movie_id).scalar()


def get_recent_reviews(
    session: Session,
    skip: int = 0,
    limit: int = 10
) -> Tuple[List[Review], int]:
    """
    Get public reviews across all movies, newest first.

    Returns:
        (page of Review objects, total number of public reviews)
    """
    query = session.query(Review).filter(Review.is_public.is_(True))
    total = query.count()
    reviews = query.order_by(
        desc(Review.created_at), desc(Review.id)
    ).offset(skip).limit(limit).all()
    return reviews, total


def get_review_count(session: Session) -> int:
    """Get total count of reviews."""
    return session.query(func.count(Review.id)).scalar()


def update_review(
    session: Session,
    review_id: int,
    **kwargs
) -> Optional[Review]:
    """
    Update a review and refresh the movie's aggregate rating.

    Args:
        session: Database session
        review_id: Review ID
        **kwargs: Fields to update (rating, review_text, is_spoiler, is_public)

    Returns:
        Updated Review object or None if not found

    Raises:
        ValueError: If the new rating is not an integer between 1 and 10
    """
    if 'rating' in kwargs:
        _validate_rating(kwargs['rating'])
    if kwargs.get('review_text') is not None and len(kwargs['review_text']) > 2000:
        raise ValueError("Review text cannot exceed 2000 characters")

    review = get_review(session, review_id)
    if not review:
        return None

    for key, value in kwargs.items():
        if key in REVIEW_UPDATABLE_FIELDS:
            setattr(review, key, value)
    session.flush()
    _commit_with_rating(session, [review.movie_id])
    session.refresh(review)
    return review


def delete_review(session: Session, review_id: int) -> bool:
    """
    Delete a review and refresh the movie's aggregate rating.

    Args:
        session: Database session
        review_id: Review ID

    Returns:
        True if review was deleted, False if not found
    """
    review = get_review(session, review_id)
    if not review:
        return False

    movie_id = review.movie_id
    session.delete(review)
    session.flush()
    _commit_with_rating(session, [movie_id])
    logger.info("Review %s deleted (movie %s)", review_id, movie_id)
    return True


# ==================== WATCHLIST CRUD OPERATIONS ====================

def add_to_watchlist(
    session: Session,
    user_id: int,
    movie_id: int,
    status: WatchlistStatus = WatchlistStatus.WANT_TO_WATCH,
    notes: Optional[str] = None,
    priority: int = 0,
) -> WatchlistEntry:
    """
    Add a movie to a user's watchlist.

    Args:
        session: Database session
        user_id: User ID
        movie_id: Movie ID
        status: Initial viewing status
        notes: Free-text notes (optional, up to 500 characters)
        priority: Priority 0 (lowest) to 5

    Returns:
        Created WatchlistEntry object

    Raises:
        ValueError: If status, notes or priority are invalid
        DuplicateEntryError: If the movie is already in the watchlist
    """
    fields = _validate_watchlist_fields({'status': status, 'notes': notes, 'priority': priority})

    if get_watchlist_entry(session, user_id, movie_id):
        raise DuplicateEntryError("watchlist", "This movie is already in your watchlist")

    entry = WatchlistEntry(user_id=user_id, movie_id=movie_id, **fields)
    session.add(entry)
    _flush_or_conflict(session, "watchlist", "This movie is already in your watchlist")
    session.commit()
    session.refresh(entry)
    return entry


def get_watchlist_entry(
    session: Session,
    user_id: int,
    movie_id: int
) -> Optional[WatchlistEntry]:
    """Get the watchlist entry for (user, movie), or None."""
    return session.query(WatchlistEntry).filter(
        and_(WatchlistEntry.user_id == user_id, WatchlistEntry.movie_id == movie_id)
    ).first()


def get_watchlist(
    session: Session,
    user_id: int,
    status: Optional[WatchlistStatus] = None
) -> List[WatchlistEntry]:
    """
    Get a user's watchlist, newest first.

    Args:
        session: Database session
        user_id: User ID
        status: Only return entries with this status (optional)

    Returns:
        List of WatchlistEntry objects
    """
    query = session.query(WatchlistEntry).filter(WatchlistEntry.user_id == user_id)
    if status is not None:
        query = query.filter(WatchlistEntry.status == WatchlistStatus(status))
    return query.order_by(desc(WatchlistEntry.created_at), desc(WatchlistEntry.id)).all()


def count_watchlist(session: Session, user_id: int) -> int:
    """Count the entries in a user's watchlist."""
    return session.query(func.count(WatchlistEntry.id)).filter(
        WatchlistEntry.user_id == user_id
    ).scalar()


def update_watchlist_entry(
    session: Session,
    user_id: int,
    movie_id: int,
    **kwargs
) -> Optional[WatchlistEntry]:
    """
    Update status, notes or priority of an existing watchlist entry in place.

    Returns:
        Updated WatchlistEntry object or None if not found

    Raises:
        ValueError: If status, notes or priority are invalid
    """
    updates = _validate_watchlist_fields(
        {k: v for k, v in kwargs.items() if k in WATCHLIST_UPDATABLE_FIELDS}
    )
    entry = get_watchlist_entry(session, user_id, movie_id)
    if not entry:
        return None

    for key, value in updates.items():
        if value is None and key != 'notes':
            continue
        setattr(entry, key, value)
    session.commit()
    session.refresh(entry)
    return entry


def remove_from_watchlist(session: Session, user_id: int, movie_id: int) -> bool:
    """
    Remove a movie from a user's watchlist.

    Returns:
        True if the entry was deleted, False if not found
    """
    entry = get_watchlist_entry(session, user_id, movie_id)
    if entry:
        session.delete(entry)
        session.commit()
        return True
    return False
