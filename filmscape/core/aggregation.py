"""
Rating aggregation for movies.

A movie's ``average_rating`` and ``total_reviews`` are derived from its
reviews. ``recompute_movie_rating`` brings them back in line after a review
is created, updated or deleted. It only flushes; the caller commits, so the
review change and the new aggregate land in the same transaction.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from filmscape.database.models import Movie, Review

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


def compute_average(total: int, count: int) -> Decimal:
    """
    Mean of ``count`` ratings summing to ``total``, rounded half-up to two places.

    Returns Decimal('0.00') when there are no ratings.
    """
    if count == 0:
        return Decimal("0.00")
    return (Decimal(total) / Decimal(count)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def recompute_movie_rating(session: Session, movie_id: int) -> Optional[Tuple[Decimal, int]]:
    """
    Recompute and store the aggregate rating fields of a movie.

    Pending review changes must be flushed before calling this. The movie
    row is selected FOR UPDATE so concurrent recomputations of the same
    movie serialise on backends with row locks.

    Args:
        session: Database session (transaction owned by the caller)
        movie_id: Movie ID

    Returns:
        (average_rating, total_reviews), or None if the movie does not exist
    """
    movie = session.query(Movie).filter(Movie.id == movie_id).with_for_update().first()
    if movie is None:
        logger.warning("Skipping rating recompute: movie %s not found", movie_id)
        return None

    count, total = session.query(
        func.count(Review.id),
        func.coalesce(func.sum(Review.rating), 0)
    ).filter(Review.movie_id == movie_id).one()

    average = compute_average(int(total), int(count))
    movie.average_rating = average
    movie.total_reviews = int(count)
    session.flush()

    logger.debug("Movie %s aggregate: average=%s total=%s", movie_id, average, count)
    return average, int(count)


def recompute_all_movie_ratings(session: Session) -> int:
    """
    Recompute aggregates for every movie and commit.

    Used to repair aggregates written before a failed or interrupted
    mutation, or rows loaded directly into the database.

    Args:
        session: Database session

    Returns:
        Number of movies whose stored aggregate changed
    """
    changed = 0
    movie_ids = [movie_id for (movie_id,) in session.query(Movie.id).order_by(Movie.id)]
    for movie_id in movie_ids:
        movie = session.get(Movie, movie_id)
        before = (Decimal(movie.average_rating or 0), movie.total_reviews)
        after = recompute_movie_rating(session, movie_id)
        if after is not None and (before[0] != after[0] or before[1] != after[1]):
            logger.info(
                "Repaired movie %s aggregate: %s/%s -> %s/%s",
                movie_id, before[0], before[1], after[0], after[1]
            )
            changed += 1
    session.commit()
    return changed


def find_stale_movies(session: Session) -> list:
    """
    List movies whose stored aggregate disagrees with their reviews.

    Returns:
        List of dicts with movie_id, stored and expected values
    """
    stats = dict(
        (movie_id, (count, total))
        for movie_id, count, total in session.query(
            Review.movie_id, func.count(Review.id), func.sum(Review.rating)
        ).group_by(Review.movie_id)
    )

    stale = []
    for movie in session.query(Movie).order_by(Movie.id):
        count, total = stats.get(movie.id, (0, 0))
        expected = compute_average(int(total or 0), int(count))
        stored = Decimal(movie.average_rating or 0).quantize(TWO_PLACES)
        if stored != expected or movie.total_reviews != count:
            stale.append({
                'movie_id': movie.id,
                'stored_average': stored,
                'stored_total': movie.total_reviews,
                'expected_average': expected,
                'expected_total': count,
            })
    return stale
