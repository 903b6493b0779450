"""
SQLAlchemy ORM models for the Filmscape database.

This module defines the User, Movie, Review and WatchlistEntry tables with
their relationships and constraints. Movie carries two derived columns,
``average_rating`` and ``total_reviews``, maintained by
``filmscape.core.aggregation``.
"""

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import (
    Boolean, Integer, String, Text, Numeric, ForeignKey, Enum,
    CheckConstraint, UniqueConstraint, Index, TIMESTAMP
)
from sqlalchemy.orm import DeclarativeBase, relationship, Mapped, mapped_column
from sqlalchemy.sql import func


MIN_MOVIE_YEAR = 1888


def max_movie_year() -> int:
    """Latest accepted release year (announced titles up to five years out)."""
    return date.today().year + 5


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class WatchlistStatus(str, enum.Enum):
    """Viewing status of a watchlist entry."""

    WANT_TO_WATCH = "want_to_watch"
    WATCHING = "watching"
    WATCHED = "watched"


class User(Base):
    """
    User table storing profile information.

    Attributes:
        id: Primary key, auto-incremented
        username: Unique alphanumeric handle
        email: Unique email address
        bio: Free-text biography (optional)
        profile_picture: URL of the profile picture (optional)
        is_admin: Whether the user may manage the movie catalog
        created_at: Timestamp when record was created
        updated_at: Timestamp when record was last updated
    """
    __tablename__ = 'users'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    profile_picture: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        server_default=func.current_timestamp()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp()
    )

    # Relationships
    reviews: Mapped[List["Review"]] = relationship(
        "Review",
        back_populates="user",
        cascade="all, delete-orphan"
    )
    watchlist: Mapped[List["WatchlistEntry"]] = relationship(
        "WatchlistEntry",
        back_populates="user",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', is_admin={self.is_admin})>"


class Movie(Base):
    """
    Movie table storing catalog metadata and review aggregates.

    Attributes:
        id: Primary key, auto-incremented
        imdb_id: External catalog ID (unique, e.g. 'tt0133093')
        title: Movie title (required)
        year: Release year (required)
        imdb_rating: Rating reported by the external catalog (0-10)
        average_rating: Mean of all review ratings, two decimal places
        total_reviews: Number of reviews
        created_at: Timestamp when record was created
    """
    __tablename__ = 'movies'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    imdb_id: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    rated: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    released: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    runtime: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    genre: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    director: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    writer: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    actors: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    plot: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    language: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    awards: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    poster: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    imdb_rating: Mapped[Optional[Decimal]] = mapped_column(Numeric(3, 1), nullable=True)
    imdb_votes: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, default='movie')
    box_office: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    production: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Derived from reviews; see filmscape.core.aggregation
    average_rating: Mapped[Decimal] = mapped_column(
        Numeric(4, 2), nullable=False, default=Decimal("0")
    )
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        server_default=func.current_timestamp()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp()
    )

    # Relationships
    reviews: Mapped[List["Review"]] = relationship(
        "Review",
        back_populates="movie",
        cascade="all, delete-orphan",
        order_by="[desc(Review.created_at), desc(Review.id)]"
    )
    watchlist_entries: Mapped[List["WatchlistEntry"]] = relationship(
        "WatchlistEntry",
        back_populates="movie",
        cascade="all, delete-orphan"
    )

    # Indexes for common queries
    __table_args__ = (
        CheckConstraint(
            "average_rating >= 0 AND average_rating <= 10", name='check_average_rating_range'
        ),
        CheckConstraint("total_reviews >= 0", name='check_total_reviews_non_negative'),
        Index('idx_movies_title', 'title'),
        Index('idx_movies_year', 'year'),
        Index('idx_movies_average_rating', 'average_rating'),
    )

    def __repr__(self) -> str:
        return f"<Movie(id={self.id}, imdb_id='{self.imdb_id}', title='{self.title}', year={self.year})>"


class Review(Base):
    """
    Review table storing a user's rating and opinion of a movie.

    A user may review a given movie at most once.

    Attributes:
        id: Primary key, auto-incremented
        user_id: Foreign key to users table
        movie_id: Foreign key to movies table
        rating: Integer rating (1 to 10)
        review_text: Free-text review (optional, up to 2000 characters)
        is_spoiler: Whether the text reveals plot details
        is_public: Whether the review appears in the public feed
        likes_count: Number of likes received
    """
    __tablename__ = 'reviews'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False
    )
    movie_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey('movies.id', ondelete='CASCADE'),
        nullable=False
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_spoiler: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        server_default=func.current_timestamp()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp()
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="reviews")
    movie: Mapped["Movie"] = relationship("Movie", back_populates="reviews")

    # Constraints and indexes
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 10", name='check_review_rating_range'),
        UniqueConstraint('user_id', 'movie_id', name='unique_review_user_movie'),
        Index('idx_reviews_movie', 'movie_id'),
        Index('idx_reviews_rating', 'rating'),
        Index('idx_reviews_created', 'created_at'),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, user_id={self.user_id}, movie_id={self.movie_id}, rating={self.rating})>"


class WatchlistEntry(Base):
    """
    Watchlist table storing a user's intent to watch a movie.

    A movie appears at most once in a given user's watchlist.
    """
    __tablename__ = 'watchlist'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False
    )
    movie_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey('movies.id', ondelete='CASCADE'),
        nullable=False
    )
    status: Mapped[WatchlistStatus] = mapped_column(
        Enum(
            WatchlistStatus,
            name='watchlist_status',
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=WatchlistStatus.WANT_TO_WATCH
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        server_default=func.current_timestamp()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp()
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="watchlist")
    movie: Mapped["Movie"] = relationship("Movie", back_populates="watchlist_entries")

    __table_args__ = (
        CheckConstraint("priority >= 0 AND priority <= 5", name='check_watchlist_priority_range'),
        UniqueConstraint('user_id', 'movie_id', name='unique_watchlist_user_movie'),
        Index('idx_watchlist_user', 'user_id'),
        Index('idx_watchlist_movie', 'movie_id'),
        Index('idx_watchlist_status', 'status'),
    )

    def __repr__(self) -> str:
        return f"<WatchlistEntry(id={self.id}, user_id={self.user_id}, movie_id={self.movie_id}, status='{self.status.value}')>"
