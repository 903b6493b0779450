"""
Database connection management using SQLAlchemy.

This module builds the engine and session factory, and exposes the
``session_scope`` transaction helper used by the API layer: one session per
request, committed on success and rolled back on any exception.
"""

import logging
import os
from contextlib import contextmanager
from typing import Generator, Optional
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from filmscape.database.models import Base

logger = logging.getLogger(__name__)

# Default database path
DEFAULT_DB_PATH = "data/filmscape.db"

# Seconds a writer waits for another connection's lock before failing
SQLITE_BUSY_TIMEOUT = 15


def get_database_url(db_path: str = DEFAULT_DB_PATH) -> str:
    """
    Build a SQLAlchemy URL from a SQLite file path.

    Full URLs (anything containing '://') are returned unchanged, and
    ':memory:' maps to an in-memory database.

    Args:
        db_path: Path to SQLite database file, or a database URL

    Returns:
        SQLAlchemy database URL
    """
    if "://" in db_path:
        return db_path
    if db_path == ":memory:":
        return "sqlite://"

    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    return f"sqlite:///{os.path.abspath(db_path)}"


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """
    Enable foreign key constraints for SQLite.

    SQLite disables foreign key enforcement by default, which would let
    reviews and watchlist entries point at missing users or movies.
    """
    if type(dbapi_conn).__module__.startswith("sqlite3"):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class DatabaseManager:
    """
    Database connection manager.

    Handles engine creation, session management, and schema creation.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH, echo: bool = False):
        """
        Initialize database manager.

        Args:
            db_path: Path to SQLite database file, or a database URL
            echo: If True, log all SQL statements
        """
        self.db_path = db_path
        self.database_url = get_database_url(db_path)

        if self.database_url in ("sqlite://", "sqlite:///:memory:"):
            # In-memory databases exist per connection, so every session must share one
            self.engine = create_engine(
                self.database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool
            )
        elif self.database_url.startswith("sqlite"):
            # One connection per session; SQLite file locks serialise the writers
            self.engine = create_engine(
                self.database_url,
                echo=echo,
                connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT},
            )
        else:
            self.engine = create_engine(self.database_url, echo=echo, pool_pre_ping=True)

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    def create_tables(self):
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self):
        """
        Drop all tables defined in the models.

        WARNING: This will delete all data in the database!
        """
        Base.metadata.drop_all(bind=self.engine)

    def reset_database(self):
        """Drop and recreate all tables."""
        self.drop_tables()
        self.create_tables()

    def get_session(self) -> Session:
        """
        Get a new database session.

        The caller is responsible for committing and closing it; prefer
        ``session_scope`` where possible.
        """
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Context manager for database sessions.

        Commits on success, rolls back and re-raises on failure.

        Usage:
            with db_manager.session_scope() as session:
                crud.create_user(session, username="neo", email="neo@zion.io")

        Yields:
            SQLAlchemy Session object
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self):
        """Close the database engine and all connections."""
        self.engine.dispose()


# Global database manager instance (singleton pattern)
_db_manager: Optional[DatabaseManager] = None


def get_db_manager(db_path: str = DEFAULT_DB_PATH, echo: bool = False) -> DatabaseManager:
    """
    Get or create the global database manager instance.

    Args:
        db_path: Path to SQLite database file, or a database URL
        echo: If True, log all SQL statements

    Returns:
        DatabaseManager instance
    """
    global _db_manager
    if _db_manager is None:
        logger.info("Opening database at %s", db_path)
        _db_manager = DatabaseManager(db_path=db_path, echo=echo)
    return _db_manager


def get_session() -> Generator[Session, None, None]:
    """
    Yield a transactional session from the global manager.

    Yields:
        SQLAlchemy Session object
    """
    db_manager = get_db_manager()
    with db_manager.session_scope() as session:
        yield session
