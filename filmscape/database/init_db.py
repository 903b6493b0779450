"""
Database initialization and schema creation.

This module creates the schema and seeds the administrator account that
manages the movie catalog.
"""

import logging
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from filmscape.database.connection import DatabaseManager, get_db_manager, DEFAULT_DB_PATH
from filmscape.database.models import User

logger = logging.getLogger(__name__)

EXPECTED_TABLES = {'users', 'movies', 'reviews', 'watchlist'}


def init_database(db_path: str = DEFAULT_DB_PATH, reset: bool = False) -> DatabaseManager:
    """
    Initialize the database and create all tables.

    Args:
        db_path: Path to SQLite database file, or a database URL
        reset: If True, drop existing tables before creating new ones

    Returns:
        DatabaseManager instance
    """
    db_manager = get_db_manager(db_path=db_path)

    if reset:
        logger.warning("Resetting database (dropping all tables)")
        db_manager.reset_database()
    else:
        db_manager.create_tables()
    logger.info("Database tables ready")

    return db_manager


def seed_admin_user(
    session: Session,
    username: str = "admin",
    email: str = "admin@filmscape.com",
) -> Optional[User]:
    """
    Create the administrator account if no user has the given email.

    Args:
        session: Database session
        username: Admin username
        email: Admin email

    Returns:
        The created User, or None if it already existed
    """
    existing = session.query(User).filter(User.email == email).first()
    if existing:
        logger.info("Admin user already exists (id=%s)", existing.id)
        return None

    admin = User(username=username, email=email, is_admin=True, bio="System Administrator")
    session.add(admin)
    session.commit()
    session.refresh(admin)
    logger.info("Admin user created (id=%s, email=%s)", admin.id, email)
    return admin


def verify_schema(db_manager: DatabaseManager) -> bool:
    """
    Verify that all tables exist in the database.

    Args:
        db_manager: DatabaseManager instance

    Returns:
        True if all tables exist, False otherwise
    """
    inspector = inspect(db_manager.engine)
    existing_tables = set(inspector.get_table_names())

    missing_tables = EXPECTED_TABLES - existing_tables
    if missing_tables:
        logger.error("Missing tables: %s", sorted(missing_tables))
        return False

    logger.info("All tables exist: %s", sorted(existing_tables))
    return True
