"""
Database module for Filmscape.

This module provides database models, connection management, and CRUD operations
for the SQLite database using SQLAlchemy ORM.
"""

from filmscape.database.models import Base, User, Movie, Review, WatchlistEntry, WatchlistStatus
from filmscape.database.connection import DatabaseManager, get_db_manager, get_session
from filmscape.database.exceptions import DuplicateEntryError
from filmscape.database.init_db import init_database, verify_schema, seed_admin_user
from filmscape.database import crud

__all__ = [
    # Models
    'Base',
    'User',
    'Movie',
    'Review',
    'WatchlistEntry',
    'WatchlistStatus',
    # Connection
    'DatabaseManager',
    'get_db_manager',
    'get_session',
    # Errors
    'DuplicateEntryError',
    # Initialization
    'init_database',
    'verify_schema',
    'seed_admin_user',
    # CRUD module
    'crud',
]
