"""
FastAPI dependency injection for database session, acting user and catalog client.
"""

import logging
from typing import Generator

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from filmscape.database.connection import get_db_manager
from filmscape.database.models import User
from filmscape.database import crud
from filmscape.core.catalog import OMDbClient
from filmscape.api import config

logger = logging.getLogger(__name__)


def get_db() -> Generator[Session, None, None]:
    """Yield database session for FastAPI Depends()."""
    db_manager = get_db_manager(db_path=config.get_database_path())
    with db_manager.session_scope() as session:
        yield session


def get_current_user(
    x_user_id: int | None = Header(None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the acting user from the X-User-Id header.

    Raises 401 when the header is missing or names an unknown user.
    """
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    user = crud.get_user(db, x_user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Allow only administrators through."""
    if not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return current_user


def ensure_same_user(current_user: User, user_id: int, message: str) -> None:
    """Raise 403 unless the acting user is ``user_id``."""
    if current_user.id != user_id:
        logger.info("User %s denied access to user %s resource", current_user.id, user_id)
        raise HTTPException(status_code=403, detail=message)


# Singleton catalog client
_catalog_client: OMDbClient | None = None


def get_catalog_client() -> OMDbClient:
    """Get or create singleton OMDbClient."""
    global _catalog_client
    if _catalog_client is None:
        _catalog_client = OMDbClient(
            api_key=config.get_omdb_api_key(),
            base_url=config.get_omdb_base_url(),
            timeout=config.get_omdb_timeout(),
            retries=config.get_omdb_retries(),
        )
    return _catalog_client
