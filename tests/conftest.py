"""
Shared fixtures: an isolated in-memory SQLite database per test, and a
TestClient whose get_db dependency is bound to it.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from filmscape.api.dependencies import get_db
from filmscape.api.main import app
from filmscape.database.models import Base
from filmscape.database import crud


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """Create a new database session for testing."""
    Session = sessionmaker(bind=engine, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    """TestClient running the app against the test database."""
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        db = SessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin(session):
    """An administrator account."""
    return crud.create_user(session, username="admin", email="admin@filmscape.com", is_admin=True)


@pytest.fixture
def make_user(session):
    """Factory creating users with unique names."""
    counter = {'n': 0}

    def _make(username=None, **kwargs):
        counter['n'] += 1
        username = username or f"user{counter['n']}"
        return crud.create_user(session, username=username, email=f"{username}@example.com", **kwargs)

    return _make


@pytest.fixture
def make_movie(session):
    """Factory creating movies with unique IMDb IDs."""
    counter = {'n': 0}

    def _make(title=None, **kwargs):
        counter['n'] += 1
        kwargs.setdefault('year', 1999)
        return crud.create_movie(
            session,
            imdb_id=kwargs.pop('imdb_id', f"tt{1000000 + counter['n']:07d}"),
            title=title or f"Movie {counter['n']}",
            **kwargs,
        )

    return _make
