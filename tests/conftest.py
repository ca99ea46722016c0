"""
Content Catalog - Pytest Configuration & Shared Fixtures

Provides reusable fixtures for:
- An in-memory SQLite engine with the catalog tables created
- A database session for exercising crud functions directly
- A FastAPI TestClient wired to that engine through dependency overrides
- Sample request payloads for content, upcoming content and analytics events
"""

import os
from typing import Any, Dict

# Must be set before the catalog package is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.database import Base, get_db
from catalog.main import app

# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db_engine():
    """A fresh in-memory database per test; StaticPool keeps one shared connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """TestClient whose requests use the per-test database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Payload fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def movie_payload() -> Dict[str, Any]:
    return {
        "title": "The Long Night",
        "type": "movie",
        "genres": ["Drama", "Thriller"],
        "duration": "2h 10m",
        "rating": "PG-13",
        "description": "A detective races the dawn.",
        "thumbnailUrl": "https://cdn.example.com/long-night.jpg",
        "releaseYear": 2023,
        "director": "A. Director",
        "cast": ["Lead One", "Lead Two"],
        "tags": ["noir"],
    }


@pytest.fixture
def tv_payload() -> Dict[str, Any]:
    return {
        "title": "Harbor Lights",
        "type": "tv_show",
        "genres": ["Mystery"],
        "rating": "TV-14",
        "status": "published",
        "episodes": 8,
    }


@pytest.fixture
def upcoming_payload() -> Dict[str, Any]:
    return {
        "title": "Northern Line",
        "type": "movie",
        "genres": ["Sci-Fi"],
        "releaseDate": "2025-01-01",
        "description": "Coming this winter.",
        "trailerUrl": "https://cdn.example.com/northern-line.mp4",
        "sectionOrder": 2,
    }
