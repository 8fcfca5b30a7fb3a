"""Pytest configuration and fixtures for tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db, register_sqlite_functions
from app.services import listing_service


@pytest.fixture(scope="session")
def engine():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    register_sqlite_functions(engine)
    # Import all models so they're registered
    import app.models  # noqa: F401

    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db(engine) -> Session:
    """Provide a database session for each test and empty the tables afterwards."""
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()


@pytest.fixture
def clock(monkeypatch):
    """Make listing timestamps strictly increasing, one minute apart."""
    state = {"now": datetime(2024, 1, 1, tzinfo=timezone.utc)}

    def tick() -> datetime:
        state["now"] += timedelta(minutes=1)
        return state["now"]

    monkeypatch.setattr(listing_service, "_utcnow", tick)
    return state


@pytest.fixture
def client(db: Session):
    """TestClient bound to the test session. The lifespan hook is not run."""
    from app.main import app

    app.dependency_overrides[get_db] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def listing_payload(**overrides) -> dict:
    """Camel-cased listing body with sensible defaults."""
    payload = {
        "projectName": "Sunrise Apartments",
        "unitName": "Unit A",
        "unitNumber": 101,
        "description": "A spacious 2-bedroom apartment.",
        "address": "123 Main St, City, Country",
        "sell": True,
        "rent": False,
        "parkingSpot": True,
        "furnished": True,
        "offer": False,
        "beds": 2,
        "baths": 2,
        "regularPrice": 2000,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_payload():
    return listing_payload
