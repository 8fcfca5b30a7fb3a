"""Tests for the lazily created engine and application startup."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import inspect

from app import database
from app.config import settings
from app.utils.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _fresh_engine():
    database.dispose_engine()
    yield
    database.dispose_engine()


def test_missing_database_url_fails(monkeypatch):
    monkeypatch.setattr(settings, "database_url", "")

    with pytest.raises(ConfigurationError):
        database.get_engine()


def test_engine_is_created_once(monkeypatch):
    monkeypatch.setattr(settings, "database_url", "sqlite://")

    assert database.get_engine() is database.get_engine()
    assert database.get_session_factory().kw["bind"] is database.get_engine()


def test_dispose_resets_cached_engine(monkeypatch):
    monkeypatch.setattr(settings, "database_url", "sqlite://")
    first = database.get_engine()

    database.dispose_engine()

    assert database.get_engine() is not first


def test_startup_fails_without_database_url(monkeypatch):
    from app.main import app

    monkeypatch.setattr(settings, "database_url", "")

    with pytest.raises(ConfigurationError):
        with TestClient(app):
            pass


def test_startup_creates_listing_table(monkeypatch, tmp_path):
    from app.main import app

    monkeypatch.setattr(settings, "database_url", f"sqlite:///{tmp_path / 'listings.db'}")

    with TestClient(app) as client:
        assert client.get("/api/health").status_code == 200
        columns = {c["name"] for c in inspect(database.get_engine()).get_columns("listings")}

    assert {"id", "unit_name", "unit_number", "updated_at"} <= columns
