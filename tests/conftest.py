"""Shared pytest fixtures and configuration."""

import os
import tempfile

import mongomock
import pytest

# Set test environment variables before any application module is imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="listing-uploads-"))
os.environ.pop("DATABASE_URL", None)
os.environ.pop("DATABASE_NAME", None)

from tests.utils.factories import create_property_payload  # noqa: E402


@pytest.fixture
def mongo_db(monkeypatch):
    """In-memory MongoDB database swapped in for the real connection."""
    import database

    mock_db = mongomock.MongoClient()["test_listings"]
    monkeypatch.setattr(database, "db", mock_db)
    return mock_db


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Per-test upload directory."""
    import config

    directory = tmp_path / "uploads"
    directory.mkdir()
    monkeypatch.setattr(config, "UPLOAD_DIR", str(directory))
    return directory


@pytest.fixture
def api_client(mongo_db, upload_dir):
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


@pytest.fixture
def property_payload():
    return create_property_payload()
