# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up test environment variables before any imports
# - In-memory SQLite database, recreated for every test
# - A temporary upload directory injected into the app
# - Token helpers for calling authenticated endpoints
# =============================================================================

import io
import os
from datetime import datetime, timedelta, timezone

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-for-marketplace"
os.environ["SERVE_UPLOADS"] = "false"
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from jose import jwt

from app.config import settings
from core.models.tables import User
from core.services.storage_service import FileStore, IncomingFile
from lib.database import Base, SessionLocal, engine


# =============================================================================
# Helpers
# =============================================================================

def make_token(username: str, expires_in: timedelta = timedelta(hours=1), **claims) -> str:
    """Mint a token the way the account service does."""
    payload = {
        "sub": username,
        "iat": int(datetime.now(timezone.utc).timestamp()),
        "exp": int((datetime.now(timezone.utc) + expires_in).timestamp()),
        **claims,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_headers(username: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(username)}"}


def incoming(content: bytes, filename: str | None = "file.bin") -> IncomingFile:
    """Build an upload payload from bytes."""
    return IncomingFile(filename=filename, stream=io.BytesIO(content), size=len(content))


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def db_session():
    """Fresh schema and a session for one test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def users(db_session):
    """alice, bob and carol are regular users; root is an admin."""
    rows = {
        "alice": User(username="alice", is_admin=False),
        "bob": User(username="bob", is_admin=False),
        "carol": User(username="carol", is_admin=False),
        "root": User(username="root", is_admin=True),
    }
    db_session.add_all(rows.values())
    db_session.commit()
    return rows


@pytest.fixture
def upload_dir(tmp_path):
    """Upload root that does not exist yet."""
    return tmp_path / "uploads"


@pytest.fixture
def file_store(upload_dir):
    return FileStore(upload_dir)


@pytest.fixture
def client(db_session, upload_dir):
    """TestClient with the upload directory pointed at tmp_path."""
    from fastapi.testclient import TestClient

    from app.dependencies import get_file_store
    from app.main import app

    app.dependency_overrides[get_file_store] = lambda: FileStore(upload_dir)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sample_files():
    """Multipart payloads for a complete upload."""
    return {
        "video": ("demo.mp4", b"fake-video-bytes", "video/mp4"),
        "zipFile": ("tool.zip", b"PK\x03\x04fake-zip", "application/zip"),
    }
