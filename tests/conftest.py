import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

# Point the app at throwaway storage before admin_api.config is imported
_TMP_DIR = tempfile.mkdtemp(prefix="admin_api_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["BACKGROUND_MUSIC_URL"] = "https://cdn.example.com/music/letter-hunt.mp3"

from admin_api.database import Base, SessionLocal, engine  # noqa: E402
from admin_api.models import Asset, Child  # noqa: E402

BASE_TIME = datetime(2025, 7, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def session_factory():
    return SessionLocal


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_asset(db):
    """Insert an asset; later calls get later created_at values unless given."""
    counter = {"n": 0}

    def _make(type="image", status="approved", theme="", metadata=None, **fields):
        counter["n"] += 1
        fields.setdefault("created_at", BASE_TIME + timedelta(minutes=counter["n"]))
        fields.setdefault("file_url", f"https://cdn.example.com/{type}/{counter['n']}")
        meta = {"template": "letter-hunt"}
        meta.update(metadata or {})
        asset = Asset(type=type, status=status, theme=theme, metadata_info=meta, **fields)
        db.add(asset)
        db.commit()
        db.refresh(asset)
        return asset

    return _make


@pytest.fixture
def make_child(db):
    def _make(name, age=4, primary_interest="dogs", **fields):
        child = Child(name=name, age=age, primary_interest=primary_interest, **fields)
        db.add(child)
        db.commit()
        db.refresh(child)
        return child

    return _make


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from admin_api.main import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
