"""Test configuration and fixtures."""

from datetime import timedelta

import pytest

from jobboard.app import create_app
from jobboard.db import SessionLocal, utcnow
from jobboard.services.ingestion import build_job

TEST_SECRET = "test-secret"


@pytest.fixture(scope="function")
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture(scope="function")
def app(upload_dir):
    """App bound to a fresh in-memory SQLite store, scheduler off."""
    app = create_app({
        "TESTING": True,
        "DB_URL": "sqlite://",
        "JWT_SECRET": TEST_SECRET,
        "UPLOAD_DIR": str(upload_dir),
        "SCHEDULER_ENABLED": False,
        "LOG_DIR": None,
    })
    yield app


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


@pytest.fixture(scope="function")
def session(app):
    with SessionLocal() as s:
        yield s


@pytest.fixture(scope="function")
def admin_token(client):
    client.post("/admin/setup", json={"username": "admin", "password": "s3cret"})
    res = client.post("/admin/login", json={"username": "admin", "password": "s3cret"})
    return res.get_json()["token"]


@pytest.fixture(scope="function")
def auth_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture(scope="function")
def make_job(session):
    """Insert a job directly; ``age`` is how long ago it was posted."""

    def _make(age=timedelta(hours=1), **fields):
        data = {
            "title": "Python Developer",
            "company": "Acme",
            "location": "Bangalore",
            "description": "Build APIs",
            "applyLink": "https://acme.example/apply",
        }
        data.update(fields)
        job = build_job(data)
        job.posted_date = utcnow() - age
        session.add(job)
        session.commit()
        return job

    return _make
