"""
Pytest configuration and shared fixtures.

Each test gets its own app on a fresh SQLite file, with a cheap bcrypt cost
so the suite stays fast.
"""
import pytest
from fastapi.testclient import TestClient

from fraudlr.core.config import Settings
from fraudlr.main import create_app
from fraudlr.utils.auth import configure_password_hashing

TEST_SECRET = "test-signing-secret"
TEST_PASSWORD = "longenough1"


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        JWT_SECRET=TEST_SECRET,
        BCRYPT_ROUNDS=4,
        UPLOADS_DIR=str(tmp_path / "uploads"),
        ENVIRONMENT="test",
        LOG_LEVEL="WARNING",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(autouse=True)
def fast_hashing():
    configure_password_hashing(4)
    yield
    configure_password_hashing(4)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app, client):
    # Depends on client so the tables exist before the session is used
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def signup(client, email="a@b.com", password=TEST_PASSWORD, name=None):
    body = {"email": email, "password": password}
    if name is not None:
        body["name"] = name
    return client.post("/auth/signup", json=body)


@pytest.fixture
def signed_up_client(client):
    """A client holding the session cookie of a freshly registered account."""
    response = signup(client, name="Alice")
    assert response.status_code == 201
    return client
