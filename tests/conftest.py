import os
import tempfile

# Settings are read at import time, so they must be in place before the app loads.
_DB_DIR = tempfile.mkdtemp(prefix="snaplinks-tests-")
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["PUBLIC_BASE_URL"] = "http://sho.rt"
os.environ["API_RATE_LIMIT"] = "100000"
os.environ["REDIRECT_RATE_LIMIT"] = "100000"
os.environ["ADMIN_EMAIL"] = ""
os.environ["ADMIN_PASSWORD"] = ""

import pytest
from fastapi.testclient import TestClient

import auth
import crud
import database
import main
import models
import rate_limit

PASSWORD = "Sup3r$ecret"


@pytest.fixture(autouse=True)
def fresh_db():
    models.Base.metadata.drop_all(bind=database.engine)
    models.Base.metadata.create_all(bind=database.engine)
    rate_limit.api_limiter.reset()
    rate_limit.redirect_limiter.reset()
    yield


@pytest.fixture
def db():
    session = database.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(main.app)


@pytest.fixture
def register(client):
    """Register a user through the API; returns {"user": ..., "token": ..., "headers": ...}."""
    def _register(email: str, password: str = PASSWORD) -> dict:
        response = client.post("/api/auth/register", json={"email": email, "password": password})
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        data["headers"] = {"Authorization": f"Bearer {data['token']}"}
        return data
    return _register


@pytest.fixture
def alice(register):
    return register("alice@example.com")


@pytest.fixture
def bob(register):
    return register("bob@example.com")


@pytest.fixture
def admin(db):
    user = crud.create_user(db, "root@example.com", auth.hash_password(PASSWORD), role="admin")
    token = auth.create_access_token(user)
    return {"user": user, "token": token, "headers": {"Authorization": f"Bearer {token}"}}


@pytest.fixture
def create_link(client):
    def _create(headers: dict, original_url: str = "https://example.com/page", **extra) -> dict:
        response = client.post("/api/urls", json={"originalUrl": original_url, **extra}, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _create
