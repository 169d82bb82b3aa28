"""
Shared pytest fixtures.

Testing strategy:
- Pure goal-tracking and budgeting logic is tested on transient ORM objects,
  no database involved
- HTTP tests drive the real app through FastAPI's TestClient against a
  SQLite file database; tables are created and dropped around every test
"""

import os
import tempfile

# Environment setup BEFORE any arthik import: settings are read at import time
_DB_PATH = os.path.join(tempfile.mkdtemp(prefix="arthik-tests-"), "test.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ["SENDGRID_API_KEY"] = ""
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from arthik.main import app
from arthik.core.database import Base

DEFAULT_PASSWORD = "S3cure-passw0rd"

# Schema management only; the app talks to the same file through aiosqlite
_schema_engine = create_engine(f"sqlite:///{_DB_PATH}")


@pytest.fixture
def database():
    """Fresh schema for every test."""
    Base.metadata.create_all(_schema_engine)
    yield
    Base.metadata.drop_all(_schema_engine)


@pytest.fixture
def client(database) -> TestClient:
    """HTTP client talking to the app in-process."""
    with TestClient(app) as test_client:
        yield test_client


def register_and_login(client: TestClient, email: str, password: str = DEFAULT_PASSWORD) -> dict:
    """Registers a user through fastapi-users and returns bearer auth headers."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "first_name": email.split("@")[0].title()},
    )
    assert response.status_code == 201, response.text

    response = client.post(
        "/api/v1/auth/jwt/login",
        data={"username": email, "password": password},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client: TestClient) -> dict:
    return register_and_login(client, "alice@example.com")


@pytest.fixture
def other_headers(client: TestClient) -> dict:
    """A second user, for ownership checks."""
    return register_and_login(client, "bob@example.com")
