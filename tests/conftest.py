"""
Pytest configuration: an in-memory SQLite database per test, injected into
the app through ``get_db``, plus authenticated request headers.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("AUTH_MODE", "jwt")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from sebenza.database import Base, get_db

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    def _get_test_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _signup(client, email, name):
    resp = client.post("/api/v1/auth/signup", json={"email": email, "password": "password", "name": name})
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def admin_headers(client):
    """The first account in an empty database is the admin."""
    data = _signup(client, "admin@sebenza.com", "Admin User")
    assert data["user"]["role"] == "admin"
    return {"Authorization": f"Bearer {data['access_token']}"}


@pytest.fixture
def user_headers(client, admin_headers):
    data = _signup(client, "john@sebenza.com", "John Doe")
    assert data["user"]["role"] == "user"
    return {"Authorization": f"Bearer {data['access_token']}"}
