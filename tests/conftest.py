"""Shared pytest fixtures for all tests."""

import os
from datetime import datetime

import pytest
from unittest.mock import patch

# Token secret must exist BEFORE any lightsync imports read config
os.environ.setdefault("JWT_SECRET", "unit-test-secret-0123456789abcdef0123")
# Cheap hashing keeps the auth tests fast
os.environ.setdefault("BCRYPT_ROUNDS", "4")


@pytest.fixture
def users_file(tmp_path):
    """Path to a not-yet-created users file."""
    return tmp_path / "users.json"


@pytest.fixture
def user_store(users_file):
    """Empty JSON file user store in a temp directory."""
    from lightsync.user_store import JsonFileUserStore
    return JsonFileUserStore(users_file)


@pytest.fixture
def clock():
    """
    Mutable wall clock for the color endpoints.

    Set clock["now"] to a datetime before calling the API.
    """
    return {"now": datetime(2025, 6, 1, 12, 0)}


@pytest.fixture
def test_client(user_store, clock):
    """Create FastAPI test client backed by a temp user store."""
    from fastapi.testclient import TestClient
    from lightsync.main import app, get_now
    from lightsync.user_store import get_user_store

    app.dependency_overrides[get_user_store] = lambda: user_store
    app.dependency_overrides[get_now] = lambda: clock["now"]

    try:
        with patch("lightsync.config.JWT_SECRET", "unit-test-secret-0123456789abcdef0123"):
            with TestClient(app) as client:
                yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def registered_user(test_client):
    """Register a user and return (email, password)."""
    email, password = "ada@example.com", "correct horse"
    response = test_client.post("/register", json={
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": email,
        "password": password,
    })
    assert response.status_code == 201
    return email, password


@pytest.fixture
def auth_headers(test_client, registered_user):
    """Authorization header for the registered user."""
    email, password = registered_user
    response = test_client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
