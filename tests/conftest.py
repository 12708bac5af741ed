# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock, patch
from typing import Generator

from main import create_app
from core.session import MemorySessionStorage, Session, get_session_storage
from models.identity import Identity, Region


@pytest.fixture(scope="function")
def session_storage() -> MemorySessionStorage:
    """Fresh, isolated session storage per test."""
    return MemorySessionStorage()


@pytest.fixture(scope="function")
def app(session_storage):
    """Create a test FastAPI application instance."""
    app = create_app()
    app.dependency_overrides[get_session_storage] = lambda: session_storage
    return app


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def no_default_audit_client():
    """Audit writes without an explicit client are dropped instead of hitting Supabase."""
    with patch("services.audit_log.get_supabase_client", return_value=None):
        yield


# -----------------------------------------------------
# Identities
# -----------------------------------------------------
@pytest.fixture
def super_admin_identity():
    return Identity(
        id="super-admin-id",
        email="root@example.com",
        name="Root",
        role="super_admin",
    )


@pytest.fixture
def admin_identity():
    """Regional admin assigned to California, USA."""
    return Identity(
        id="admin-id",
        email="ca-admin@example.com",
        name="CA Admin",
        role="admin",
        regions=[Region(country="USA", name="California")],
    )


@pytest.fixture
def unscoped_admin_identity():
    return Identity(
        id="lonely-admin-id",
        email="lonely@example.com",
        name="No Regions",
        role="admin",
        regions=[],
    )


@pytest.fixture
def user_identity():
    return Identity(
        id="user-id",
        email="buyer@example.com",
        name="Buyer",
        role="user",
    )


@pytest.fixture
def login_as(session_storage):
    """
    Put an identity into the session store and return the auth headers
    a dashboard client would send.
    """

    def _login(identity: Identity, token: str = "test-token") -> dict:
        Session.for_token(session_storage, token).login(identity)
        return {"Authorization": f"Bearer {token}"}

    return _login


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client."""
    mock_client = Mock()
    mock_table = Mock()
    mock_client.table.return_value = mock_table
    return mock_client


# -----------------------------------------------------
# Sample marketplace rows
# -----------------------------------------------------
@pytest.fixture
def member_rows():
    return [
        {
            "id": "m-ca",
            "full_name": "Carla",
            "email": "carla@example.com",
            "default_mode": "buyer",
            "country": "USA",
            "state": "California",
            "city": "Fresno",
        },
        {
            "id": "m-tx",
            "full_name": "Tex",
            "email": "tex@example.com",
            "default_mode": "seller",
            "country": "USA",
            "state": "Texas",
            "city": "Austin",
        },
        {
            "id": "m-ca-messy",
            "full_name": "Case Insensitive",
            "email": "ci@example.com",
            "default_mode": "buyer",
            "country": " usa ",
            "state": "  CALIFORNIA",
            "city": None,
        },
    ]
