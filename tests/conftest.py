"""
Shared fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from rhyzome.api.app import create_app
from rhyzome.auth import AuthorizationGate, TokenRegistry
from rhyzome.config import Settings
from rhyzome.storage import SQLiteGraphStore


ADMIN_PASSWORD = "test-admin-password"


@pytest.fixture
def store():
    """Fresh in-memory graph store."""
    with SQLiteGraphStore.open(":memory:") as s:
        yield s


@pytest.fixture
def file_store(tmp_path):
    """Graph store backed by a file under tmp_path."""
    with SQLiteGraphStore.open(str(tmp_path / "db" / "rhyzome.db")) as s:
        yield s


@pytest.fixture
def registry():
    """Fresh token registry."""
    return TokenRegistry()


@pytest.fixture
def gate(registry):
    return AuthorizationGate(registry)


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        database_path=":memory:",
        admin_password=ADMIN_PASSWORD,
        sentry_dsn="",
    )


@pytest.fixture
def client(settings):
    """Test client with the lifespan running (store open, empty registry)."""
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def issue_token(client):
    """Issue a token through the API and return its id."""
    def _issue(*permissions: str) -> str:
        response = client.post(
            "/tokens",
            json={"password": ADMIN_PASSWORD, "permissions": list(permissions)},
        )
        assert response.status_code == 200, response.text
        return response.json()["token"]
    return _issue
