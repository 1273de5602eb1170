"""
Integration test fixtures.

The application is exercised through Starlette's TestClient without
running the lifespan; the service graph is wired over the in-memory
Redis double instead.
"""

from typing import Dict

import jwt
import pytest
from fastapi.testclient import TestClient

from gatewatch.config import get_settings
from gatewatch.main import app, configure_services


def _auth_headers(role: str, username: str) -> Dict[str, str]:
    token = jwt.encode(
        {"sub": f"user-{username}", "username": username, "role": role},
        get_settings().jwt_secret,
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(fake_redis) -> TestClient:
    configure_services(app, fake_redis, get_settings())
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return _auth_headers("security_admin", "alice")


@pytest.fixture
def super_admin_headers() -> Dict[str, str]:
    return _auth_headers("super_admin", "root")


@pytest.fixture
def analyst_headers() -> Dict[str, str]:
    """Analysts hold incident permissions but are not admitted to the admin plane."""
    return _auth_headers("security_analyst", "bob")


@pytest.fixture
def auditor_headers() -> Dict[str, str]:
    return _auth_headers("auditor", "carol")
