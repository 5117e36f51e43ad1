"""
Name: HTTP Test Fixtures

Responsibilities:
  - Build the FastAPI app against the in-memory container singletons
  - Seed users and issue fake Bearer tokens for them
"""

import pytest
from fastapi.testclient import TestClient

from taller_charli import container
from taller_charli.api.main import create_app
from taller_charli.domain.entities import UserRole


@pytest.fixture
def client():
    return TestClient(create_app())


@pytest.fixture
def users_repo():
    return container.get_user_repository()


@pytest.fixture
def provider():
    return container.get_identity_provider()


@pytest.fixture
def auth_headers(provider):
    """auth_headers(user) -> {"Authorization": "Bearer <token>"}"""

    def _headers(user):
        return {"Authorization": f"Bearer {provider.issue_token(user.email)}"}

    return _headers


@pytest.fixture
def admin(users_repo, seed, new_user):
    (user,) = seed(users_repo, new_user(100, role=UserRole.ADMIN, first_name="Admin"))
    return user


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)
