"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure the test environment (APP_ENV=test, fake identity provider)
  - Reset container singletons between tests
  - Provide user factories and in-memory collaborators

Collaborators:
  - pytest / pytest-asyncio
  - taller_charli.container (lru_cache singletons)
  - taller_charli.infrastructure (in-memory repository, fake identity)

Notes:
  - No test touches a real database or the network.
"""

import asyncio
import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("FAKE_IDENTITY", "true")
os.environ.setdefault("USER_REPOSITORY", "memory")
os.environ.setdefault("LOG_JSON", "false")

import pytest  # noqa: E402

from taller_charli import container  # noqa: E402
from taller_charli.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from taller_charli.domain.access import AuthenticatedIdentity  # noqa: E402
from taller_charli.domain.entities import NewUser, User, UserRole  # noqa: E402
from taller_charli.domain.services import RemoteIdentity  # noqa: E402
from taller_charli.infrastructure.repositories import (  # noqa: E402
    InMemoryUserRepository,
)
from taller_charli.infrastructure.services import FakeIdentityProvider  # noqa: E402


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


def _clear_singletons() -> None:
    app_config.get_settings.cache_clear()
    container.get_user_repository.cache_clear()
    container.get_identity_provider.cache_clear()
    container.get_http_client.cache_clear()


@pytest.fixture(autouse=True)
def reset_container():
    """Each test gets fresh settings, repository and identity provider."""
    _clear_singletons()
    yield
    _clear_singletons()


# ============================================================================
# Factories
# ============================================================================


def _new_user(
    n: int = 1,
    *,
    role: UserRole = UserRole.CLIENT,
    first_name: str | None = None,
    last_name: str = "Pérez",
    phone: str | None = None,
) -> NewUser:
    return NewUser(
        first_name=first_name or f"Juan{n}",
        last_name=last_name,
        dni=f"{30000000 + n}",
        email=f"user{n}@example.com",
        phone=phone,
        role=role,
    )


def _identity_for(user: User) -> AuthenticatedIdentity:
    return AuthenticatedIdentity(
        remote=RemoteIdentity(id=f"remote-{user.id}", email=user.email),
        user=user,
    )


def _seed(repo: InMemoryUserRepository, *items: NewUser) -> list[User]:
    """Sync helper for TestClient tests (the repo API is async)."""

    async def _create() -> list[User]:
        return [await repo.create_user(item) for item in items]

    return asyncio.run(_create())


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def new_user():
    """Factory: new_user(n, role=..., ...) -> NewUser with unique email/DNI."""
    return _new_user


@pytest.fixture
def identity_for():
    """Factory: identity_for(user) -> AuthenticatedIdentity."""
    return _identity_for


@pytest.fixture
def seed():
    """seed(repo, *new_users) -> list[User] (sync)."""
    return _seed
