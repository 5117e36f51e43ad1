"""
Name: Access Control Tests

Responsibilities:
  - Validate Bearer token extraction
  - Validate 401 (no token / invalid token / inactive user) vs 403 (role)
  - Validate the static route -> roles table
"""

import asyncio

import httpx
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from taller_charli import container
from taller_charli.api.exception_handlers import register_exception_handlers
from taller_charli.application.usecases.auth import ResolveIdentityUseCase
from taller_charli.domain.entities import UserRole
from taller_charli.identity.access_control import (
    MSG_ROLE_FORBIDDEN,
    MSG_TOKEN_REQUIRED,
    ROUTE_ROLES,
    extract_bearer_token,
    require_access,
)
from taller_charli.infrastructure.services import SupabaseIdentityProvider

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Bearer abc", "abc"),
        ("  Bearer   abc  ", "abc"),
        (None, None),
        ("", None),
        ("Bearer", None),
        ("Bearer   ", None),
        ("Basic abc", None),
        ("bearer abc", None),
    ],
)
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


def test_unknown_route_id_fails_fast():
    with pytest.raises(KeyError):
        require_access("users.unknown")


def test_admin_only_routes():
    admin_only = {k for k, roles in ROUTE_ROLES.items() if roles == {UserRole.ADMIN}}

    assert admin_only == {
        "users.create",
        "users.create_admin",
        "users.list",
        "users.list_deleted",
        "users.get",
        "users.delete",
        "users.recover",
    }


# =============================================================================
# Dependency behavior on a minimal app
# =============================================================================


@pytest.fixture
def client():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/admin-only")
    async def admin_only(identity=Depends(require_access("users.list"))):
        return {"id": identity.id}

    @app.get("/anyone")
    async def anyone(identity=Depends(require_access("users.profile"))):
        return {"id": identity.id, "role": identity.role.value}

    return TestClient(app)


@pytest.fixture
def tokens(seed, new_user):
    repo = container.get_user_repository()
    provider = container.get_identity_provider()
    admin, client_user = seed(
        repo, new_user(1, role=UserRole.ADMIN), new_user(2, role=UserRole.CLIENT)
    )
    return {
        "admin": provider.issue_token(admin.email),
        "client": provider.issue_token(client_user.email),
        "client_user": client_user,
    }


def test_missing_token_is_401(client):
    res = client.get("/anyone")

    assert res.status_code == 401
    assert res.headers["content-type"].startswith("application/problem+json")
    assert res.headers["www-authenticate"] == "Bearer"
    body = res.json()
    assert body["success"] is False
    assert body["detail"] == MSG_TOKEN_REQUIRED


def test_wrong_scheme_is_401(client, tokens):
    res = client.get("/anyone", headers={"Authorization": f"Token {tokens['client']}"})

    assert res.status_code == 401


def test_invalid_token_is_401(client):
    res = client.get("/anyone", headers={"Authorization": "Bearer nope"})

    assert res.status_code == 401
    assert res.json()["detail"] == "Token inválido o expirado"


def test_soft_deleted_user_is_401(client, tokens):
    repo = container.get_user_repository()
    asyncio.run(repo.soft_delete(tokens["client_user"].id))

    res = client.get("/anyone", headers={"Authorization": f"Bearer {tokens['client']}"})

    assert res.status_code == 401


def test_role_not_permitted_is_403(client, tokens):
    res = client.get(
        "/admin-only", headers={"Authorization": f"Bearer {tokens['client']}"}
    )

    assert res.status_code == 403
    assert res.json()["code"] == "FORBIDDEN"
    assert res.json()["detail"] == MSG_ROLE_FORBIDDEN


def test_permitted_roles_pass(client, tokens):
    admin = client.get(
        "/admin-only", headers={"Authorization": f"Bearer {tokens['admin']}"}
    )
    anyone = client.get(
        "/anyone", headers={"Authorization": f"Bearer {tokens['client']}"}
    )

    assert admin.status_code == 200
    assert anyone.json() == {"id": tokens["client_user"].id, "role": "CLIENT"}


def test_non_ascii_token_against_supabase_is_401(client):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(401, json={"msg": "invalid JWT"})

    def resolver() -> ResolveIdentityUseCase:
        provider = SupabaseIdentityProvider(
            client=httpx.AsyncClient(
                base_url="https://project.supabase.co",
                transport=httpx.MockTransport(handler),
            ),
            anon_key="anon",
        )
        return ResolveIdentityUseCase(provider, container.get_user_repository())

    client.app.dependency_overrides[container.get_resolve_identity_use_case] = resolver

    # Starlette decodifica los headers como latin-1: llega "Bearer tökñ".
    res = client.get(
        "/anyone", headers={"Authorization": "Bearer t\xf6k\xf1".encode("latin-1")}
    )

    assert res.status_code == 401
    assert res.json()["detail"] == "Token inválido o expirado"
    assert seen == []
