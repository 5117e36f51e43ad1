"""
Name: Users HTTP Routes Tests

Responsibilities:
  - Validate the /users surface end to end (envelope, status codes, roles)
  - Validate pagination metadata, filters and soft delete / recover
  - Validate boundary validation (unknown fields, bounds) -> 400
"""

import asyncio

import pytest

from taller_charli.domain.entities import UserRole

pytestmark = pytest.mark.unit

_NEW_USER_BODY = {
    "firstName": "Carla",
    "lastName": "Gómez",
    "dni": "40111222",
    "email": "carla@example.com",
    "phone": "+54 11 5555-0000",
}


# =============================================================================
# Create
# =============================================================================


def test_admin_creates_client_user(client, admin_headers):
    res = client.post("/users", json=_NEW_USER_BODY, headers=admin_headers)

    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "Usuario creado exitosamente"
    assert body["data"]["role"] == "CLIENT"
    assert body["data"]["firstName"] == "Carla"
    assert body["data"]["deletedAt"] is None


def test_create_lowercases_and_trims(client, admin_headers):
    payload = {**_NEW_USER_BODY, "email": "Carla@Example.COM", "firstName": "  Carla "}

    res = client.post("/users", json=payload, headers=admin_headers)

    assert res.json()["data"]["email"] == "carla@example.com"
    assert res.json()["data"]["firstName"] == "Carla"


def test_create_duplicate_email_is_409(client, admin_headers):
    client.post("/users", json=_NEW_USER_BODY, headers=admin_headers)

    res = client.post(
        "/users", json={**_NEW_USER_BODY, "dni": "40999888"}, headers=admin_headers
    )

    assert res.status_code == 409
    body = res.json()
    assert body["success"] is False
    assert body["code"] == "CONFLICT"
    assert body["detail"] == "El email ya está registrado"


def test_create_by_admin_sets_role(client, admin_headers):
    res = client.post(
        "/users/admin", json={**_NEW_USER_BODY, "role": "ADMIN"}, headers=admin_headers
    )

    assert res.status_code == 201
    assert res.json()["message"] == "Usuario creado exitosamente por administrador"
    assert res.json()["data"]["role"] == "ADMIN"


@pytest.mark.parametrize(
    "override",
    [
        {"unexpected": "x"},
        {"dni": "1234567"},
        {"dni": "12345678901"},
        {"email": "not-an-email"},
        {"firstName": ""},
        {"lastName": "x" * 51},
    ],
)
def test_create_invalid_body_is_400(client, admin_headers, override):
    res = client.post(
        "/users", json={**_NEW_USER_BODY, **override}, headers=admin_headers
    )

    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["errors"]


def test_create_requires_admin(client, users_repo, seed, new_user, auth_headers):
    (me,) = seed(users_repo, new_user(1))

    res = client.post("/users", json=_NEW_USER_BODY, headers=auth_headers(me))

    assert res.status_code == 403


def test_create_without_token_is_401(client):
    res = client.post("/users", json=_NEW_USER_BODY)

    assert res.status_code == 401
    assert res.json()["detail"] == "Token de acceso requerido"


# =============================================================================
# Read / list
# =============================================================================


def test_list_second_page_of_25(client, users_repo, seed, new_user, admin_headers):
    seed(users_repo, *(new_user(n) for n in range(1, 25)))

    res = client.get("/users?page=2&limit=10", headers=admin_headers)

    assert res.status_code == 200
    data = res.json()["data"]
    assert len(data["users"]) == 10
    assert data["total"] == 25
    assert data["page"] == 2
    assert data["limit"] == 10
    assert data["totalPages"] == 3


def test_list_filters_by_name_and_role(
    client, users_repo, seed, new_user, admin_headers
):
    seed(
        users_repo,
        new_user(1, first_name="Carla"),
        new_user(2, first_name="Carlos", role=UserRole.ADMIN),
        new_user(3, first_name="Pedro"),
    )

    res = client.get("/users?firstName=car&role=CLIENT", headers=admin_headers)

    users = res.json()["data"]["users"]
    assert [u["firstName"] for u in users] == ["Carla"]


@pytest.mark.parametrize("query", ["page=0", "limit=0", "limit=101", "role=OWNER"])
def test_list_invalid_query_is_400(client, admin_headers, query):
    res = client.get(f"/users?{query}", headers=admin_headers)

    assert res.status_code == 400
    assert res.json()["success"] is False


def test_list_is_admin_only(client, users_repo, seed, new_user, auth_headers):
    (me,) = seed(users_repo, new_user(1))

    res = client.get("/users", headers=auth_headers(me))

    assert res.status_code == 403
    assert res.json()["detail"] == "No tienes permisos para acceder a este recurso"


def test_profile_returns_caller(client, users_repo, seed, new_user, auth_headers):
    (me,) = seed(users_repo, new_user(1, phone="123"))

    res = client.get("/users/profile", headers=auth_headers(me))

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["id"] == me.id
    assert data["email"] == me.email
    assert set(data) >= {"firstName", "lastName", "createdAt", "updatedAt"}


def test_get_user_by_id(client, users_repo, seed, new_user, admin_headers):
    (target,) = seed(users_repo, new_user(1))

    res = client.get(f"/users/{target.id}", headers=admin_headers)

    assert res.status_code == 200
    assert res.json()["data"]["dni"] == target.dni


def test_get_missing_user_is_404(client, admin_headers):
    res = client.get("/users/999", headers=admin_headers)

    assert res.status_code == 404
    assert res.json()["detail"] == "Usuario con ID 999 no encontrado"


def test_non_positive_id_is_400(client, admin_headers):
    assert client.get("/users/0", headers=admin_headers).status_code == 400


# =============================================================================
# Update
# =============================================================================


def test_client_updates_own_profile(client, users_repo, seed, new_user, auth_headers):
    (me,) = seed(users_repo, new_user(1))

    res = client.put(
        f"/users/{me.id}", json={"phone": "+54 9 11"}, headers=auth_headers(me)
    )

    assert res.status_code == 200
    assert res.json()["message"] == "Usuario actualizado exitosamente"
    assert res.json()["data"]["phone"] == "+54 9 11"


def test_client_cannot_update_other_user(
    client, users_repo, seed, new_user, auth_headers
):
    me, other = seed(users_repo, new_user(1), new_user(2))

    res = client.put(
        f"/users/{other.id}", json={"firstName": "Hack"}, headers=auth_headers(me)
    )

    assert res.status_code == 403
    assert res.json()["code"] == "FORBIDDEN"


def test_update_rejects_unknown_fields(
    client, users_repo, seed, new_user, auth_headers
):
    (me,) = seed(users_repo, new_user(1))

    res = client.put(f"/users/{me.id}", json={"password": "x"}, headers=auth_headers(me))

    assert res.status_code == 400


def test_admin_update_conflicting_dni_is_409(
    client, users_repo, seed, new_user, admin_headers
):
    a, b = seed(users_repo, new_user(1), new_user(2))

    res = client.put(f"/users/{a.id}", json={"dni": b.dni}, headers=admin_headers)

    assert res.status_code == 409


# =============================================================================
# Delete / recover
# =============================================================================


def test_delete_then_recover(client, users_repo, seed, new_user, admin_headers):
    (target,) = seed(users_repo, new_user(1))

    deleted = client.delete(f"/users/{target.id}", headers=admin_headers)
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Usuario eliminado exitosamente"
    assert deleted.json()["data"]["deletedAt"] is not None

    assert client.get(f"/users/{target.id}", headers=admin_headers).status_code == 404
    assert client.delete(f"/users/{target.id}", headers=admin_headers).status_code == 404

    listed = client.get("/users/deleted", headers=admin_headers).json()["data"]
    assert [u["id"] for u in listed["users"]] == [target.id]

    recovered = client.patch(f"/users/{target.id}/recover", headers=admin_headers)
    assert recovered.status_code == 200
    assert recovered.json()["data"]["deletedAt"] is None
    assert client.get(f"/users/{target.id}", headers=admin_headers).status_code == 200


def test_recover_active_user_is_400(client, users_repo, seed, new_user, admin_headers):
    (target,) = seed(users_repo, new_user(1))

    res = client.patch(f"/users/{target.id}/recover", headers=admin_headers)

    assert res.status_code == 400
    assert res.json()["detail"] == "El usuario no está eliminado"


def test_deleted_user_token_stops_working(
    client, users_repo, seed, new_user, auth_headers
):
    (me,) = seed(users_repo, new_user(1))
    headers = auth_headers(me)
    asyncio.run(users_repo.soft_delete(me.id))

    res = client.get("/users/profile", headers=headers)

    assert res.status_code == 401
