"""
Name: User Use Case Tests

Responsibilities:
  - Validate create / get / list / update / delete / recover flows
  - Cover uniqueness, soft-delete and ownership decision matrix
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from taller_charli.application.usecases.users import (
    CreateUserInput,
    CreateUserUseCase,
    DeleteUserUseCase,
    GetUserUseCase,
    ListUsersInput,
    ListUsersUseCase,
    RecoverUserUseCase,
    UpdateUserInput,
    UpdateUserUseCase,
    UserErrorCode,
)
from taller_charli.crosscutting.exceptions import DatabaseError
from taller_charli.domain.entities import UserChanges, UserFilter, UserRole

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


def _create_input(n: int = 1, **overrides) -> CreateUserInput:
    data = dict(
        first_name=f"Juan{n}",
        last_name="Pérez",
        dni=f"{30000000 + n}",
        email=f"user{n}@example.com",
    )
    data.update(overrides)
    return CreateUserInput(**data)


# =============================================================================
# Create
# =============================================================================


async def test_create_forces_client_role_unless_admin(repo):
    use_case = CreateUserUseCase(repo)

    result = await use_case.execute(_create_input(1, role=UserRole.ADMIN))

    assert result.error is None
    assert result.user.role == UserRole.CLIENT
    assert result.user.id == 1


async def test_create_by_admin_respects_role(repo):
    use_case = CreateUserUseCase(repo)

    result = await use_case.execute(
        _create_input(1, role=UserRole.ADMIN, by_admin=True)
    )

    assert result.user.role == UserRole.ADMIN


async def test_duplicate_email_is_conflict(repo):
    use_case = CreateUserUseCase(repo)
    await use_case.execute(_create_input(1))

    result = await use_case.execute(_create_input(2, email="user1@example.com"))

    assert result.user is None
    assert result.error.code == UserErrorCode.CONFLICT
    assert result.error.field == "email"
    assert result.error.message == "El email ya está registrado"


async def test_duplicate_dni_is_conflict_even_if_first_is_deleted(repo):
    use_case = CreateUserUseCase(repo)
    first = (await use_case.execute(_create_input(1))).user
    await DeleteUserUseCase(repo).execute(first.id)

    result = await use_case.execute(_create_input(2, dni=first.dni))

    assert result.error.code == UserErrorCode.CONFLICT
    assert result.error.field == "DNI"


async def test_create_database_error_is_internal():
    repo = AsyncMock()
    repo.create_user.side_effect = DatabaseError("connection refused")

    result = await CreateUserUseCase(repo).execute(_create_input(1))

    assert result.error.code == UserErrorCode.INTERNAL
    assert "connection refused" not in result.error.message


# =============================================================================
# Get
# =============================================================================


async def test_get_active_user(repo, new_user):
    created = await repo.create_user(new_user(1))

    result = await GetUserUseCase(repo).execute(created.id)

    assert result.user.email == created.email


async def test_get_deleted_or_missing_user_is_not_found(repo, new_user):
    created = await repo.create_user(new_user(1))
    await repo.soft_delete(created.id)

    deleted = await GetUserUseCase(repo).execute(created.id)
    missing = await GetUserUseCase(repo).execute(404)

    assert deleted.error.code == UserErrorCode.NOT_FOUND
    assert missing.error.code == UserErrorCode.NOT_FOUND
    assert missing.error.message == "Usuario con ID 404 no encontrado"


# =============================================================================
# List
# =============================================================================


async def test_list_second_page_of_25(repo, new_user):
    for n in range(1, 26):
        await repo.create_user(new_user(n))

    result = await ListUsersUseCase(repo).execute(ListUsersInput(page=2, limit=10))

    page = result.page
    assert len(page.users) == 10
    assert page.total == 25
    assert page.page == 2
    assert page.limit == 10
    assert page.total_pages == 3


async def test_list_defaults_and_newest_first(repo, new_user):
    for n in range(1, 4):
        await repo.create_user(new_user(n))

    result = await ListUsersUseCase(repo).execute(ListUsersInput())

    assert result.page.page == 1
    assert result.page.limit == 10
    assert [u.id for u in result.page.users] == [3, 2, 1]


async def test_list_filters_and_excludes_deleted(repo, new_user):
    await repo.create_user(new_user(1, first_name="Carla"))
    await repo.create_user(new_user(2, first_name="Carlos"))
    gone = await repo.create_user(new_user(3, first_name="Carolina"))
    await repo.create_user(new_user(4, first_name="Pedro"))
    await repo.soft_delete(gone.id)

    result = await ListUsersUseCase(repo).execute(
        ListUsersInput(user_filter=UserFilter(first_name="CAR"))
    )

    assert {u.first_name for u in result.page.users} == {"Carla", "Carlos"}
    assert result.page.total == 2


async def test_list_deleted_only(repo, new_user):
    await repo.create_user(new_user(1))
    gone = await repo.create_user(new_user(2))
    await repo.soft_delete(gone.id)

    result = await ListUsersUseCase(repo).execute(ListUsersInput(deleted=True))

    assert [u.id for u in result.page.users] == [gone.id]
    assert result.page.total_pages == 1


async def test_list_empty_has_zero_pages(repo):
    result = await ListUsersUseCase(repo).execute(ListUsersInput())

    assert result.page.users == []
    assert result.page.total == 0
    assert result.page.total_pages == 0


@pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (-2, 5)])
async def test_list_rejects_non_positive_paging(repo, page, limit):
    result = await ListUsersUseCase(repo).execute(
        ListUsersInput(page=page, limit=limit)
    )

    assert result.error.code == UserErrorCode.VALIDATION_ERROR


async def test_list_rejects_limit_over_max(repo):
    result = await ListUsersUseCase(repo, max_limit=100).execute(
        ListUsersInput(limit=101)
    )

    assert result.error.code == UserErrorCode.VALIDATION_ERROR
    assert "100" in result.error.message


# =============================================================================
# Update
# =============================================================================


async def test_admin_updates_any_user(repo, new_user, identity_for):
    admin = await repo.create_user(new_user(1, role=UserRole.ADMIN))
    target = await repo.create_user(new_user(2))

    result = await UpdateUserUseCase(repo).execute(
        UpdateUserInput(
            user_id=target.id,
            changes=UserChanges(phone="+54 11 4444-0000", role=UserRole.ADMIN),
            actor=identity_for(admin),
        )
    )

    assert result.error is None
    assert result.user.phone == "+54 11 4444-0000"
    assert result.user.role == UserRole.ADMIN
    assert result.user.email == target.email


async def test_client_updates_self(repo, new_user, identity_for):
    me = await repo.create_user(new_user(1))

    result = await UpdateUserUseCase(repo).execute(
        UpdateUserInput(
            user_id=me.id,
            changes=UserChanges(first_name="Juana"),
            actor=identity_for(me),
        )
    )

    assert result.user.first_name == "Juana"


async def test_client_cannot_update_other_user(repo, new_user, identity_for):
    me = await repo.create_user(new_user(1))
    other = await repo.create_user(new_user(2))

    result = await UpdateUserUseCase(repo).execute(
        UpdateUserInput(
            user_id=other.id,
            changes=UserChanges(first_name="Hack"),
            actor=identity_for(me),
        )
    )

    assert result.error.code == UserErrorCode.FORBIDDEN
    assert (await repo.get_by_id(other.id)).first_name == other.first_name


async def test_client_cannot_change_own_role(repo, new_user, identity_for):
    me = await repo.create_user(new_user(1))

    result = await UpdateUserUseCase(repo).execute(
        UpdateUserInput(
            user_id=me.id,
            changes=UserChanges(role=UserRole.ADMIN),
            actor=identity_for(me),
        )
    )

    assert result.error.code == UserErrorCode.FORBIDDEN


async def test_update_deleted_user_is_not_found(repo, new_user, identity_for):
    admin = await repo.create_user(new_user(1, role=UserRole.ADMIN))
    target = await repo.create_user(new_user(2))
    await repo.soft_delete(target.id)

    result = await UpdateUserUseCase(repo).execute(
        UpdateUserInput(
            user_id=target.id,
            changes=UserChanges(first_name="X"),
            actor=identity_for(admin),
        )
    )

    assert result.error.code == UserErrorCode.NOT_FOUND


async def test_update_to_taken_email_is_conflict(repo, new_user, identity_for):
    admin = await repo.create_user(new_user(1, role=UserRole.ADMIN))
    target = await repo.create_user(new_user(2))

    result = await UpdateUserUseCase(repo).execute(
        UpdateUserInput(
            user_id=target.id,
            changes=UserChanges(email=admin.email),
            actor=identity_for(admin),
        )
    )

    assert result.error.code == UserErrorCode.CONFLICT
    assert result.error.message == "El email ya está en uso por otro usuario"


# =============================================================================
# Delete / Recover
# =============================================================================


async def test_delete_then_recover_round_trip(repo, new_user):
    created = await repo.create_user(new_user(1, phone="123"))

    deleted = await DeleteUserUseCase(repo).execute(created.id)
    assert deleted.user.deleted_at is not None

    recovered = await RecoverUserUseCase(repo).execute(created.id)

    user = recovered.user
    assert user.deleted_at is None
    assert (user.id, user.first_name, user.last_name, user.dni, user.email) == (
        created.id,
        created.first_name,
        created.last_name,
        created.dni,
        created.email,
    )
    assert user.phone == "123"
    assert user.role == created.role
    assert (await GetUserUseCase(repo).execute(created.id)).user is not None


async def test_delete_twice_or_missing_is_not_found(repo, new_user):
    created = await repo.create_user(new_user(1))
    await DeleteUserUseCase(repo).execute(created.id)

    again = await DeleteUserUseCase(repo).execute(created.id)
    missing = await DeleteUserUseCase(repo).execute(999)

    assert again.error.code == UserErrorCode.NOT_FOUND
    assert missing.error.code == UserErrorCode.NOT_FOUND


async def test_recover_active_user_is_bad_request(repo, new_user):
    created = await repo.create_user(new_user(1))

    result = await RecoverUserUseCase(repo).execute(created.id)

    assert result.error.code == UserErrorCode.BAD_REQUEST
    assert result.error.message == "El usuario no está eliminado"


async def test_recover_missing_user_is_not_found(repo):
    result = await RecoverUserUseCase(repo).execute(42)

    assert result.error.code == UserErrorCode.NOT_FOUND
