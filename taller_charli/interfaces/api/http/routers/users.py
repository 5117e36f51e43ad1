"""
===============================================================================
TARJETA CRC — taller_charli/interfaces/api/http/routers/users.py
===============================================================================

Class/Module:
    Users Router

Responsibilities:
    - Exponer CRUD de usuarios (alta, listados paginados, perfil, consulta,
      actualización parcial, baja lógica y recupero).
    - Convertir requests HTTP -> inputs de casos de uso.
    - Traducir UserError -> RFC7807 (error_mapping).
    - Declarar el route_id de cada endpoint para el control de acceso.

Collaborators:
    - taller_charli.application.usecases.users
    - taller_charli.identity.access_control.require_access
    - taller_charli.container (factories DI)
    - schemas.users / schemas.common (DTOs Pydantic)

Notas:
    - /users/deleted y /users/profile se declaran antes que /users/{user_id}.
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, status

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
    UserPageResult,
    UserResult,
)
from taller_charli.container import (
    get_create_user_use_case,
    get_delete_user_use_case,
    get_get_user_use_case,
    get_list_users_use_case,
    get_recover_user_use_case,
    get_update_user_use_case,
)
from taller_charli.domain.access import AuthenticatedIdentity
from taller_charli.domain.entities import UserFilter, UserRole
from taller_charli.identity.access_control import require_access

from ..error_mapping import raise_user_error
from ..schemas.common import ApiResponse, UserPageRes, UserRes
from ..schemas.users import CreateAdminUserReq, CreateUserReq, UpdateUserReq

router = APIRouter(prefix="/users", tags=["users"])


# =============================================================================
# Helpers internos (puros / sin IO)
# =============================================================================


def _user_filter(
    first_name: str | None = Query(None, alias="firstName"),
    last_name: str | None = Query(None, alias="lastName"),
    email: str | None = Query(None),
    dni: str | None = Query(None),
    phone: str | None = Query(None),
    role: UserRole | None = Query(None),
) -> UserFilter:
    """Query params de filtro -> UserFilter (vacíos cuentan como ausentes)."""
    return UserFilter(
        first_name=first_name or None,
        last_name=last_name or None,
        email=email or None,
        dni=dni or None,
        phone=phone or None,
        role=role,
    )


def _user_or_raise(result: UserResult) -> UserRes:
    if result.error is not None:
        raise_user_error(result.error)
    return UserRes.from_entity(result.user)


def _page_or_raise(result: UserPageResult) -> UserPageRes:
    if result.error is not None:
        raise_user_error(result.error)
    return UserPageRes.from_entity(result.page)


# =============================================================================
# Endpoints
# =============================================================================


@router.post(
    "",
    response_model=ApiResponse[UserRes],
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    req: CreateUserReq,
    use_case: CreateUserUseCase = Depends(get_create_user_use_case),
    _identity: AuthenticatedIdentity = Depends(require_access("users.create")),
):
    result = await use_case.execute(
        CreateUserInput(
            first_name=req.first_name,
            last_name=req.last_name,
            dni=req.dni,
            email=req.email,
            phone=req.phone,
        )
    )
    return ApiResponse(message="Usuario creado exitosamente", data=_user_or_raise(result))


@router.post(
    "/admin",
    response_model=ApiResponse[UserRes],
    status_code=status.HTTP_201_CREATED,
)
async def create_user_by_admin(
    req: CreateAdminUserReq,
    use_case: CreateUserUseCase = Depends(get_create_user_use_case),
    _identity: AuthenticatedIdentity = Depends(require_access("users.create_admin")),
):
    result = await use_case.execute(
        CreateUserInput(
            first_name=req.first_name,
            last_name=req.last_name,
            dni=req.dni,
            email=req.email,
            phone=req.phone,
            role=req.role,
            by_admin=True,
        )
    )
    return ApiResponse(
        message="Usuario creado exitosamente por administrador",
        data=_user_or_raise(result),
    )


@router.get("", response_model=ApiResponse[UserPageRes])
async def list_users(
    user_filter: UserFilter = Depends(_user_filter),
    page: int | None = Query(None, ge=1),
    limit: int | None = Query(None, ge=1),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
    _identity: AuthenticatedIdentity = Depends(require_access("users.list")),
):
    result = await use_case.execute(
        ListUsersInput(user_filter=user_filter, page=page, limit=limit)
    )
    return ApiResponse(
        message="Usuarios obtenidos exitosamente", data=_page_or_raise(result)
    )


@router.get("/deleted", response_model=ApiResponse[UserPageRes])
async def list_deleted_users(
    user_filter: UserFilter = Depends(_user_filter),
    page: int | None = Query(None, ge=1),
    limit: int | None = Query(None, ge=1),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
    _identity: AuthenticatedIdentity = Depends(require_access("users.list_deleted")),
):
    result = await use_case.execute(
        ListUsersInput(user_filter=user_filter, page=page, limit=limit, deleted=True)
    )
    return ApiResponse(
        message="Usuarios eliminados obtenidos exitosamente",
        data=_page_or_raise(result),
    )


@router.get("/profile", response_model=ApiResponse[UserRes])
async def get_profile(
    identity: AuthenticatedIdentity = Depends(require_access("users.profile")),
):
    return ApiResponse(
        message="Perfil obtenido exitosamente",
        data=UserRes.from_entity(identity.user),
    )


@router.get("/{user_id}", response_model=ApiResponse[UserRes])
async def get_user(
    user_id: int = Path(..., ge=1),
    use_case: GetUserUseCase = Depends(get_get_user_use_case),
    _identity: AuthenticatedIdentity = Depends(require_access("users.get")),
):
    result = await use_case.execute(user_id)
    return ApiResponse(message="Usuario obtenido exitosamente", data=_user_or_raise(result))


@router.put("/{user_id}", response_model=ApiResponse[UserRes])
async def update_user(
    req: UpdateUserReq,
    user_id: int = Path(..., ge=1),
    use_case: UpdateUserUseCase = Depends(get_update_user_use_case),
    identity: AuthenticatedIdentity = Depends(require_access("users.update")),
):
    result = await use_case.execute(
        UpdateUserInput(user_id=user_id, changes=req.to_changes(), actor=identity)
    )
    return ApiResponse(
        message="Usuario actualizado exitosamente", data=_user_or_raise(result)
    )


@router.delete("/{user_id}", response_model=ApiResponse[UserRes])
async def delete_user(
    user_id: int = Path(..., ge=1),
    use_case: DeleteUserUseCase = Depends(get_delete_user_use_case),
    _identity: AuthenticatedIdentity = Depends(require_access("users.delete")),
):
    result = await use_case.execute(user_id)
    return ApiResponse(message="Usuario eliminado exitosamente", data=_user_or_raise(result))


@router.patch("/{user_id}/recover", response_model=ApiResponse[UserRes])
async def recover_user(
    user_id: int = Path(..., ge=1),
    use_case: RecoverUserUseCase = Depends(get_recover_user_use_case),
    _identity: AuthenticatedIdentity = Depends(require_access("users.recover")),
):
    result = await use_case.execute(user_id)
    return ApiResponse(
        message="Usuario recuperado exitosamente", data=_user_or_raise(result)
    )
