"""
===============================================================================
TARJETA CRC — taller_charli/interfaces/api/http/routers/auth.py
===============================================================================

Class/Module:
    Auth Router

Responsibilities:
    - Exponer login / registro / refresh / logout / usuario actual.
    - Delegar credenciales y tokens al proveedor de identidad (vía casos de uso).
    - Traducir AuthError -> RFC7807 (401 / 400).

Collaborators:
    - taller_charli.application.usecases.auth
    - taller_charli.identity.access_control (require_access, get_access_token)
    - taller_charli.container (factories DI)
    - schemas.auth / schemas.common
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from taller_charli.application.usecases.auth import (
    AuthResult,
    LoginInput,
    LoginUseCase,
    LogoutUseCase,
    RefreshTokenUseCase,
    RegisterInput,
    RegisterUseCase,
)
from taller_charli.container import (
    get_login_use_case,
    get_logout_use_case,
    get_refresh_token_use_case,
    get_register_use_case,
)
from taller_charli.domain.access import AuthenticatedIdentity
from taller_charli.identity.access_control import get_access_token, require_access

from ..error_mapping import raise_auth_error
from ..schemas.auth import LoginReq, RefreshReq, RegisterReq, SessionRes
from ..schemas.common import ApiResponse, MessageRes, UserRes

router = APIRouter(prefix="/auth", tags=["auth"])


def _session_or_raise(result: AuthResult) -> SessionRes:
    if result.error is not None:
        raise_auth_error(result.error)
    return SessionRes(
        user=UserRes.from_entity(result.user),
        token=result.access_token,
        refresh_token=result.refresh_token,
    )


@router.post("/login", response_model=ApiResponse[SessionRes])
async def login(
    req: LoginReq,
    use_case: LoginUseCase = Depends(get_login_use_case),
):
    result = await use_case.execute(LoginInput(email=req.email, password=req.password))
    return ApiResponse(message="Inicio de sesión exitoso", data=_session_or_raise(result))


@router.post(
    "/register",
    response_model=ApiResponse[UserRes],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    req: RegisterReq,
    use_case: RegisterUseCase = Depends(get_register_use_case),
):
    result = await use_case.execute(
        RegisterInput(
            email=req.email,
            password=req.password,
            first_name=req.first_name,
            last_name=req.last_name,
            dni=req.dni,
            phone=req.phone,
        )
    )
    if result.error is not None:
        raise_auth_error(result.error)
    return ApiResponse(
        message="Usuario registrado exitosamente",
        data=UserRes.from_entity(result.user),
    )


@router.post("/refresh", response_model=ApiResponse[SessionRes])
async def refresh(
    req: RefreshReq,
    use_case: RefreshTokenUseCase = Depends(get_refresh_token_use_case),
):
    result = await use_case.execute(req.refresh_token)
    return ApiResponse(
        message="Token refrescado exitosamente", data=_session_or_raise(result)
    )


@router.post("/logout", response_model=MessageRes)
async def logout(
    request: Request,
    _identity: AuthenticatedIdentity = Depends(require_access("auth.logout")),
    use_case: LogoutUseCase = Depends(get_logout_use_case),
):
    result = await use_case.execute(get_access_token(request))
    if result.error is not None:
        raise_auth_error(result.error)
    return MessageRes(message="Sesión cerrada exitosamente")


@router.get("/me", response_model=ApiResponse[UserRes])
async def me(
    identity: AuthenticatedIdentity = Depends(require_access("auth.me")),
):
    return ApiResponse(
        message="Usuario obtenido exitosamente",
        data=UserRes.from_entity(identity.user),
    )
