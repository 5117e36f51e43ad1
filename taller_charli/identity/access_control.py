"""
===============================================================================
TARJETA CRC — identity/access_control.py
===============================================================================

Módulo:
    Control de acceso HTTP (token Bearer -> identidad -> rol)

Responsabilidades:
    - Extraer el token de `Authorization: Bearer <token>`.
    - Resolver la AuthenticatedIdentity del request (una vez por request).
    - Aplicar la tabla estática ruta -> roles permitidos.
    - Traducir fallas a 401 (autenticación) o 403 (autorización); nunca
      dejar pasar un request sin decisión.

Colaboradores:
    - application.usecases.auth.ResolveIdentityUseCase
    - domain.access: AuthenticatedIdentity / is_role_permitted
    - crosscutting.error_responses: unauthorized / forbidden
    - taller_charli.context: user_id para logs

Notas:
    - Los routers declaran `Depends(require_access("users.list"))`; la
      política vive acá, no dispersa en cada handler.
    - La regla de pertenencia (ADMIN o sí mismo) la aplica el caso de uso
      de actualización vía domain.access.can_act_on_user.
===============================================================================
"""

from __future__ import annotations

from typing import Callable, FrozenSet

from fastapi import Depends, Header, Request

from ..application.usecases.auth import ResolveIdentityUseCase
from ..container import get_resolve_identity_use_case
from ..context import set_user_context
from ..crosscutting.error_responses import forbidden, unauthorized
from ..crosscutting.logger import logger
from ..domain.access import AuthenticatedIdentity, is_role_permitted
from ..domain.entities import UserRole

MSG_TOKEN_REQUIRED = "Token de acceso requerido"
MSG_ROLE_FORBIDDEN = "No tienes permisos para acceder a este recurso"

_ANY_ROLE: FrozenSet[UserRole] = frozenset()
_ADMIN_ONLY: FrozenSet[UserRole] = frozenset({UserRole.ADMIN})

# ---------------------------------------------------------------------------
# Tabla declarativa: ruta -> roles permitidos (vacío = cualquier rol autenticado)
# ---------------------------------------------------------------------------
ROUTE_ROLES: dict[str, FrozenSet[UserRole]] = {
    "auth.logout": _ANY_ROLE,
    "auth.me": _ANY_ROLE,
    "users.create": _ADMIN_ONLY,
    "users.create_admin": _ADMIN_ONLY,
    "users.list": _ADMIN_ONLY,
    "users.list_deleted": _ADMIN_ONLY,
    "users.profile": _ANY_ROLE,
    "users.get": _ADMIN_ONLY,
    "users.update": _ANY_ROLE,
    "users.delete": _ADMIN_ONLY,
    "users.recover": _ADMIN_ONLY,
}


def extract_bearer_token(authorization: str | None) -> str | None:
    """
    Extrae token desde `Authorization: Bearer <token>`.

    Cualquier otro esquema, o header ausente, significa "sin token".
    """
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0] != "Bearer":
        return None
    token = parts[1].strip()
    return token or None


# ---------------------------------------------------------------------------
# Dependencias FastAPI
# ---------------------------------------------------------------------------


async def require_identity(
    request: Request,
    authorization: str | None = Header(None, alias="Authorization"),
    resolver: ResolveIdentityUseCase = Depends(get_resolve_identity_use_case),
) -> AuthenticatedIdentity:
    """Dependency FastAPI: requiere identidad autenticada con usuario local activo."""
    token = extract_bearer_token(authorization)
    if not token:
        raise unauthorized(MSG_TOKEN_REQUIRED)

    result = await resolver.execute(token)
    if result.error is not None or result.identity is None:
        detail = result.error.message if result.error else MSG_TOKEN_REQUIRED
        raise unauthorized(detail)

    identity = result.identity
    request.state.identity = identity
    request.state.access_token = token
    set_user_context(identity.id)
    return identity


def require_access(route_id: str) -> Callable:
    """
    Dependency FastAPI: identidad + chequeo de rol según ROUTE_ROLES.

    Un route_id desconocido falla al importar el router (KeyError).
    """
    permitted = ROUTE_ROLES[route_id]

    async def dependency(
        identity: AuthenticatedIdentity = Depends(require_identity),
    ) -> AuthenticatedIdentity:
        if not is_role_permitted(identity.role, permitted):
            logger.info(
                "Acceso denegado por rol",
                extra={"route_id": route_id, "role": identity.role.value},
            )
            raise forbidden(MSG_ROLE_FORBIDDEN)
        return identity

    return dependency


def get_access_token(request: Request) -> str:
    """Token del request ya autenticado (lo setea require_identity)."""
    token = getattr(request.state, "access_token", None)
    if not token:
        raise unauthorized(MSG_TOKEN_REQUIRED)
    return token
