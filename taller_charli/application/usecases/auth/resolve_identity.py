"""
===============================================================================
USE CASE: Resolve Identity (token -> identidad remota -> usuario local)
===============================================================================

Business Goal:
    Probar que el portador de un access token tiene una identidad vigente en
    el proveedor Y una cuenta local ACTIVA asociada por email.

Pasos (secuenciales, sin reintentos):
    1) verify(token) en el proveedor. Rechazo o cualquier error ->
       UNAUTHENTICATED "Token inválido o expirado".
    2) Buscar usuario ACTIVO por el email verificado. Ninguno (o solo uno
       eliminado) -> UNAUTHENTICATED "Usuario no encontrado en la base de datos local".
    3) Construir AuthenticatedIdentity.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    ResolveIdentityUseCase

Collaborators:
    - IdentityProvider.verify(token)
    - UserRepository.get_active_by_email(email)
    - identity/access_control.py (consumidor principal)
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.exceptions import DatabaseError, IdentityProviderError
from ....crosscutting.logger import logger
from ....domain.access import AuthenticatedIdentity
from ....domain.repositories import UserRepository
from ....domain.services import IdentityProvider
from .auth_results import IdentityResult, unauthenticated

MSG_INVALID_TOKEN = "Token inválido o expirado"
MSG_LOCAL_USER_NOT_FOUND = "Usuario no encontrado en la base de datos local"


class ResolveIdentityUseCase:
    """Resolución de la identidad de un request autenticado."""

    def __init__(
        self, identity_provider: IdentityProvider, repository: UserRepository
    ) -> None:
        self._identity = identity_provider
        self._users = repository

    async def execute(self, access_token: str) -> IdentityResult:
        try:
            remote = await self._identity.verify(access_token)
        except IdentityProviderError as exc:
            logger.warning(
                "Verificación de token falló en el proveedor",
                extra={"error_id": exc.error_id, "error": exc.message},
            )
            return IdentityResult(error=unauthenticated(MSG_INVALID_TOKEN))
        except Exception as exc:
            logger.warning(
                "Verificación de token falló",
                extra={"error_type": type(exc).__name__},
            )
            return IdentityResult(error=unauthenticated(MSG_INVALID_TOKEN))

        if remote is None or not remote.email:
            return IdentityResult(error=unauthenticated(MSG_INVALID_TOKEN))

        try:
            user = await self._users.get_active_by_email(remote.email)
        except DatabaseError as exc:
            logger.error(
                "Búsqueda de usuario local falló al autenticar",
                extra={"error_id": exc.error_id},
            )
            return IdentityResult(error=unauthenticated(MSG_INVALID_TOKEN))

        if user is None:
            logger.info(
                "Identidad remota sin usuario local activo",
                extra={"remote_id": remote.id},
            )
            return IdentityResult(error=unauthenticated(MSG_LOCAL_USER_NOT_FOUND))

        return IdentityResult(identity=AuthenticatedIdentity(remote=remote, user=user))
