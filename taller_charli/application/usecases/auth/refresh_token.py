"""
===============================================================================
USE CASE: Refresh Token
===============================================================================

Business Goal:
    Canjear un refresh token por un par nuevo y devolver el usuario local.

Reglas:
    - Sin sesión -> UNAUTHENTICATED "Refresh token inválido".
    - El access token nuevo no verifica -> UNAUTHENTICATED
      "Token inválido después del refresh".
    - Sin usuario local activo -> UNAUTHENTICATED "Usuario no encontrado".
    - Cualquier otra falla -> BAD_REQUEST "Error al refrescar token".

Collaborators:
    - IdentityProvider.refresh / verify
    - UserRepository.get_active_by_email
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.exceptions import TallerError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....domain.services import IdentityProvider
from .auth_results import AuthResult, bad_request, unauthenticated

MSG_INVALID_REFRESH = "Refresh token inválido"
MSG_INVALID_AFTER_REFRESH = "Token inválido después del refresh"
MSG_USER_NOT_FOUND = "Usuario no encontrado"
MSG_REFRESH_FAILED = "Error al refrescar token"


class RefreshTokenUseCase:
    """Renovación del par de tokens."""

    def __init__(
        self, identity_provider: IdentityProvider, repository: UserRepository
    ) -> None:
        self._identity = identity_provider
        self._users = repository

    async def execute(self, refresh_token: str) -> AuthResult:
        try:
            session = await self._identity.refresh(refresh_token)
            if session is None:
                return AuthResult(error=unauthenticated(MSG_INVALID_REFRESH))

            remote = await self._identity.verify(session.access_token)
            if remote is None or not remote.email:
                return AuthResult(error=unauthenticated(MSG_INVALID_AFTER_REFRESH))

            user = await self._users.get_active_by_email(remote.email)
        except TallerError as exc:
            logger.error(
                "Refresh de token falló",
                extra={"error_id": exc.error_id, "error_code": exc.error_code},
            )
            return AuthResult(error=bad_request(MSG_REFRESH_FAILED))
        except Exception as exc:
            logger.exception(
                "Refresh de token falló (error inesperado)",
                extra={"error_type": type(exc).__name__},
            )
            return AuthResult(error=bad_request(MSG_REFRESH_FAILED))

        if user is None:
            return AuthResult(error=unauthenticated(MSG_USER_NOT_FOUND))

        return AuthResult(
            user=user,
            access_token=session.access_token,
            refresh_token=session.refresh_token,
        )
