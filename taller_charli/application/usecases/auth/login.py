"""
===============================================================================
USE CASE: Login (sign-in delegado + usuario local)
===============================================================================

Business Goal:
    Iniciar sesión contra el proveedor de identidad y devolver el usuario
    local activo junto con el par de tokens emitido.

Reglas:
    - Sin sesión del proveedor -> UNAUTHENTICATED "Credenciales inválidas"
      (no se consulta el store).
    - Sin usuario local activo -> UNAUTHENTICATED
      "Usuario no encontrado en la base de datos local".
    - Cualquier otra falla -> BAD_REQUEST "Error al iniciar sesión".

Collaborators:
    - IdentityProvider.sign_in(email, password)
    - UserRepository.get_active_by_email(email)
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from ....crosscutting.exceptions import TallerError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....domain.services import IdentityProvider
from .auth_results import AuthResult, bad_request, unauthenticated
from .resolve_identity import MSG_LOCAL_USER_NOT_FOUND

MSG_INVALID_CREDENTIALS = "Credenciales inválidas"
MSG_LOGIN_FAILED = "Error al iniciar sesión"


@dataclass(frozen=True)
class LoginInput:
    email: str
    password: str


class LoginUseCase:
    """Inicio de sesión."""

    def __init__(
        self, identity_provider: IdentityProvider, repository: UserRepository
    ) -> None:
        self._identity = identity_provider
        self._users = repository

    async def execute(self, input_data: LoginInput) -> AuthResult:
        try:
            session = await self._identity.sign_in(
                input_data.email, input_data.password
            )
            if session is None:
                return AuthResult(error=unauthenticated(MSG_INVALID_CREDENTIALS))

            user = await self._users.get_active_by_email(input_data.email)
        except TallerError as exc:
            logger.error(
                "Inicio de sesión falló",
                extra={"error_id": exc.error_id, "error_code": exc.error_code},
            )
            return AuthResult(error=bad_request(MSG_LOGIN_FAILED))
        except Exception as exc:
            logger.exception(
                "Inicio de sesión falló (error inesperado)",
                extra={"error_type": type(exc).__name__},
            )
            return AuthResult(error=bad_request(MSG_LOGIN_FAILED))

        if user is None:
            return AuthResult(error=unauthenticated(MSG_LOCAL_USER_NOT_FOUND))

        logger.info("Inicio de sesión exitoso", extra={"user_id": user.id})
        return AuthResult(
            user=user,
            access_token=session.access_token,
            refresh_token=session.refresh_token,
        )
