"""
===============================================================================
USE CASE: Logout
===============================================================================

Business Goal:
    Revocar la sesión remota del access token. No hay estado local que
    invalidar (el backend es stateless).

Reglas:
    - Cualquier falla del proveedor -> BAD_REQUEST "Error al cerrar sesión".
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.exceptions import IdentityProviderError
from ....crosscutting.logger import logger
from ....domain.services import IdentityProvider
from .auth_results import LogoutResult, bad_request

MSG_LOGOUT_FAILED = "Error al cerrar sesión"


class LogoutUseCase:
    def __init__(self, identity_provider: IdentityProvider) -> None:
        self._identity = identity_provider

    async def execute(self, access_token: str) -> LogoutResult:
        try:
            await self._identity.sign_out(access_token)
        except IdentityProviderError as exc:
            logger.error(
                "Cierre de sesión falló",
                extra={"error_id": exc.error_id, "error": exc.message},
            )
            return LogoutResult(error=bad_request(MSG_LOGOUT_FAILED))
        return LogoutResult(success=True)
