"""
===============================================================================
USE CASE: Recover User (deshacer soft delete)
===============================================================================

Business Goal:
    Restaurar un usuario eliminado lógicamente al conjunto de activos, con los
    mismos valores salvo deleted_at.

Reglas:
    - id inexistente -> NOT_FOUND.
    - usuario activo -> BAD_REQUEST ("El usuario no está eliminado").

Collaborators:
    - UserRepository.get_by_id / restore
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from .user_results import UserError, UserErrorCode, UserResult, internal, not_found

_MSG_NOT_DELETED = "El usuario no está eliminado"


class RecoverUserUseCase:
    """Recupero de un usuario eliminado."""

    def __init__(self, repository: UserRepository) -> None:
        self._users = repository

    async def execute(self, user_id: int) -> UserResult:
        try:
            existing = await self._users.get_by_id(user_id)
            if existing is None:
                return UserResult(error=not_found(user_id))
            if not existing.is_deleted:
                return self._not_deleted()

            recovered = await self._users.restore(user_id)
        except DatabaseError as exc:
            logger.error(
                "Recupero de usuario falló",
                extra={"target_user_id": user_id, "error_id": exc.error_id},
            )
            return UserResult(error=internal("Error interno al recuperar el usuario"))

        # Otro request lo recuperó primero.
        if recovered is None:
            return self._not_deleted()

        logger.info("Usuario recuperado", extra={"target_user_id": user_id})
        return UserResult(user=recovered)

    @staticmethod
    def _not_deleted() -> UserResult:
        return UserResult(
            error=UserError(code=UserErrorCode.BAD_REQUEST, message=_MSG_NOT_DELETED)
        )
