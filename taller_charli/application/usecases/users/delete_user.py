"""
===============================================================================
USE CASE: Delete User (soft delete)
===============================================================================

Business Goal:
    Marcar un usuario activo como eliminado (deleted_at = now). Nunca se borra
    físicamente. Un id inexistente o ya eliminado -> NOT_FOUND.

Collaborators:
    - UserRepository.get_active_by_id / soft_delete
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from .user_results import UserResult, internal, not_found


class DeleteUserUseCase:
    """Baja lógica de un usuario."""

    def __init__(self, repository: UserRepository) -> None:
        self._users = repository

    async def execute(self, user_id: int) -> UserResult:
        try:
            if await self._users.get_active_by_id(user_id) is None:
                return UserResult(error=not_found(user_id))
            deleted = await self._users.soft_delete(user_id)
        except DatabaseError as exc:
            logger.error(
                "Baja lógica de usuario falló",
                extra={"target_user_id": user_id, "error_id": exc.error_id},
            )
            return UserResult(error=internal("Error interno al eliminar el usuario"))

        if deleted is None:
            return UserResult(error=not_found(user_id))

        logger.info("Usuario eliminado (soft)", extra={"target_user_id": user_id})
        return UserResult(user=deleted)
