"""
===============================================================================
USE CASE: Get User (usuario activo por id)
===============================================================================

Business Goal:
    Recuperar un usuario ACTIVO por id. Un usuario eliminado lógicamente se
    trata igual que uno inexistente (NOT_FOUND).

Collaborators:
    - UserRepository.get_active_by_id(user_id)
    - user_results: UserResult / not_found
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from .user_results import UserResult, internal, not_found


class GetUserUseCase:
    """Consulta de un usuario activo."""

    def __init__(self, repository: UserRepository) -> None:
        self._users = repository

    async def execute(self, user_id: int) -> UserResult:
        try:
            user = await self._users.get_active_by_id(user_id)
        except DatabaseError as exc:
            logger.error(
                "Consulta de usuario falló",
                extra={"target_user_id": user_id, "error_id": exc.error_id},
            )
            return UserResult(error=internal("Error interno al obtener el usuario"))

        if user is None:
            return UserResult(error=not_found(user_id))
        return UserResult(user=user)
