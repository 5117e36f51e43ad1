"""
===============================================================================
USE CASE: Update User (cambio parcial)
===============================================================================

Business Goal:
    Actualizar cualquier subconjunto de nombre/apellido/email/teléfono/DNI/rol
    de un usuario activo.

Reglas:
    - ADMIN puede actualizar a cualquier usuario.
    - Un no-ADMIN solo puede actualizarse a sí mismo y no puede cambiar su rol.
    - El usuario debe existir y estar activo (si no -> NOT_FOUND).
    - Email / DNI duplicado -> CONFLICT ("El {campo} ya está en uso por otro usuario").

Collaborators:
    - domain.access.can_act_on_user
    - UserRepository.get_active_by_id / update_user
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from ....crosscutting.exceptions import DatabaseError, UniqueViolationError
from ....crosscutting.logger import logger
from ....domain.access import AuthenticatedIdentity, can_act_on_user
from ....domain.entities import UserChanges
from ....domain.repositories import UserRepository
from .user_results import UserError, UserErrorCode, UserResult, internal, not_found

_MSG_FORBIDDEN = "No tienes permisos para realizar esta acción sobre este usuario"
_MSG_ROLE_FORBIDDEN = "No tienes permisos para cambiar el rol"
_MSG_UPDATE_FAILED = "Error interno al actualizar el usuario"


@dataclass(frozen=True)
class UpdateUserInput:
    user_id: int
    changes: UserChanges
    actor: AuthenticatedIdentity


class UpdateUserUseCase:
    """Actualización parcial con control de pertenencia."""

    def __init__(self, repository: UserRepository) -> None:
        self._users = repository

    async def execute(self, input_data: UpdateUserInput) -> UserResult:
        actor = input_data.actor
        if not can_act_on_user(actor, input_data.user_id):
            return self._forbidden(_MSG_FORBIDDEN)
        if input_data.changes.role is not None and not actor.is_admin:
            return self._forbidden(_MSG_ROLE_FORBIDDEN)

        try:
            current = await self._users.get_active_by_id(input_data.user_id)
            if current is None:
                return UserResult(error=not_found(input_data.user_id))

            updated = await self._users.update_user(
                input_data.user_id, input_data.changes
            )
        except UniqueViolationError as exc:
            return UserResult(
                error=UserError(
                    code=UserErrorCode.CONFLICT,
                    message=f"El {exc.field} ya está en uso por otro usuario",
                    field=exc.field,
                )
            )
        except DatabaseError as exc:
            logger.error(
                "Actualización de usuario falló",
                extra={"target_user_id": input_data.user_id, "error_id": exc.error_id},
            )
            return UserResult(error=internal(_MSG_UPDATE_FAILED))

        # Carrera: otro request lo eliminó entre la consulta y el UPDATE.
        if updated is None:
            return UserResult(error=not_found(input_data.user_id))

        logger.info(
            "Usuario actualizado",
            extra={
                "target_user_id": updated.id,
                "fields": sorted(input_data.changes.as_dict()),
            },
        )
        return UserResult(user=updated)

    @staticmethod
    def _forbidden(message: str) -> UserResult:
        return UserResult(error=UserError(code=UserErrorCode.FORBIDDEN, message=message))
