"""
===============================================================================
USE CASE: Create User (auto-registro CLIENT o alta por administrador)
===============================================================================

Business Goal:
    Crear un usuario local garantizando:
      - rol CLIENT forzado en el alta pública / auto-registro
      - rol elegido libremente solo en el alta por administrador
      - unicidad global de email y DNI (incluye usuarios eliminados)

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    CreateUserUseCase

Responsibilities:
    - Resolver el rol efectivo.
    - Persistir el usuario vía UserRepository.
    - Traducir UniqueViolationError -> CONFLICT ("El {campo} ya está registrado").
    - Traducir otras fallas del store -> INTERNAL (detalle solo en logs).

Collaborators:
    - UserRepository.create_user(new_user)
    - user_results: UserResult / UserError / UserErrorCode
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from ....crosscutting.exceptions import DatabaseError, UniqueViolationError
from ....crosscutting.logger import logger
from ....domain.entities import NewUser, UserRole
from ....domain.repositories import UserRepository
from .user_results import UserError, UserErrorCode, UserResult, internal

_MSG_CREATE_FAILED = "Error interno al crear el usuario"


@dataclass(frozen=True)
class CreateUserInput:
    """
    DTO de entrada.

    `role` solo se respeta cuando `by_admin=True`; en otro caso se fuerza CLIENT.
    """

    first_name: str
    last_name: str
    dni: str
    email: str
    phone: str | None = None
    role: UserRole | None = None
    by_admin: bool = False


class CreateUserUseCase:
    """Alta de usuario local."""

    def __init__(self, repository: UserRepository) -> None:
        self._users = repository

    async def execute(self, input_data: CreateUserInput) -> UserResult:
        role = UserRole.CLIENT
        if input_data.by_admin and input_data.role is not None:
            role = input_data.role

        new_user = NewUser(
            first_name=input_data.first_name,
            last_name=input_data.last_name,
            dni=input_data.dni,
            email=input_data.email,
            phone=input_data.phone,
            role=role,
        )

        try:
            user = await self._users.create_user(new_user)
        except UniqueViolationError as exc:
            return UserResult(
                error=UserError(
                    code=UserErrorCode.CONFLICT,
                    message=f"El {exc.field} ya está registrado",
                    field=exc.field,
                )
            )
        except DatabaseError as exc:
            logger.error(
                "Alta de usuario falló",
                extra={"error_id": exc.error_id, "error": exc.message},
            )
            return UserResult(error=internal(_MSG_CREATE_FAILED))

        logger.info(
            "Usuario creado por administrador"
            if input_data.by_admin
            else "Usuario cliente creado",
            extra={"user_id": user.id, "role": user.role.value},
        )
        return UserResult(user=user)
