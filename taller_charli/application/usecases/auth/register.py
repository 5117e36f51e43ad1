"""
===============================================================================
USE CASE: Register (sign-up delegado + alta local CLIENT)
===============================================================================

Business Goal:
    Crear la identidad en el proveedor y luego el perfil local con rol CLIENT.

Reglas:
    - El proveedor rechaza el alta -> BAD_REQUEST "Error al crear usuario".
    - Email/DNI duplicado en el store -> BAD_REQUEST
      "El email o DNI ya está registrado".
    - Otra falla local -> BAD_REQUEST "Error al registrar usuario" (el detalle
      solo va a logs).

Consistencia entre sistemas:
    - Email y DNI se verifican en el store ANTES del sign-up: con un email ya
      usado localmente el proveedor puede devolver la cuenta existente (no
      confirmada) en lugar de crear una nueva.
    - No hay transacción distribuida. Si el alta local falla después del
      sign-up, se borra la identidad remota (requiere la service role key).
      Excepción: un choque por email en el insert (carrera con otro alta) no
      compensa, porque esa identidad puede pertenecer al perfil existente.
    - Si no se puede compensar, la identidad huérfana queda logueada como
      warning con su id remoto.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    RegisterUseCase

Collaborators:
    - IdentityProvider.sign_up / delete_identity
    - UserRepository.taken_field (unicidad previa al sign-up)
    - CreateUserUseCase (fuerza rol CLIENT, traduce unicidad)
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from ....crosscutting.exceptions import DatabaseError, IdentityProviderError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....domain.services import IdentityProvider, RemoteIdentity
from ..users.create_user import CreateUserInput, CreateUserUseCase
from ..users.user_results import UserErrorCode
from .auth_results import RegisterResult, bad_request

MSG_SIGN_UP_FAILED = "Error al crear usuario"
MSG_ALREADY_REGISTERED = "El email o DNI ya está registrado"
MSG_REGISTER_FAILED = "Error al registrar usuario"


@dataclass(frozen=True)
class RegisterInput:
    email: str
    password: str
    first_name: str
    last_name: str
    dni: str
    phone: str | None = None


class RegisterUseCase:
    """Auto-registro de clientes."""

    def __init__(
        self,
        identity_provider: IdentityProvider,
        create_user: CreateUserUseCase,
        repository: UserRepository,
    ) -> None:
        self._identity = identity_provider
        self._create_user = create_user
        self._users = repository

    async def execute(self, input_data: RegisterInput) -> RegisterResult:
        try:
            taken = await self._users.taken_field(
                email=input_data.email, dni=input_data.dni
            )
        except DatabaseError as exc:
            logger.error(
                "Chequeo de unicidad previo al registro falló",
                extra={"error_id": exc.error_id, "error": exc.message},
            )
            return RegisterResult(error=bad_request(MSG_REGISTER_FAILED))
        if taken is not None:
            logger.info("Registro rechazado: dato ya registrado", extra={"field": taken})
            return RegisterResult(error=bad_request(MSG_ALREADY_REGISTERED))

        try:
            outcome = await self._identity.sign_up(
                input_data.email, input_data.password
            )
        except IdentityProviderError as exc:
            logger.error(
                "Sign-up en el proveedor falló",
                extra={"error_id": exc.error_id, "error": exc.message},
            )
            return RegisterResult(error=bad_request(MSG_REGISTER_FAILED))

        if outcome is None:
            return RegisterResult(error=bad_request(MSG_SIGN_UP_FAILED))

        created = await self._create_user.execute(
            CreateUserInput(
                first_name=input_data.first_name,
                last_name=input_data.last_name,
                dni=input_data.dni,
                email=input_data.email,
                phone=input_data.phone,
            )
        )
        if created.error is None:
            return RegisterResult(user=created.user)

        if created.error.field == "email":
            logger.warning(
                "Alta local chocó por email; la identidad remota no se toca",
                extra={"remote_id": outcome.identity.id},
            )
        else:
            await self._compensate(outcome.identity)
        if created.error.code == UserErrorCode.CONFLICT:
            return RegisterResult(error=bad_request(MSG_ALREADY_REGISTERED))
        return RegisterResult(error=bad_request(MSG_REGISTER_FAILED))

    async def _compensate(self, identity: RemoteIdentity) -> None:
        """Best effort: borrar la identidad remota que quedó sin perfil local."""
        try:
            removed = await self._identity.delete_identity(identity.id)
        except IdentityProviderError as exc:
            logger.error(
                "Compensación de registro falló; identidad remota huérfana",
                extra={"remote_id": identity.id, "error_id": exc.error_id},
            )
            return

        if removed:
            logger.info(
                "Identidad remota compensada tras fallo de alta local",
                extra={"remote_id": identity.id},
            )
        else:
            logger.warning(
                "Identidad remota huérfana (sin service role key para compensar)",
                extra={"remote_id": identity.id},
            )
