"""
===============================================================================
USE CASE: List Users (activos o eliminados, filtrado + paginado)
===============================================================================

Business Goal:
    Listar usuarios con filtros opcionales y paginación 1-based. El listado de
    activos y el de eliminados comparten forma; solo cambia el predicado de
    deleted_at y el orden (created_at DESC vs deleted_at DESC).

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    ListUsersUseCase

Responsibilities:
    - Validar page >= 1 y 1 <= limit <= max_limit.
    - Calcular offset y total de páginas (ceil(total / limit)).
    - Devolver UserPageResult con {users, total, page, limit, total_pages}.

Collaborators:
    - UserRepository.list_users(filter, deleted, limit, offset)
    - crosscutting.pagination: PageParams / total_pages
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....crosscutting.pagination import DEFAULT_LIMIT, PageParams, total_pages
from ....domain.entities import UserFilter, UserPage
from ....domain.repositories import UserRepository
from .user_results import UserError, UserErrorCode, UserPageResult, internal


@dataclass(frozen=True)
class ListUsersInput:
    """page/limit None -> defaults (1 / default_limit)."""

    user_filter: UserFilter = field(default_factory=UserFilter)
    page: int | None = None
    limit: int | None = None
    deleted: bool = False


class ListUsersUseCase:
    """Listado paginado de usuarios."""

    def __init__(
        self,
        repository: UserRepository,
        *,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = 100,
    ) -> None:
        self._users = repository
        self._default_limit = default_limit
        self._max_limit = max_limit

    async def execute(self, input_data: ListUsersInput) -> UserPageResult:
        if input_data.limit is not None and input_data.limit > self._max_limit:
            return self._validation_error(
                f"El límite no puede ser mayor a {self._max_limit}"
            )
        try:
            params = PageParams.of(
                input_data.page, input_data.limit, default_limit=self._default_limit
            )
        except ValueError:
            return self._validation_error("La página y el límite deben ser mayores a 0")

        try:
            users, total = await self._users.list_users(
                input_data.user_filter,
                deleted=input_data.deleted,
                limit=params.limit,
                offset=params.offset,
            )
        except DatabaseError as exc:
            logger.error(
                "Listado de usuarios falló",
                extra={"deleted": input_data.deleted, "error_id": exc.error_id},
            )
            return UserPageResult(error=internal("Error interno al listar usuarios"))

        return UserPageResult(
            page=UserPage(
                users=users,
                total=total,
                page=params.page,
                limit=params.limit,
                total_pages=total_pages(total, params.limit),
            )
        )

    @staticmethod
    def _validation_error(message: str) -> UserPageResult:
        return UserPageResult(
            error=UserError(code=UserErrorCode.VALIDATION_ERROR, message=message)
        )
