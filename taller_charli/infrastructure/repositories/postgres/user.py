"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/user.py
============================================================
Class: PostgresUserRepository

Responsibilities:
  - Persistir usuarios locales en la tabla `users` (contrato con migraciones).
  - Resolver usuarios ACTIVOS por email / id y cualquier usuario por id.
  - Listados filtrados + paginados (activos o eliminados) con COUNT total.
  - Update parcial dinámico, soft delete y recupero.
  - Mapear filas crudas -> entidad de dominio `User` y validar `UserRole`.
  - Traducir violaciones de unicidad a UniqueViolationError("email" | "DNI").
  - Exponer el resto de fallos vía `DatabaseError` con logging estructurado.

Collaborators:
  - psycopg_pool.AsyncConnectionPool (pool de conexiones)
  - infrastructure.db.pool.get_pool (accesor del pool global)
  - domain.entities.User / UserRole / UserFilter / UserChanges
  - crosscutting.exceptions.DatabaseError / UniqueViolationError

Constraints / Notes:
  - Repositorio puro: NO define reglas de negocio.
  - Retorna None cuando no existe el recurso (no exception por “not found”).
  - SQL parametrizado siempre; los fragmentos dinámicos salen de whitelists.
  - Orden estable: created_at DESC, id DESC / deleted_at DESC, id DESC.
============================================================
"""

from __future__ import annotations

from typing import Iterable, Optional

from psycopg import errors as pg_errors
from psycopg_pool import AsyncConnectionPool

from ....crosscutting.exceptions import DatabaseError, UniqueViolationError
from ....crosscutting.logger import logger
from ....domain.entities import NewUser, User, UserChanges, UserFilter, UserRole

# ============================================================
# Constantes y contratos de SQL
# ============================================================
# R: Lista explícita de columnas para mantener el contrato estable con migraciones.
_USER_COLUMNS = (
    "id, first_name, last_name, dni, email, phone, role, "
    "created_at, updated_at, deleted_at"
)

_ACTIVE_ORDER_BY = "created_at DESC, id DESC"
_DELETED_ORDER_BY = "deleted_at DESC, id DESC"

# R: Campos filtrables -> operador. ILIKE = parcial sin mayúsculas; LIKE = parcial exacto.
_FILTER_OPERATORS: dict[str, str] = {
    "first_name": "ILIKE",
    "last_name": "ILIKE",
    "email": "ILIKE",
    "dni": "LIKE",
    "phone": "LIKE",
}

# R: Columnas actualizables (whitelist para el SET dinámico).
_UPDATABLE_COLUMNS = ("first_name", "last_name", "dni", "email", "phone", "role")


# ============================================================
# Helpers internos: mapping + SQL
# ============================================================
def _row_to_user(row: tuple) -> User:
    """
    Convierte una fila de `users` a entidad de dominio `User`.

    Role casting estricto: si el valor no matchea el enum -> DatabaseError.
    """
    try:
        role = UserRole(row[6])
    except ValueError as exc:
        raise DatabaseError(f"Invalid user role in database: {row[6]}") from exc

    return User(
        id=row[0],
        first_name=row[1],
        last_name=row[2],
        dni=row[3],
        email=row[4],
        phone=row[5],
        role=role,
        created_at=row[7],
        updated_at=row[8],
        deleted_at=row[9],
    )


def _escape_like(value: str) -> str:
    """Escapa comodines de LIKE para que el input matchee literal."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_user_filter(
    user_filter: UserFilter, *, deleted: bool
) -> tuple[str, list[object]]:
    """
    Arma el WHERE de listados.

    Returns:
        (clause, params) donde clause empieza con "WHERE".
    """
    conditions = ["deleted_at IS NOT NULL" if deleted else "deleted_at IS NULL"]
    params: list[object] = []

    for column, operator in _FILTER_OPERATORS.items():
        value = getattr(user_filter, column)
        if value:
            conditions.append(f"{column} {operator} %s ESCAPE '\\'")
            params.append(f"%{_escape_like(value)}%")

    if user_filter.role is not None:
        conditions.append("role = %s")
        params.append(user_filter.role.value)

    return "WHERE " + " AND ".join(conditions), params


def build_update_set(changes: UserChanges) -> tuple[list[str], list[object]]:
    """SET dinámico solo con los campos presentes (+ updated_at)."""
    updates: list[str] = []
    params: list[object] = []
    present = changes.as_dict()

    for column in _UPDATABLE_COLUMNS:
        if column not in present:
            continue
        value = present[column]
        updates.append(f"{column} = %s")
        params.append(value.value if isinstance(value, UserRole) else value)

    if updates:
        updates.append("updated_at = now()")
    return updates, params


def unique_field_from_constraint(constraint_name: str | None) -> str:
    """uq_users_email -> "email"; cualquier otra constraint única -> "DNI"."""
    if constraint_name and "email" in constraint_name.lower():
        return "email"
    return "DNI"


# ============================================================
# Repositorio
# ============================================================
class PostgresUserRepository:
    """
    Repositorio async de usuarios sobre PostgreSQL.

    El pool es inyectable (tests); si es None se usa el global del proceso.
    """

    def __init__(self, pool: AsyncConnectionPool | None = None) -> None:
        self._pool = pool

    def _get_pool(self) -> AsyncConnectionPool:
        if self._pool is not None:
            return self._pool
        from ...db.pool import get_pool

        return get_pool()

    # --------------------------------------------------------
    # Ejecución con manejo consistente de errores
    # --------------------------------------------------------
    async def _fetchone(
        self,
        *,
        query: str,
        params: Iterable[object],
        log_msg: str,
        log_extra: dict[str, object],
    ) -> tuple | None:
        try:
            async with self._get_pool().connection() as conn:
                cur = await conn.execute(query, tuple(params))
                return await cur.fetchone()
        except pg_errors.UniqueViolation as exc:
            field = unique_field_from_constraint(exc.diag.constraint_name)
            logger.info(
                "Violación de unicidad en users",
                extra={**log_extra, "field": field},
            )
            raise UniqueViolationError(field, original_error=exc) from exc
        except Exception as exc:
            logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
            raise DatabaseError(f"{log_msg}: {exc}", original_error=exc) from exc

    async def _fetchall(
        self,
        *,
        query: str,
        params: Iterable[object] = (),
        log_msg: str,
        log_extra: dict[str, object],
    ) -> list[tuple]:
        try:
            async with self._get_pool().connection() as conn:
                cur = await conn.execute(query, tuple(params))
                return await cur.fetchall()
        except Exception as exc:
            logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
            raise DatabaseError(f"{log_msg}: {exc}", original_error=exc) from exc

    # --------------------------------------------------------
    # Escritura
    # --------------------------------------------------------
    async def create_user(self, new_user: NewUser) -> User:
        row = await self._fetchone(
            query=f"""
                INSERT INTO users (first_name, last_name, dni, email, phone, role)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING {_USER_COLUMNS}
            """,
            params=(
                new_user.first_name,
                new_user.last_name,
                new_user.dni,
                new_user.email,
                new_user.phone,
                new_user.role.value,
            ),
            log_msg="PostgresUserRepository: create_user failed",
            log_extra={"role": new_user.role.value},
        )
        if not row:
            raise DatabaseError(
                "PostgresUserRepository: create_user failed (no row returned)"
            )
        return _row_to_user(row)

    async def update_user(self, user_id: int, changes: UserChanges) -> Optional[User]:
        updates, params = build_update_set(changes)
        if not updates:
            # Sin cambios: devolvemos el estado actual (si sigue activo).
            return await self.get_active_by_id(user_id)

        params.append(user_id)
        # updates sale de una whitelist, así que el f-string es seguro.
        row = await self._fetchone(
            query=f"""
                UPDATE users
                SET {", ".join(updates)}
                WHERE id = %s AND deleted_at IS NULL
                RETURNING {_USER_COLUMNS}
            """,
            params=params,
            log_msg="PostgresUserRepository: update_user failed",
            log_extra={"target_user_id": user_id, "updates": updates},
        )
        return _row_to_user(row) if row else None

    async def soft_delete(self, user_id: int) -> Optional[User]:
        row = await self._fetchone(
            query=f"""
                UPDATE users
                SET deleted_at = now(), updated_at = now()
                WHERE id = %s AND deleted_at IS NULL
                RETURNING {_USER_COLUMNS}
            """,
            params=(user_id,),
            log_msg="PostgresUserRepository: soft_delete failed",
            log_extra={"target_user_id": user_id},
        )
        return _row_to_user(row) if row else None

    async def restore(self, user_id: int) -> Optional[User]:
        row = await self._fetchone(
            query=f"""
                UPDATE users
                SET deleted_at = NULL, updated_at = now()
                WHERE id = %s AND deleted_at IS NOT NULL
                RETURNING {_USER_COLUMNS}
            """,
            params=(user_id,),
            log_msg="PostgresUserRepository: restore failed",
            log_extra={"target_user_id": user_id},
        )
        return _row_to_user(row) if row else None

    # --------------------------------------------------------
    # Lectura
    # --------------------------------------------------------
    async def get_active_by_email(self, email: str) -> Optional[User]:
        row = await self._fetchone(
            query=f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE email = %s AND deleted_at IS NULL
            """,
            params=(email,),
            log_msg="PostgresUserRepository: get_active_by_email failed",
            log_extra={},
        )
        return _row_to_user(row) if row else None

    async def get_active_by_id(self, user_id: int) -> Optional[User]:
        row = await self._fetchone(
            query=f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE id = %s AND deleted_at IS NULL
            """,
            params=(user_id,),
            log_msg="PostgresUserRepository: get_active_by_id failed",
            log_extra={"target_user_id": user_id},
        )
        return _row_to_user(row) if row else None

    async def get_by_id(self, user_id: int) -> Optional[User]:
        row = await self._fetchone(
            query=f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE id = %s
            """,
            params=(user_id,),
            log_msg="PostgresUserRepository: get_by_id failed",
            log_extra={"target_user_id": user_id},
        )
        return _row_to_user(row) if row else None

    async def taken_field(self, *, email: str, dni: str) -> Optional[str]:
        # Sin filtro por deleted_at: la unicidad alcanza a los eliminados.
        row = await self._fetchone(
            query="""
                SELECT CASE WHEN email = %s THEN 'email' ELSE 'DNI' END
                FROM users
                WHERE email = %s OR dni = %s
                ORDER BY (email = %s) DESC
                LIMIT 1
            """,
            params=(email, email, dni, email),
            log_msg="PostgresUserRepository: taken_field failed",
            log_extra={},
        )
        return str(row[0]) if row else None

    async def list_users(
        self,
        user_filter: UserFilter,
        *,
        deleted: bool,
        limit: int,
        offset: int,
    ) -> tuple[list[User], int]:
        where, params = build_user_filter(user_filter, deleted=deleted)
        order_by = _DELETED_ORDER_BY if deleted else _ACTIVE_ORDER_BY
        log_extra = {"deleted": deleted, "limit": limit, "offset": offset}

        count_row = await self._fetchone(
            query=f"SELECT COUNT(*) FROM users {where}",
            params=params,
            log_msg="PostgresUserRepository: count_users failed",
            log_extra=log_extra,
        )
        total = int(count_row[0]) if count_row else 0
        if total == 0 or offset >= total:
            return [], total

        rows = await self._fetchall(
            query=f"""
                SELECT {_USER_COLUMNS}
                FROM users
                {where}
                ORDER BY {order_by}
                LIMIT %s OFFSET %s
            """,
            params=[*params, limit, offset],
            log_msg="PostgresUserRepository: list_users failed",
            log_extra=log_extra,
        )
        return [_row_to_user(r) for r in rows], total

    async def ping(self) -> bool:
        row = await self._fetchone(
            query="SELECT 1",
            params=(),
            log_msg="PostgresUserRepository: ping failed",
            log_extra={},
        )
        return bool(row)
