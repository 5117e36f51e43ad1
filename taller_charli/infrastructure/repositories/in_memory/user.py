"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/user.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Almacenar usuarios en memoria (tests / local dev).
  - Replicar la semántica del repo Postgres:
      - ids autoincrementales
      - unicidad GLOBAL de email y DNI (incluye eliminados)
      - filtros (parcial sin mayúsculas / parcial exacto / role exacto)
      - orden created_at DESC, id DESC / deleted_at DESC, id DESC
  - Copias defensivas: nunca se entrega la instancia interna.

Collaborators:
  - domain.entities (User, NewUser, UserChanges, UserFilter)
  - domain.repositories.UserRepository (contrato a implementar)

Constraints:
  - Acceso protegido por Lock; no hay awaits dentro de la sección crítica.
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional, Tuple

from ....crosscutting.exceptions import UniqueViolationError
from ....domain.entities import NewUser, User, UserChanges, UserFilter


class InMemoryUserRepository:
    """
    Repositorio in-memory de usuarios.

    Modelo mental:
    - _users es la "tabla" (id -> User).
    - _next_id emula la secuencia de la PK.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[int, User] = {}
        self._next_id = 1

    # =========================================================
    # Helpers internos
    # =========================================================
    @staticmethod
    def _now() -> datetime:
        """R: Fuente única de tiempo (UTC)."""
        return datetime.now(timezone.utc)

    def _check_unique(
        self, *, email: str | None, dni: str | None, exclude_id: int | None = None
    ) -> None:
        """R: Emula uq_users_email / uq_users_dni (sin importar deleted_at)."""
        for user in self._users.values():
            if user.id == exclude_id:
                continue
            if email is not None and user.email == email:
                raise UniqueViolationError("email")
            if dni is not None and user.dni == dni:
                raise UniqueViolationError("DNI")

    @staticmethod
    def _sort_key(user: User, *, deleted: bool) -> tuple:
        moment = user.deleted_at if deleted else user.created_at
        ts = (moment or datetime.min.replace(tzinfo=timezone.utc)).timestamp()
        return (-ts, -user.id)

    # =========================================================
    # Escritura
    # =========================================================
    async def create_user(self, new_user: NewUser) -> User:
        with self._lock:
            self._check_unique(email=new_user.email, dni=new_user.dni)
            now = self._now()
            user = User(
                id=self._next_id,
                first_name=new_user.first_name,
                last_name=new_user.last_name,
                dni=new_user.dni,
                email=new_user.email,
                phone=new_user.phone,
                role=new_user.role,
                created_at=now,
                updated_at=now,
            )
            self._users[user.id] = user
            self._next_id += 1
            return replace(user)

    async def update_user(self, user_id: int, changes: UserChanges) -> Optional[User]:
        with self._lock:
            current = self._users.get(user_id)
            if current is None or current.is_deleted:
                return None
            present = changes.as_dict()
            if not present:
                return replace(current)
            self._check_unique(
                email=present.get("email"),
                dni=present.get("dni"),
                exclude_id=user_id,
            )
            updated = replace(current, **present, updated_at=self._now())
            self._users[user_id] = updated
            return replace(updated)

    async def soft_delete(self, user_id: int) -> Optional[User]:
        with self._lock:
            current = self._users.get(user_id)
            if current is None or current.is_deleted:
                return None
            current.mark_deleted(at=self._now())
            return replace(current)

    async def restore(self, user_id: int) -> Optional[User]:
        with self._lock:
            current = self._users.get(user_id)
            if current is None or not current.is_deleted:
                return None
            current.restore(at=self._now())
            return replace(current)

    # =========================================================
    # Lectura
    # =========================================================
    async def get_active_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.email == email and not user.is_deleted:
                    return replace(user)
        return None

    async def get_active_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None or user.is_deleted:
                return None
            return replace(user)

    async def get_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    async def taken_field(self, *, email: str, dni: str) -> Optional[str]:
        with self._lock:
            holders = list(self._users.values())
        if any(u.email == email for u in holders):
            return "email"
        if any(u.dni == dni for u in holders):
            return "DNI"
        return None

    async def list_users(
        self,
        user_filter: UserFilter,
        *,
        deleted: bool,
        limit: int,
        offset: int,
    ) -> Tuple[List[User], int]:
        with self._lock:
            values = [replace(u) for u in self._users.values()]

        matching = sorted(
            (
                u
                for u in values
                if u.is_deleted == deleted and user_filter.matches(u)
            ),
            key=lambda u: self._sort_key(u, deleted=deleted),
        )
        return matching[offset : offset + limit], len(matching)

    async def ping(self) -> bool:
        return True
