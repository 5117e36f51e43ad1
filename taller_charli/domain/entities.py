"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio (User, UserRole, filtros y páginas)

Responsabilidades:
    - Definir el registro de usuario local (perfil + rol + soft delete).
    - Definir los "shapes" de alta, cambio parcial, filtro y página.
    - Brindar helpers mínimos para invariantes simples (activo / eliminado).

Colaboradores:
    - domain.repositories: persisten/recuperan estas entidades.
    - application/usecases: construyen/consumen estas entidades.
    - interfaces/api: serializan DTOs basados en estas entidades.

Principios:
    - Sin dependencias a DB/HTTP/FastAPI.
    - Datos + comportamiento mínimo.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional


def _utcnow() -> datetime:
    """Fecha/hora UTC (helper interno)."""
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    """Roles soportados. No existen otros valores válidos."""

    ADMIN = "ADMIN"
    CLIENT = "CLIENT"


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


@dataclass
class User:
    """
    Registro de usuario local.

    Importante:
      - email y dni son únicos entre TODOS los registros (activos o no).
      - Activo <=> deleted_at is None.
      - Las credenciales viven en el proveedor de identidad, no acá.
    """

    id: int
    first_name: str
    last_name: str
    dni: str
    email: str
    role: UserRole = UserRole.CLIENT
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        """True si está soft-deleted."""
        return self.deleted_at is not None

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    def mark_deleted(self, *, at: datetime | None = None) -> None:
        """Marca el usuario como eliminado (soft delete)."""
        self.deleted_at = at or _utcnow()
        self.updated_at = self.deleted_at

    def restore(self, *, at: datetime | None = None) -> None:
        """Restaura un usuario soft-deleted."""
        self.deleted_at = None
        self.updated_at = at or _utcnow()


@dataclass(frozen=True)
class NewUser:
    """Datos de alta de un usuario (el id lo asigna el store)."""

    first_name: str
    last_name: str
    dni: str
    email: str
    phone: Optional[str] = None
    role: UserRole = UserRole.CLIENT


@dataclass(frozen=True)
class UserChanges:
    """
    Cambio parcial: solo se aplican los campos distintos de None.

    Nota: no hay forma de "borrar" el teléfono enviando null; un campo
    omitido y uno en null significan lo mismo (sin cambio).
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    dni: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[UserRole] = None

    def as_dict(self) -> dict[str, Any]:
        """Campos presentes, en orden de declaración."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @property
    def is_empty(self) -> bool:
        return not self.as_dict()


# ---------------------------------------------------------------------------
# Listados
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserFilter:
    """
    Filtros de listado.

    Semántica de match:
      - first_name / last_name / email: parcial, sin distinguir mayúsculas.
      - dni / phone: parcial, distinguiendo mayúsculas.
      - role: exacto.
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    dni: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[UserRole] = None

    def matches(self, user: User) -> bool:
        """Evalúa el filtro en memoria (mismas reglas que el SQL)."""
        for attr in ("first_name", "last_name", "email"):
            needle = getattr(self, attr)
            if needle and needle.lower() not in (getattr(user, attr) or "").lower():
                return False
        for attr in ("dni", "phone"):
            needle = getattr(self, attr)
            if needle and needle not in (getattr(user, attr) or ""):
                return False
        if self.role is not None and user.role != self.role:
            return False
        return True


@dataclass
class UserPage:
    """Página de usuarios + metadata (total ignora la paginación)."""

    users: List[User] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10
    total_pages: int = 0
