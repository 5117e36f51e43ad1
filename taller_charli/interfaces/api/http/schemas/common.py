"""
===============================================================================
TARJETA CRC — schemas/common.py
===============================================================================

Módulo:
    Sobre de respuesta y DTOs compartidos

Responsabilidades:
    - Definir el sobre de éxito {success, message, data}.
    - Definir UserRes (contrato público del usuario, camelCase).
    - Definir la página de usuarios {users, total, page, limit, totalPages}.

Colaboradores:
    - domain.entities.User / UserPage / UserRole
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .....domain.entities import User, UserPage, UserRole

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base de DTOs: snake_case en Python, camelCase en el JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StrictCamelModel(CamelModel):
    """Base de requests: campos desconocidos en el body -> 400."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )


class ApiResponse(CamelModel, Generic[T]):
    """Sobre de éxito. Los errores usan RFC7807 (ErrorDetail)."""

    success: bool = True
    message: str
    data: T | None = None


class MessageRes(CamelModel):
    """Respuesta sin payload (ej: logout)."""

    success: bool = True
    message: str


class UserRes(CamelModel):
    id: int
    first_name: str
    last_name: str
    dni: str
    email: str
    phone: str | None = None
    role: UserRole
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = Field(
        default=None, description="null si el usuario está activo"
    )

    @classmethod
    def from_entity(cls, user: User) -> "UserRes":
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            dni=user.dni,
            email=user.email,
            phone=user.phone,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
            deleted_at=user.deleted_at,
        )


class UserPageRes(CamelModel):
    users: list[UserRes] = Field(default_factory=list)
    total: int = Field(..., ge=0, description="Total que cumple el filtro")
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_entity(cls, page: UserPage) -> "UserPageRes":
        return cls(
            users=[UserRes.from_entity(u) for u in page.users],
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        )
