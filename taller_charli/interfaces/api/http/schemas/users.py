"""
===============================================================================
TARJETA CRC — schemas/users.py
===============================================================================

Módulo:
    Schemas HTTP para Usuarios

Responsabilidades:
    - Definir DTOs de alta (cliente / por admin) y de cambio parcial.
    - Validar nombres (1-50), DNI (8-10), email y rol.
    - Rechazar campos desconocidos en el body (extra="forbid").

Colaboradores:
    - domain.entities.UserRole / UserChanges
    - schemas.common.StrictCamelModel
===============================================================================
"""

from __future__ import annotations

from pydantic import EmailStr, Field, field_validator

from .....domain.entities import UserChanges, UserRole
from .common import StrictCamelModel

NAME_MAX_CHARS = 50
DNI_MIN_CHARS = 8
DNI_MAX_CHARS = 10
PHONE_MAX_CHARS = 30


def _strip(v: object) -> object:
    return v.strip() if isinstance(v, str) else v


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class CreateUserReq(StrictCamelModel):
    """Alta de usuario. El rol siempre queda en CLIENT."""

    first_name: str = Field(..., min_length=1, max_length=NAME_MAX_CHARS)
    last_name: str = Field(..., min_length=1, max_length=NAME_MAX_CHARS)
    dni: str = Field(..., min_length=DNI_MIN_CHARS, max_length=DNI_MAX_CHARS)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=PHONE_MAX_CHARS)

    @field_validator("first_name", "last_name", "dni", "phone", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        return _strip(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class CreateAdminUserReq(CreateUserReq):
    """Alta por administrador: el rol es obligatorio y se respeta."""

    role: UserRole = Field(..., description="ADMIN o CLIENT")


class UpdateUserReq(StrictCamelModel):
    """Cambio parcial: los campos omitidos (o null) no se modifican."""

    first_name: str | None = Field(
        default=None, min_length=1, max_length=NAME_MAX_CHARS
    )
    last_name: str | None = Field(
        default=None, min_length=1, max_length=NAME_MAX_CHARS
    )
    dni: str | None = Field(
        default=None, min_length=DNI_MIN_CHARS, max_length=DNI_MAX_CHARS
    )
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=PHONE_MAX_CHARS)
    role: UserRole | None = None

    @field_validator("first_name", "last_name", "dni", "phone", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        return _strip(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return v.lower() if v else v

    def to_changes(self) -> UserChanges:
        return UserChanges(
            first_name=self.first_name,
            last_name=self.last_name,
            dni=self.dni,
            email=self.email,
            phone=self.phone,
            role=self.role,
        )
