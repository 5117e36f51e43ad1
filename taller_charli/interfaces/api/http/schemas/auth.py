"""
===============================================================================
TARJETA CRC — schemas/auth.py
===============================================================================

Módulo:
    Schemas HTTP para autenticación (login / registro / refresh)

Responsabilidades:
    - Validar credenciales (email válido, contraseña >= 6 caracteres).
    - Reusar las reglas de perfil de CreateUserReq en el registro.
    - Definir la respuesta de sesión {user, token, refreshToken}.

Notas:
    - La contraseña nunca se loguea (el logger la redacta igual).
===============================================================================
"""

from __future__ import annotations

from pydantic import EmailStr, Field, field_validator

from .common import CamelModel, StrictCamelModel, UserRes
from .users import CreateUserReq

PASSWORD_MIN_CHARS = 6


class LoginReq(StrictCamelModel):
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_CHARS)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class RegisterReq(CreateUserReq):
    """Registro público: perfil + contraseña (rol CLIENT forzado)."""

    password: str = Field(..., min_length=PASSWORD_MIN_CHARS)


class RefreshReq(StrictCamelModel):
    refresh_token: str = Field(..., min_length=1)


class SessionRes(CamelModel):
    user: UserRes
    token: str
    refresh_token: str
