"""
===============================================================================
AUTH USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Business Goal:
    Tipos de resultado de los flujos delegados al proveedor de identidad:
    login, registro, refresh, logout y resolución de identidad por token.

Why (Context / Intención):
    - Ningún flujo lanza errores HTTP: devuelven AuthError con código estable.
    - Un rechazo del proveedor (credenciales/token) es UNAUTHENTICATED.
    - Una falla técnica del proveedor o del store es BAD_REQUEST con mensaje
      genérico; el detalle queda en logs.

-------------------------------------------------------------------------------
CRC CARD (Module-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Responsibilities:
    - AuthErrorCode / AuthError
    - AuthResult (usuario + tokens), RegisterResult, LogoutResult, IdentityResult

Collaborators:
    - domain.entities.User
    - domain.access.AuthenticatedIdentity
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ....domain.access import AuthenticatedIdentity
from ....domain.entities import User


class AuthErrorCode(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    BAD_REQUEST = "BAD_REQUEST"


@dataclass(frozen=True)
class AuthError:
    code: AuthErrorCode
    message: str


@dataclass
class AuthResult:
    """
    Resultado de login / refresh.

    Contrato:
      - Éxito: user + access_token + refresh_token, error == None
      - Falla: error != None
    """

    user: User | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    error: AuthError | None = None


@dataclass
class RegisterResult:
    user: User | None = None
    error: AuthError | None = None


@dataclass
class LogoutResult:
    success: bool = False
    error: AuthError | None = None


@dataclass
class IdentityResult:
    """Identidad autenticada de un request, o el motivo del rechazo."""

    identity: AuthenticatedIdentity | None = None
    error: AuthError | None = None


def unauthenticated(message: str) -> AuthError:
    return AuthError(code=AuthErrorCode.UNAUTHENTICATED, message=message)


def bad_request(message: str) -> AuthError:
    return AuthError(code=AuthErrorCode.BAD_REQUEST, message=message)
