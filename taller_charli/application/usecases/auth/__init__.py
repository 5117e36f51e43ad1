"""
===============================================================================
AUTH USE CASES PACKAGE (Public API / Exports)
===============================================================================

Flujos delegados al proveedor de identidad: login, registro, refresh,
logout y resolución de la identidad de un request.
===============================================================================
"""

from __future__ import annotations

from .auth_results import (
    AuthError,
    AuthErrorCode,
    AuthResult,
    IdentityResult,
    LogoutResult,
    RegisterResult,
)
from .login import LoginInput, LoginUseCase
from .logout import LogoutUseCase
from .refresh_token import RefreshTokenUseCase
from .register import RegisterInput, RegisterUseCase
from .resolve_identity import ResolveIdentityUseCase

__all__ = [
    "AuthError",
    "AuthErrorCode",
    "AuthResult",
    "IdentityResult",
    "LoginInput",
    "LoginUseCase",
    "LogoutResult",
    "LogoutUseCase",
    "RefreshTokenUseCase",
    "RegisterInput",
    "RegisterResult",
    "RegisterUseCase",
    "ResolveIdentityUseCase",
]
