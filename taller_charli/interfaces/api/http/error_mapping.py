"""
===============================================================================
TARJETA CRC — error_mapping.py (errores de casos de uso -> HTTP)
===============================================================================

Responsabilidades:
  - Convertir UserError / AuthError en la AppHTTPException que corresponde.
  - Que los routers no repitan el switch de códigos.

Notas:
  - El mensaje del caso de uso llega al cliente sin cambios: ya está
    redactado para mostrarse.
  - Solo UNAUTHENTICATED lleva el header WWW-Authenticate.
===============================================================================
"""

from __future__ import annotations

from typing import Callable, NoReturn

from ....application.usecases.auth import AuthError, AuthErrorCode
from ....application.usecases.users import UserError, UserErrorCode
from ....crosscutting.error_responses import (
    AppHTTPException,
    bad_request,
    conflict,
    forbidden,
    internal_error,
    not_found,
    unauthorized,
    validation_error,
)

_USER_ERRORS: dict[UserErrorCode, Callable[[str], AppHTTPException]] = {
    UserErrorCode.VALIDATION_ERROR: validation_error,
    UserErrorCode.BAD_REQUEST: bad_request,
    UserErrorCode.UNAUTHENTICATED: unauthorized,
    UserErrorCode.FORBIDDEN: forbidden,
    UserErrorCode.NOT_FOUND: not_found,
    UserErrorCode.CONFLICT: conflict,
}

_AUTH_ERRORS: dict[AuthErrorCode, Callable[[str], AppHTTPException]] = {
    AuthErrorCode.UNAUTHENTICATED: unauthorized,
    AuthErrorCode.BAD_REQUEST: bad_request,
}


def raise_user_error(error: UserError) -> NoReturn:
    raise _USER_ERRORS.get(error.code, internal_error)(error.message)


def raise_auth_error(error: AuthError) -> NoReturn:
    raise _AUTH_ERRORS.get(error.code, bad_request)(error.message)
