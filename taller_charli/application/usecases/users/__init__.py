"""
===============================================================================
USER USE CASES PACKAGE (Public API / Exports)
===============================================================================

Re-exporta los casos de uso de usuarios y sus resultados/errores para que
routers y container importen desde un único lugar.
===============================================================================
"""

from __future__ import annotations

from .create_user import CreateUserInput, CreateUserUseCase
from .delete_user import DeleteUserUseCase
from .get_user import GetUserUseCase
from .list_users import ListUsersInput, ListUsersUseCase
from .recover_user import RecoverUserUseCase
from .update_user import UpdateUserInput, UpdateUserUseCase
from .user_results import UserError, UserErrorCode, UserPageResult, UserResult

__all__ = [
    "CreateUserInput",
    "CreateUserUseCase",
    "DeleteUserUseCase",
    "GetUserUseCase",
    "ListUsersInput",
    "ListUsersUseCase",
    "RecoverUserUseCase",
    "UpdateUserInput",
    "UpdateUserUseCase",
    "UserError",
    "UserErrorCode",
    "UserPageResult",
    "UserResult",
]
