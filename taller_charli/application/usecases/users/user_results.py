"""
===============================================================================
USER USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Name:
    User Use Case Results

Business Goal:
    Proveer tipos consistentes de resultados y errores para los casos de uso
    de usuarios (alta, consulta, listado, actualización, baja lógica, recupero).

Why (Context / Intención):
    - Los use cases devuelven resultados tipados en lugar de propagar excepciones.
    - El mapeo a HTTP vive solo en la frontera (error_mapping.py).
    - Los tests verifican flujos por resultado (sin HTTP).

-------------------------------------------------------------------------------
CRC CARD (Module-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    user_results models (module)

Responsibilities:
    - Definir UserErrorCode como conjunto estable de categorías de error.
    - Definir UserError como contrato mínimo de error.
    - Definir UserResult / UserPageResult.

Collaborators:
    - domain.entities: User, UserPage
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ....domain.entities import User, UserPage


class UserErrorCode(str, Enum):
    """
    Categorías de error de casos de uso.

    Códigos:
      - VALIDATION_ERROR: input inválido (page/limit, cambios vacíos).
      - BAD_REQUEST: operación inválida para el estado actual.
      - UNAUTHENTICATED: sin identidad válida.
      - FORBIDDEN: actor sin permisos sobre el recurso.
      - NOT_FOUND: recurso inexistente o eliminado lógicamente.
      - CONFLICT: colisión de unicidad (email / DNI).
      - INTERNAL: falla no clasificada del store.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"


@dataclass(frozen=True)
class UserError:
    """
    Error de caso de uso.

    Campos:
      - code: UserErrorCode (categoría estable)
      - message: mensaje humano en español (se devuelve al cliente)
      - field: campo en conflicto ("email" / "DNI"), si aplica
    """

    code: UserErrorCode
    message: str
    field: str | None = None


@dataclass
class UserResult:
    """
    Resultado con un usuario.

    Contrato:
      - Éxito: user != None y error == None
      - Falla: user == None y error != None
    """

    user: User | None = None
    error: UserError | None = None


@dataclass
class UserPageResult:
    """Resultado de listado paginado."""

    page: UserPage | None = None
    error: UserError | None = None


def not_found(user_id: int) -> UserError:
    return UserError(
        code=UserErrorCode.NOT_FOUND,
        message=f"Usuario con ID {user_id} no encontrado",
    )


def internal(message: str) -> UserError:
    return UserError(code=UserErrorCode.INTERNAL, message=message)
