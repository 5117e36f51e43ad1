# taller_charli/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Errores internos del backend
===============================================================================

Cada error lleva:
  - error_code: identificador estable para logs y métricas.
  - error_id: uuid para cruzar la respuesta HTTP con la línea de log.
  - message: texto apto para log (nunca credenciales).

Jerarquía:
  TallerError
  ├── DatabaseError
  │   ├── UniqueViolationError (field = "email" | "DNI")
  │   └── PoolError
  │       ├── PoolAlreadyInitializedError
  │       └── PoolNotInitializedError
  └── IdentityProviderError

Quién las usa:
  - infrastructure/* las lanza.
  - application/usecases traduce las esperables a resultados tipados.
  - api/exception_handlers.py responde por las que escapan.
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class TallerError(Exception):
    error_code: str = "TALLER_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_id = error_id or uuid4().hex
        self.original_error = original_error


class DatabaseError(TallerError):
    """Fallo de Postgres: conexión, query o timeout."""

    error_code = "DATABASE_ERROR"


class UniqueViolationError(DatabaseError):
    """Email o DNI repetido (también contra usuarios eliminados)."""

    error_code = "UNIQUE_VIOLATION"

    def __init__(self, field: str, message: str | None = None, **kwargs):
        self.field = field
        super().__init__(message or f"El {field} ya está registrado", **kwargs)


class PoolError(DatabaseError):
    error_code = "DB_POOL_ERROR"


class PoolAlreadyInitializedError(PoolError):
    pass


class PoolNotInitializedError(PoolError):
    pass


class IdentityProviderError(TallerError):
    """Supabase GoTrue no respondió o respondió algo inesperado."""

    error_code = "IDENTITY_PROVIDER_ERROR"
