"""
===============================================================================
TARJETA CRC — taller_charli/api/exception_handlers.py (Errores que escapan)
===============================================================================

Responsabilidades:
  - Convertir en problem+json las excepciones que no resolvió un caso de uso.
  - Loguear el detalle real (con error_id) y responder con un texto genérico.

Mapeo:
  - AppHTTPException       -> el status de su ErrorCode
  - RequestValidationError -> 400 VALIDATION_ERROR
  - DatabaseError          -> 500 INTERNAL_ERROR
  - IdentityProviderError  -> 400 BAD_REQUEST
  - TallerError            -> 500 INTERNAL_ERROR
  - Exception              -> 500 INTERNAL_ERROR (stacktrace solo en el log)

Colaboradores:
  - crosscutting.error_responses (problem_response, handlers HTTP)
  - crosscutting.exceptions
===============================================================================
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    problem_response,
    request_id_of,
    request_validation_handler,
)
from ..crosscutting.exceptions import DatabaseError, IdentityProviderError, TallerError
from ..crosscutting.logger import logger

_GENERIC_DETAIL = "Error interno del servidor"

# Orden de búsqueda: de la clase más específica a la base.
_SERVICE_ERRORS: tuple[tuple[type[TallerError], ErrorCode, str], ...] = (
    (DatabaseError, ErrorCode.INTERNAL_ERROR, _GENERIC_DETAIL),
    (
        IdentityProviderError,
        ErrorCode.BAD_REQUEST,
        "Error al comunicarse con el proveedor de identidad",
    ),
    (TallerError, ErrorCode.INTERNAL_ERROR, _GENERIC_DETAIL),
)


async def service_error_handler(request: Request, exc: TallerError) -> JSONResponse:
    code, detail = next(
        (code, detail)
        for cls, code, detail in _SERVICE_ERRORS
        if isinstance(exc, cls)
    )
    request_id = request_id_of(request)
    logger.error(
        "Error de servicio",
        extra={
            "code": code.value,
            "error_id": exc.error_id,
            "error": exc.message,
            "error_type": type(exc).__name__,
        },
    )
    return problem_response(
        code,
        detail,
        instance=request.url.path,
        request_id=request_id,
        errors=[{"error_id": exc.error_id, "request_id": request_id}],
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Excepción no controlada", exc_info=exc)
    detail = _GENERIC_DETAIL if get_settings().is_production() else str(exc)
    return problem_response(
        ErrorCode.INTERNAL_ERROR,
        detail or _GENERIC_DETAIL,
        instance=request.url.path,
        request_id=request_id_of(request),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(TallerError, service_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
