# taller_charli/crosscutting/error_responses.py
"""
===============================================================================
TARJETA CRC — crosscutting/error_responses.py
===============================================================================

Componente:
  Respuestas de error HTTP (RFC 7807, application/problem+json)

Responsabilidades:
  - Catálogo de códigos de error estables y su status HTTP.
  - Excepción HTTP de la app (AppHTTPException) + factories por caso.
  - Construir el cuerpo problem+json (con `success: false`, simétrico al
    sobre de éxito) para handlers y middlewares.
  - Traducir errores de validación de FastAPI/pydantic a 400.

Colaboradores:
  - api/exception_handlers.py (registra los handlers)
  - crosscutting/middleware.py (413 fuera del ciclo de FastAPI)
  - interfaces/api/http/error_mapping.py (errores de casos de uso)
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @property
    def status(self) -> int:
        return _STATUS_BY_CODE[self]

    @property
    def title(self) -> str:
        return self.value.replace("_", " ").title()


_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.PAYLOAD_TOO_LARGE: 413,
    ErrorCode.INTERNAL_ERROR: 500,
}


class ErrorDetail(BaseModel):
    """Problem Details (RFC 7807) + `success` y `code` estables."""

    success: bool = False
    type: str = "about:blank"
    title: str
    status: int
    detail: str
    code: ErrorCode
    instance: str | None = None
    errors: list[dict[str, Any]] | None = None


def _openapi_problem(description: str) -> dict[str, Any]:
    return {
        "description": description,
        "model": ErrorDetail,
        "content": {
            PROBLEM_JSON_MEDIA_TYPE: {
                "schema": {"$ref": "#/components/schemas/ErrorDetail"}
            }
        },
    }


# Respuestas documentadas en todas las rutas del router raíz.
OPENAPI_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status: _openapi_problem(text)
    for status, text in (
        (400, "Datos inválidos u operación no permitida"),
        (401, "Token ausente, inválido o expirado"),
        (403, "Rol o pertenencia insuficiente"),
        (404, "Recurso inexistente o eliminado"),
        (409, "Email o DNI ya registrado"),
        (413, "Body demasiado grande"),
        ("default", "Error interno"),
    )
}


def problem_response(
    code: ErrorCode,
    detail: str,
    *,
    instance: str | None = None,
    request_id: str | None = None,
    errors: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """
    Arma la respuesta problem+json.

    El request_id se agrega a errors[] salvo que ya venga en alguna entrada.
    """
    items = list(errors or [])
    if request_id and not any("request_id" in item for item in items):
        items.append({"request_id": request_id})

    body = ErrorDetail(
        type=f"about:blank/{code.value.lower()}",
        title=code.title,
        status=code.status,
        detail=detail,
        code=code,
        instance=instance,
        errors=items or None,
    )
    return JSONResponse(
        status_code=code.status,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
        media_type=PROBLEM_JSON_MEDIA_TYPE,
    )


class AppHTTPException(HTTPException):
    """HTTPException con ErrorCode; el status sale del código."""

    def __init__(
        self,
        code: ErrorCode,
        detail: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=code.status, detail=detail, headers=headers)
        self.code = code
        self.errors = errors


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
def validation_error(
    detail: str, errors: list[dict[str, Any]] | None = None
) -> AppHTTPException:
    return AppHTTPException(ErrorCode.VALIDATION_ERROR, detail, errors=errors)


def bad_request(detail: str) -> AppHTTPException:
    return AppHTTPException(ErrorCode.BAD_REQUEST, detail)


def unauthorized(detail: str = "Token de acceso requerido") -> AppHTTPException:
    return AppHTTPException(
        ErrorCode.UNAUTHORIZED, detail, headers={"WWW-Authenticate": "Bearer"}
    )


def forbidden(detail: str = "Acceso denegado") -> AppHTTPException:
    return AppHTTPException(ErrorCode.FORBIDDEN, detail)


def not_found(detail: str) -> AppHTTPException:
    return AppHTTPException(ErrorCode.NOT_FOUND, detail)


def conflict(detail: str) -> AppHTTPException:
    return AppHTTPException(ErrorCode.CONFLICT, detail)


def internal_error(detail: str = "Error interno del servidor") -> AppHTTPException:
    return AppHTTPException(ErrorCode.INTERNAL_ERROR, detail)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------
def request_id_of(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    return problem_response(
        exc.code,
        str(exc.detail),
        instance=request.url.path,
        request_id=request_id_of(request),
        errors=exc.errors,
        headers=exc.headers,
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Validación de body/query/path -> 400 con un item por campo."""
    errors = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
            "msg": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return problem_response(
        ErrorCode.VALIDATION_ERROR,
        "Datos de entrada inválidos",
        instance=request.url.path,
        request_id=request_id_of(request),
        errors=errors,
    )
