"""
===============================================================================
TARJETA CRC — taller_charli/context.py (Contexto por request)
===============================================================================

Responsabilidades:
  - Guardar los datos de correlación del request en curso (request_id,
    método, path y usuario local) en un ContextVar (seguro con asyncio).
  - Exponerlos como dict plano para el logger.

Colaboradores:
  - crosscutting.middleware: abre el contexto al recibir el request.
  - identity.access_control: agrega el user_id al resolver la identidad.
  - crosscutting.logger: lee get_context_dict() en cada línea.

Restricciones:
  - El snapshot es inmutable; cada cambio reemplaza el valor del ContextVar.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import asdict, dataclass, replace


@dataclass(frozen=True)
class RequestContext:
    request_id: str = ""
    method: str = ""
    path: str = ""
    user_id: str = ""


_EMPTY = RequestContext()
_current: ContextVar[RequestContext] = ContextVar("request_context", default=_EMPTY)


def set_request_context(
    *, request_id: str = "", method: str = "", path: str = ""
) -> None:
    """Abre el contexto de un request nuevo (descarta el usuario previo)."""
    _current.set(RequestContext(request_id=request_id, method=method, path=path))


def set_user_context(user_id: int | str | None) -> None:
    """Asocia el usuario local autenticado al request en curso."""
    _current.set(
        replace(_current.get(), user_id="" if user_id is None else str(user_id))
    )


def get_context_dict() -> dict[str, str]:
    """Campos con valor del contexto actual (los vacíos se omiten)."""
    return {k: v for k, v in asdict(_current.get()).items() if v}


def clear_context() -> None:
    _current.set(_EMPTY)
