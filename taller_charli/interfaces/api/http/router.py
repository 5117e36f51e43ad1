"""
===============================================================================
TARJETA CRC — router.py (Router raíz)
===============================================================================

Responsabilidades:
  - Reunir los routers de auth y users en un único APIRouter.
  - Documentar en OpenAPI las respuestas problem+json comunes a todas las
    rutas.

Notas:
  - Sin prefijo de versión: los paths son /auth/* y /users/*.
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter

from ....crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from .routers import auth_router, users_router

_FEATURE_ROUTERS = (auth_router, users_router)


def build_router() -> APIRouter:
    root = APIRouter(responses=OPENAPI_ERROR_RESPONSES)
    for feature in _FEATURE_ROUTERS:
        root.include_router(feature)
    return root


__all__ = ["build_router"]
