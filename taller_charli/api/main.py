"""
Name: Taller Charli API (FastAPI application factory)

Responsibilities:
  - Build the FastAPI app: metadata, docs toggle, OpenAPI BearerAuth scheme
  - Wire middlewares, the auth/users router and the exception handlers
  - Lifespan: open the Postgres pool when used; close it and the GoTrue client
  - /healthz and /readyz probes backed by a repository ping

Collaborators:
  - container: repository singleton + identity HTTP client shutdown
  - crosscutting.middleware / crosscutting.security
  - interfaces.api.http.router.build_router

Notes:
  - Request path through the middlewares:
    CORS -> RequestContext -> SecurityHeaders -> BodyLimit -> route
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from ..container import close_http_client, get_user_repository, uses_postgres
from ..crosscutting.config import get_settings
from ..crosscutting.logger import logger
from ..crosscutting.middleware import BodyLimitMiddleware, RequestContextMiddleware
from ..crosscutting.security import SecurityHeadersMiddleware
from ..infrastructure.db import close_pool, init_pool
from ..interfaces.api.http.router import build_router
from .exception_handlers import register_exception_handlers

API_TITLE = "Taller Charli API"
API_VERSION = "1.0.0"

# Rutas que no requieren token (el resto usa BearerAuth en OpenAPI)
_PUBLIC_PATHS = {
    "/auth/login",
    "/auth/register",
    "/auth/refresh",
    "/healthz",
    "/readyz",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Opens the pool when Postgres is in use."""
    settings = get_settings()
    pool_opened = False

    if uses_postgres():
        await init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            statement_timeout_ms=settings.db_statement_timeout_ms,
        )
        pool_opened = True

    try:
        logger.info(
            "Taller Charli API iniciando",
            extra={
                "app_env": settings.app_env,
                "user_repository": "postgres" if pool_opened else "memory",
                "fake_identity": settings.fake_identity,
                "db_pool_min": settings.db_pool_min_size,
                "db_pool_max": settings.db_pool_max_size,
            },
        )
        yield
    finally:
        await close_http_client()
        if pool_opened:
            await close_pool()
        logger.info("Taller Charli API detenida")


def _install_openapi(app: FastAPI) -> None:
    """Agrega el esquema BearerAuth y lo aplica a las rutas protegidas."""

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Access token emitido en /auth/login: Authorization: Bearer <token>",
            }
        }
        for path, methods in schema.get("paths", {}).items():
            for operation in methods.values():
                if not isinstance(operation, dict):
                    continue
                operation["security"] = (
                    [] if path in _PUBLIC_PATHS else [{"BearerAuth": []}]
                )
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi


def create_app() -> FastAPI:
    """Construye la app FastAPI con middlewares, routers y handlers."""
    settings = get_settings()

    app = FastAPI(
        title=API_TITLE,
        version=API_VERSION,
        description="Gestión de usuarios y autenticación de Taller Charli",
        lifespan=lifespan,
        docs_url="/api/docs" if settings.docs_enabled else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if settings.docs_enabled else None,
        openapi_tags=[
            {"name": "auth", "description": "Login, registro, refresh y logout"},
            {"name": "users", "description": "Gestión de usuarios (soft delete)"},
        ],
    )
    _install_openapi(app)

    # Middleware order (bottom = first to execute)
    app.add_middleware(BodyLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(
        SecurityHeadersMiddleware, is_production=settings.is_production()
    )
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins_list(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-Id"],
    )

    app.include_router(build_router())
    register_exception_handlers(app)

    @app.get("/healthz", tags=["health"])
    async def healthz(request: Request):
        """Liveness con ping al store de usuarios."""
        alive = await _store_alive("healthz")
        return {
            "ok": alive,
            "db": "connected" if alive else "disconnected",
            "request_id": getattr(request.state, "request_id", None),
        }

    @app.get("/readyz", tags=["health"])
    async def readyz(request: Request):
        return {
            "ok": await _store_alive("readyz"),
            "request_id": getattr(request.state, "request_id", None),
        }

    return app


async def _store_alive(probe: str) -> bool:
    # Un store caído degrada la sonda, no la rompe.
    try:
        return bool(await get_user_repository().ping())
    except Exception as exc:
        logger.warning(
            "Store de usuarios no disponible", extra={"probe": probe, "error": str(exc)}
        )
        return False
