"""
===============================================================================
TARJETA CRC — taller_charli/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer dependencias (repositorio, proveedor de identidad, casos de uso).
  - Exponer factories para FastAPI (Depends) y para scripts.
  - Mantener singletons con caching (lru_cache) para recursos compartidos:
      * un único UserRepository por proceso
      * un único httpx.AsyncClient hacia el proveedor de identidad
  - Centralizar decisiones runtime basadas en Settings.

Colaboradores:
  - crosscutting.config.get_settings
  - domain.repositories.UserRepository / domain.services.IdentityProvider
  - infrastructure.* (implementaciones)
  - application.usecases.* (casos de uso)

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Este archivo NO depende de FastAPI (solo expone factories).
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

import httpx

from .application.usecases.auth import (
    LoginUseCase,
    LogoutUseCase,
    RefreshTokenUseCase,
    RegisterUseCase,
    ResolveIdentityUseCase,
)
from .application.usecases.users import (
    CreateUserUseCase,
    DeleteUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    RecoverUserUseCase,
    UpdateUserUseCase,
)
from .crosscutting.config import get_settings
from .crosscutting.logger import logger
from .domain.repositories import UserRepository
from .domain.services import IdentityProvider
from .infrastructure.repositories import InMemoryUserRepository, PostgresUserRepository
from .infrastructure.services import (
    FakeIdentityProvider,
    SupabaseIdentityProvider,
    build_http_client,
)

# =============================================================================
# Helpers internos
# =============================================================================


def _is_test_env() -> bool:
    """
    Determina si estamos en entorno de test.

    Regla:
      - app_env ∈ {"test", "testing", "ci"} => se favorecen in-memory adapters.
    """
    env = get_settings().app_env.strip().lower()
    return env in {"test", "testing", "ci"}


def uses_postgres() -> bool:
    """True si el repositorio efectivo es Postgres (el lifespan abre el pool)."""
    return not _is_test_env() and get_settings().user_repository == "postgres"


# =============================================================================
# Recursos compartidos (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    """Repositorio de usuarios (in-memory en test o si se pide; Postgres en runtime)."""
    if uses_postgres():
        return PostgresUserRepository()
    logger.warning("Usando repositorio de usuarios en memoria")
    return InMemoryUserRepository()


@lru_cache(maxsize=1)
def get_http_client() -> httpx.AsyncClient:
    settings = get_settings()
    return build_http_client(
        base_url=settings.supabase_url,
        timeout_seconds=settings.identity_timeout_seconds,
    )


async def close_http_client() -> None:
    """Cierra el cliente HTTP (shutdown) y olvida el proveedor que lo usaba."""
    if get_http_client.cache_info().currsize:
        await get_http_client().aclose()
        get_http_client.cache_clear()
        get_identity_provider.cache_clear()


@lru_cache(maxsize=1)
def get_identity_provider() -> IdentityProvider:
    """Proveedor de identidad (fake en test / FAKE_IDENTITY; Supabase en runtime)."""
    settings = get_settings()
    if settings.fake_identity or _is_test_env():
        logger.warning("Usando proveedor de identidad FAKE")
        return FakeIdentityProvider()
    return SupabaseIdentityProvider(
        client=get_http_client(),
        anon_key=settings.supabase_anon_key,
        service_role_key=settings.supabase_service_role_key,
    )


# =============================================================================
# Casos de uso: usuarios
# =============================================================================


def get_create_user_use_case() -> CreateUserUseCase:
    return CreateUserUseCase(get_user_repository())


def get_get_user_use_case() -> GetUserUseCase:
    return GetUserUseCase(get_user_repository())


def get_list_users_use_case() -> ListUsersUseCase:
    settings = get_settings()
    return ListUsersUseCase(
        get_user_repository(),
        default_limit=settings.default_page_limit,
        max_limit=settings.max_page_limit,
    )


def get_update_user_use_case() -> UpdateUserUseCase:
    return UpdateUserUseCase(get_user_repository())


def get_delete_user_use_case() -> DeleteUserUseCase:
    return DeleteUserUseCase(get_user_repository())


def get_recover_user_use_case() -> RecoverUserUseCase:
    return RecoverUserUseCase(get_user_repository())


# =============================================================================
# Casos de uso: auth
# =============================================================================


def get_resolve_identity_use_case() -> ResolveIdentityUseCase:
    return ResolveIdentityUseCase(get_identity_provider(), get_user_repository())


def get_login_use_case() -> LoginUseCase:
    return LoginUseCase(get_identity_provider(), get_user_repository())


def get_register_use_case() -> RegisterUseCase:
    return RegisterUseCase(
        get_identity_provider(), get_create_user_use_case(), get_user_repository()
    )


def get_refresh_token_use_case() -> RefreshTokenUseCase:
    return RefreshTokenUseCase(get_identity_provider(), get_user_repository())


def get_logout_use_case() -> LogoutUseCase:
    return LogoutUseCase(get_identity_provider())
