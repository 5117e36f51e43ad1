"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Componente:
  Pool async de conexiones a Postgres, uno por proceso.

Responsabilidades:
  - Abrirlo en el arranque (lifespan) y cerrarlo al apagar.
  - Aplicar statement_timeout a cada conexión nueva.
  - Fallar rápido ante doble apertura o uso sin abrir.

Colaboradores:
  - psycopg_pool.AsyncConnectionPool
  - api/main.py (lifespan)
  - infrastructure/repositories/postgres/user.py
===============================================================================
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

from psycopg import AsyncConnection
from psycopg_pool import AsyncConnectionPool

from ...crosscutting.exceptions import (
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
)
from ...crosscutting.logger import logger

_pool: Optional[AsyncConnectionPool] = None


def _statement_timeout_hook(
    timeout_ms: int,
) -> Callable[[AsyncConnection], Awaitable[None]]:
    async def configure(conn: AsyncConnection) -> None:
        if timeout_ms <= 0:
            return
        await conn.execute(f"SET statement_timeout = {int(timeout_ms)}")
        await conn.commit()

    return configure


async def init_pool(
    database_url: str,
    min_size: int,
    max_size: int,
    *,
    statement_timeout_ms: int = 0,
) -> AsyncConnectionPool:
    global _pool

    # Se registra antes del await para que una segunda llamada concurrente falle.
    if _pool is not None:
        raise PoolAlreadyInitializedError("El pool de Postgres ya está abierto")
    pool = _pool = AsyncConnectionPool(
        conninfo=database_url,
        min_size=min_size,
        max_size=max_size,
        configure=_statement_timeout_hook(statement_timeout_ms),
        open=False,
    )

    try:
        await pool.open()
    except Exception:
        _pool = None
        raise
    logger.info(
        "Pool de Postgres abierto",
        extra={
            "min_size": min_size,
            "max_size": max_size,
            "statement_timeout_ms": statement_timeout_ms,
        },
    )
    return pool


def get_pool() -> AsyncConnectionPool:
    if _pool is None:
        raise PoolNotInitializedError("El pool de Postgres no fue abierto (init_pool)")
    return _pool


async def close_pool() -> None:
    """Cierra el pool si está abierto; llamarla dos veces no falla."""
    global _pool

    pool, _pool = _pool, None
    if pool is None:
        return
    await pool.close()
    logger.info("Pool de Postgres cerrado")
