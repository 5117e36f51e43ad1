"""
Name: Database Pool Lifecycle Tests

Responsibilities:
  - Validate init/get/close semantics of the process-wide pool
  - Fail fast on double init and on use before init
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio

from taller_charli.crosscutting.exceptions import (
    DatabaseError,
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
)
from taller_charli.infrastructure.db import pool as pool_module

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


def _fake_pool():
    fake = MagicMock()
    fake.open = AsyncMock()
    fake.close = AsyncMock()
    return fake


@pytest_asyncio.fixture(autouse=True)
async def _reset_pool():
    await pool_module.close_pool()
    yield
    await pool_module.close_pool()


async def test_get_pool_before_init_fails():
    with pytest.raises(PoolNotInitializedError):
        pool_module.get_pool()


async def test_init_opens_and_exposes_pool():
    fake = _fake_pool()
    with patch.object(pool_module, "AsyncConnectionPool", return_value=fake) as ctor:
        result = await pool_module.init_pool(
            "postgresql://u:p@db/taller", 1, 5, statement_timeout_ms=1000
        )

    assert result is fake
    assert pool_module.get_pool() is fake
    fake.open.assert_awaited_once()
    kwargs = ctor.call_args.kwargs
    assert kwargs["min_size"] == 1
    assert kwargs["max_size"] == 5
    assert kwargs["open"] is False


async def test_double_init_fails():
    with patch.object(pool_module, "AsyncConnectionPool", return_value=_fake_pool()):
        await pool_module.init_pool("postgresql://db/taller", 1, 2)
        with pytest.raises(PoolAlreadyInitializedError):
            await pool_module.init_pool("postgresql://db/taller", 1, 2)


async def test_close_is_idempotent():
    fake = _fake_pool()
    with patch.object(pool_module, "AsyncConnectionPool", return_value=fake):
        await pool_module.init_pool("postgresql://db/taller", 1, 2)

    await pool_module.close_pool()
    await pool_module.close_pool()

    fake.close.assert_awaited_once()
    with pytest.raises(PoolNotInitializedError):
        pool_module.get_pool()


async def test_configure_sets_statement_timeout():
    conn = MagicMock()
    conn.execute = AsyncMock()
    conn.commit = AsyncMock()

    await pool_module._statement_timeout_hook(1500)(conn)

    conn.execute.assert_awaited_once_with("SET statement_timeout = 1500")
    conn.commit.assert_awaited_once()


async def test_configure_without_timeout_is_noop():
    conn = MagicMock()
    conn.execute = AsyncMock()

    await pool_module._statement_timeout_hook(0)(conn)

    conn.execute.assert_not_awaited()


async def test_pool_errors_are_database_errors():
    # Un request sin pool termina en el handler de DatabaseError (500 genérico).
    with pytest.raises(DatabaseError):
        pool_module.get_pool()
