"""
============================================================
TARJETA CRC
============================================================
Package: taller_charli.infrastructure.repositories

Responsibilities:
- Exponer las implementaciones concretas del UserRepository
  (Postgres e InMemory) en un único punto de importación.
============================================================
"""

from .in_memory import InMemoryUserRepository
from .postgres import PostgresUserRepository

__all__ = ["InMemoryUserRepository", "PostgresUserRepository"]
