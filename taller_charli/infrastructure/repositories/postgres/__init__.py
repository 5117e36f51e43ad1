"""PostgreSQL repository implementations (psycopg 3, async pool)."""

from .user import PostgresUserRepository

__all__ = ["PostgresUserRepository"]
