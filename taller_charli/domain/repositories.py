"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define the persistence contract for local user records (port).
- Keep the application layer independent from PostgreSQL / in-memory stores.
- Enable dependency inversion and straightforward unit testing.

Collaborators
- domain.entities: User, NewUser, UserChanges, UserFilter
- infrastructure.repositories: postgres / in_memory implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Every method is async: implementations await the store.
- "Not found" is returned as None, never raised.
- Uniqueness violations raise UniqueViolationError(field); any other
  store failure raises DatabaseError.
"""

from typing import List, Optional, Protocol, Tuple

from .entities import NewUser, User, UserChanges, UserFilter


class UserRepository(Protocol):
    """
    R: Interface for local user persistence (soft-delete aware).

    Implementations must provide:
      - Create with store-assigned id and timestamps
      - Lookup of ACTIVE users by email / id
      - Lookup by id regardless of deletion state (recover flow)
      - Filtered, paginated listings of active and deleted users
      - Partial update, soft delete and recovery
    """

    async def create_user(self, new_user: NewUser) -> User:
        """R: Insert a user. Raises UniqueViolationError on email/dni clash."""
        ...

    async def get_active_by_email(self, email: str) -> Optional[User]:
        """R: Active user with this exact email, or None."""
        ...

    async def get_active_by_id(self, user_id: int) -> Optional[User]:
        """R: Active user with this id, or None (missing or deleted)."""
        ...

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """R: User with this id whatever its deletion state, or None."""
        ...

    async def taken_field(self, *, email: str, dni: str) -> Optional[str]:
        """R: "email" or "DNI" if any row (deleted ones too) already holds it."""
        ...

    async def list_users(
        self,
        user_filter: UserFilter,
        *,
        deleted: bool,
        limit: int,
        offset: int,
    ) -> Tuple[List[User], int]:
        """
        R: One page of users plus the total matching count.

        Ordering:
          - deleted=False: created_at DESC, id DESC
          - deleted=True:  deleted_at DESC, id DESC
        """
        ...

    async def update_user(self, user_id: int, changes: UserChanges) -> Optional[User]:
        """R: Apply present fields to an active user; None if not active."""
        ...

    async def soft_delete(self, user_id: int) -> Optional[User]:
        """R: Set deleted_at on an active user; None if not active."""
        ...

    async def restore(self, user_id: int) -> Optional[User]:
        """R: Clear deleted_at on a deleted user; None if not deleted."""
        ...

    async def ping(self) -> bool:
        """R: True if the store answers (health probes)."""
        ...
