"""
===============================================================================
TARJETA CRC — domain/access.py
===============================================================================

Módulo:
    Reglas puras de autorización (rol + pertenencia)

Responsabilidades:
    - Definir AuthenticatedIdentity (identidad remota + usuario local).
    - Decidir si un rol está permitido para un conjunto de roles.
    - Decidir si un actor puede operar sobre un usuario (ADMIN o sí mismo).

Colaboradores:
    - domain.entities.User / UserRole
    - domain.services.RemoteIdentity
    - identity/access_control.py: aplica estas reglas en la frontera HTTP.

Notas:
    - Este módulo NO depende de FastAPI. Es lógica pura (fácil de testear).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet

from .entities import User, UserRole
from .services import RemoteIdentity


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """
    Identidad autenticada de un request (no se persiste).

    `id`, `email` y `role` se copian del usuario local para acceso rápido.
    """

    remote: RemoteIdentity
    user: User

    @property
    def id(self) -> int:
        return self.user.id

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def role(self) -> UserRole:
        return self.user.role

    @property
    def is_admin(self) -> bool:
        return self.user.role == UserRole.ADMIN


def is_role_permitted(role: UserRole, permitted: AbstractSet[UserRole]) -> bool:
    """True si role ∈ permitted, o si permitted está vacío (cualquier rol)."""
    if not permitted:
        return True
    return role in permitted


def can_act_on_user(actor: AuthenticatedIdentity, target_user_id: int) -> bool:
    """ADMIN opera sobre cualquiera; el resto solo sobre su propio id."""
    return actor.is_admin or actor.id == target_user_id
