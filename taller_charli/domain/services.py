"""
===============================================================================
TARJETA CRC — domain/services.py
===============================================================================

Módulo:
    Puerto del Proveedor de Identidad externo (Protocol)

Responsabilidades:
    - Definir el contrato de sign-in, sign-up, verificación, refresh y sign-out.
    - Proteger a application de detalles del proveedor (Supabase GoTrue).

Colaboradores:
    - infrastructure/services/supabase_identity.py: implementación HTTP.
    - infrastructure/services/fake_identity.py: implementación en memoria.
    - application/usecases/auth: consumen este puerto.

Reglas:
    - SOLO interfaces y value objects: nada de implementación.
    - Rechazo del proveedor (credenciales/token inválidos) -> None / False.
    - Falla técnica (red, 5xx) -> IdentityProviderError.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class RemoteIdentity:
    """Identidad verificada por el proveedor (al menos un email)."""

    id: str
    email: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class IdentitySession:
    """Par de tokens emitido por el proveedor."""

    access_token: str
    refresh_token: str
    identity: RemoteIdentity | None = None
    expires_in: int | None = None


@dataclass(frozen=True)
class SignUpOutcome:
    """
    Resultado del alta remota.

    `session` puede faltar si el proveedor exige confirmar el email.
    """

    identity: RemoteIdentity
    session: IdentitySession | None = None


class IdentityProvider(Protocol):
    """Contrato del proveedor de identidad."""

    async def sign_in(self, email: str, password: str) -> IdentitySession | None:
        """Sesión si las credenciales son válidas; None si se rechazan."""
        ...

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> SignUpOutcome | None:
        """Identidad creada; None si el proveedor rechaza el alta."""
        ...

    async def verify(self, access_token: str) -> RemoteIdentity | None:
        """Identidad dueña del token; None si es inválido o expiró."""
        ...

    async def refresh(self, refresh_token: str) -> IdentitySession | None:
        """Nueva sesión; None si el refresh token es inválido."""
        ...

    async def sign_out(self, access_token: str) -> None:
        """Revoca la sesión remota del token."""
        ...

    async def delete_identity(self, identity_id: str) -> bool:
        """Elimina una identidad (compensación). False si no es posible."""
        ...
