"""
============================================================
TARJETA CRC — infrastructure/services/fake_identity.py
============================================================
Class: FakeIdentityProvider

Responsibilities:
  - Implementar IdentityProvider en memoria para tests, CI y desarrollo
    local sin Supabase (FAKE_IDENTITY=true).
  - Emitir tokens opacos determinísticos por cuenta y revocarlos en logout.
  - Permitir "sembrar" cuentas y tokens desde tests.

Collaborators:
  - domain.services: RemoteIdentity, IdentitySession, SignUpOutcome

Constraints:
  - NO usar en producción (Settings lo rechaza).
  - Contraseñas en texto plano: es un doble de pruebas, no un store real.
============================================================
"""

from __future__ import annotations

import itertools
from threading import Lock
from typing import Any, Dict

from ...domain.services import IdentitySession, RemoteIdentity, SignUpOutcome


class FakeIdentityProvider:
    """Proveedor de identidad falso, thread-safe."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._counter = itertools.count(1)
        self._accounts: Dict[str, tuple[str, RemoteIdentity]] = {}
        self._access: Dict[str, str] = {}  # access_token -> email
        self._refresh: Dict[str, str] = {}  # refresh_token -> email

    # --------------------------------------------------------
    # Helpers de test
    # --------------------------------------------------------
    def add_account(self, email: str, password: str) -> RemoteIdentity:
        with self._lock:
            return self._add_account(email, password)

    def issue_token(self, email: str) -> str:
        """Emite un access token válido para una cuenta (la crea si falta)."""
        with self._lock:
            if email not in self._accounts:
                self._add_account(email, "")
            return self._new_session(email).access_token

    def _add_account(self, email: str, password: str) -> RemoteIdentity:
        identity = RemoteIdentity(id=f"fake-{next(self._counter)}", email=email)
        self._accounts[email] = (password, identity)
        return identity

    def _new_session(self, email: str) -> IdentitySession:
        n = next(self._counter)
        session = IdentitySession(
            access_token=f"fake-access-{n}",
            refresh_token=f"fake-refresh-{n}",
            identity=self._accounts[email][1],
            expires_in=3600,
        )
        self._access[session.access_token] = email
        self._refresh[session.refresh_token] = email
        return session

    # --------------------------------------------------------
    # IdentityProvider
    # --------------------------------------------------------
    async def sign_in(self, email: str, password: str) -> IdentitySession | None:
        with self._lock:
            account = self._accounts.get(email)
            if account is None or account[0] != password:
                return None
            return self._new_session(email)

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> SignUpOutcome | None:
        with self._lock:
            if email in self._accounts:
                return None
            identity = self._add_account(email, password)
            return SignUpOutcome(identity=identity, session=self._new_session(email))

    async def verify(self, access_token: str) -> RemoteIdentity | None:
        with self._lock:
            email = self._access.get(access_token)
            if email is None or email not in self._accounts:
                return None
            return self._accounts[email][1]

    async def refresh(self, refresh_token: str) -> IdentitySession | None:
        with self._lock:
            email = self._refresh.pop(refresh_token, None)
            if email is None or email not in self._accounts:
                return None
            return self._new_session(email)

    async def sign_out(self, access_token: str) -> None:
        with self._lock:
            self._access.pop(access_token, None)

    async def delete_identity(self, identity_id: str) -> bool:
        with self._lock:
            for email, (_, identity) in list(self._accounts.items()):
                if identity.id == identity_id:
                    del self._accounts[email]
                    return True
        return False
