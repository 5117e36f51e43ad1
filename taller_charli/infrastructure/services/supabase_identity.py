"""
============================================================
TARJETA CRC — infrastructure/services/supabase_identity.py
============================================================
Class: SupabaseIdentityProvider

Responsibilities:
  - Implementar IdentityProvider sobre la API REST de Supabase Auth (GoTrue):
      sign-in     POST /auth/v1/token?grant_type=password
      sign-up     POST /auth/v1/signup
      verify      GET  /auth/v1/user
      refresh     POST /auth/v1/token?grant_type=refresh_token
      sign-out    POST /auth/v1/logout
      delete      DELETE /auth/v1/admin/users/{id}   (service role)
  - Distinguir rechazo (4xx: credenciales/token inválidos -> None) de falla
    técnica (red, timeout, 429, 5xx, JSON inválido, request no armable -> IdentityProviderError).
  - Nunca loguear tokens ni contraseñas.

Collaborators:
  - httpx.AsyncClient (inyectado; su ciclo de vida lo maneja el lifespan)
  - domain.services: RemoteIdentity, IdentitySession, SignUpOutcome
  - crosscutting.exceptions.IdentityProviderError

Notes:
  - Sin reintentos: cada falla se reporta inmediatamente.
  - El timeout es el del cliente httpx (IDENTITY_TIMEOUT_SECONDS).
============================================================
"""

from __future__ import annotations

from typing import Any

import httpx

from ...crosscutting.exceptions import IdentityProviderError
from ...crosscutting.logger import logger
from ...domain.services import IdentitySession, RemoteIdentity, SignUpOutcome

_TOKEN_PATH = "/auth/v1/token"
_SIGNUP_PATH = "/auth/v1/signup"
_USER_PATH = "/auth/v1/user"
_LOGOUT_PATH = "/auth/v1/logout"
_ADMIN_USERS_PATH = "/auth/v1/admin/users"

# 429 es throttling, no rechazo de credenciales.
_RATE_LIMITED = 429


def build_http_client(*, base_url: str, timeout_seconds: float) -> httpx.AsyncClient:
    """Cliente HTTP compartido por proceso (abrir/cerrar en el lifespan)."""
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        timeout=httpx.Timeout(timeout_seconds),
        headers={"Content-Type": "application/json"},
    )


def _identity_from(payload: dict[str, Any] | None) -> RemoteIdentity | None:
    if not payload or not payload.get("id"):
        return None
    return RemoteIdentity(
        id=str(payload["id"]),
        email=str(payload.get("email") or ""),
        metadata=dict(payload.get("user_metadata") or {}),
    )


def _session_from(payload: dict[str, Any]) -> IdentitySession | None:
    access_token = payload.get("access_token")
    refresh_token = payload.get("refresh_token")
    if not access_token or not refresh_token:
        return None
    return IdentitySession(
        access_token=str(access_token),
        refresh_token=str(refresh_token),
        identity=_identity_from(payload.get("user")),
        expires_in=payload.get("expires_in"),
    )


class SupabaseIdentityProvider:
    """Proveedor de identidad respaldado por Supabase Auth."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        anon_key: str,
        service_role_key: str = "",
    ) -> None:
        if not anon_key:
            raise ValueError("SUPABASE_ANON_KEY is required")
        self._client = client
        self._anon_key = anon_key
        self._service_role_key = service_role_key

    # --------------------------------------------------------
    # Helpers HTTP
    # --------------------------------------------------------
    def _headers(self, bearer: str | None = None) -> dict[str, str]:
        return {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {bearer or self._anon_key}",
        }

    async def _send(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        headers: dict[str, str],
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method, path, params=params, json=json, headers=headers
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            # ValueError: headers no codificables (p. ej. token con bytes no ASCII).
            logger.error(
                "Proveedor de identidad inaccesible",
                extra={"operation": operation, "error": type(exc).__name__},
            )
            raise IdentityProviderError(
                f"{operation}: error de transporte ({type(exc).__name__})",
                original_error=exc,
            ) from exc

        status = response.status_code
        if status >= 500 or status == _RATE_LIMITED:
            logger.error(
                "Proveedor de identidad respondió con error",
                extra={"operation": operation, "status_code": status},
            )
            raise IdentityProviderError(f"{operation}: HTTP {status}")
        return response

    @staticmethod
    def _json(response: httpx.Response, *, operation: str) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise IdentityProviderError(
                f"{operation}: respuesta no es JSON", original_error=exc
            ) from exc
        if not isinstance(payload, dict):
            raise IdentityProviderError(f"{operation}: respuesta inesperada")
        return payload

    @staticmethod
    def _log_rejection(operation: str, response: httpx.Response) -> None:
        logger.info(
            "Proveedor de identidad rechazó la operación",
            extra={"operation": operation, "status_code": response.status_code},
        )

    # --------------------------------------------------------
    # IdentityProvider
    # --------------------------------------------------------
    async def sign_in(self, email: str, password: str) -> IdentitySession | None:
        response = await self._send(
            "POST",
            _TOKEN_PATH,
            operation="sign_in",
            headers=self._headers(),
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if response.is_client_error:
            self._log_rejection("sign_in", response)
            return None
        return _session_from(self._json(response, operation="sign_in"))

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> SignUpOutcome | None:
        body: dict[str, Any] = {"email": email, "password": password}
        if metadata:
            body["data"] = metadata
        response = await self._send(
            "POST",
            _SIGNUP_PATH,
            operation="sign_up",
            headers=self._headers(),
            json=body,
        )
        if response.is_client_error:
            self._log_rejection("sign_up", response)
            return None

        payload = self._json(response, operation="sign_up")
        # Con autoconfirm la respuesta es una sesión; sin él, el usuario "pelado".
        session = _session_from(payload)
        identity = (
            session.identity if session and session.identity else _identity_from(payload)
        )
        if identity is None:
            identity = _identity_from(payload.get("user"))
        if identity is None:
            raise IdentityProviderError("sign_up: respuesta sin usuario")
        return SignUpOutcome(identity=identity, session=session)

    async def verify(self, access_token: str) -> RemoteIdentity | None:
        response = await self._send(
            "GET",
            _USER_PATH,
            operation="verify",
            headers=self._headers(access_token),
        )
        if response.is_client_error:
            return None
        return _identity_from(self._json(response, operation="verify"))

    async def refresh(self, refresh_token: str) -> IdentitySession | None:
        response = await self._send(
            "POST",
            _TOKEN_PATH,
            operation="refresh",
            headers=self._headers(),
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        if response.is_client_error:
            self._log_rejection("refresh", response)
            return None
        return _session_from(self._json(response, operation="refresh"))

    async def sign_out(self, access_token: str) -> None:
        response = await self._send(
            "POST",
            _LOGOUT_PATH,
            operation="sign_out",
            headers=self._headers(access_token),
        )
        if not response.is_success:
            raise IdentityProviderError(f"sign_out: HTTP {response.status_code}")

    async def delete_identity(self, identity_id: str) -> bool:
        if not self._service_role_key:
            return False
        response = await self._send(
            "DELETE",
            f"{_ADMIN_USERS_PATH}/{identity_id}",
            operation="delete_identity",
            headers={
                "apikey": self._service_role_key,
                "Authorization": f"Bearer {self._service_role_key}",
            },
        )
        if not response.is_success:
            raise IdentityProviderError(
                f"delete_identity: HTTP {response.status_code}"
            )
        return True
