# taller_charli/crosscutting/middleware.py
"""
===============================================================================
TARJETA CRC — crosscutting/middleware.py
===============================================================================

Componentes:
  - RequestContextMiddleware: id de correlación + log de cierre por request.
  - BodyLimitMiddleware: corta bodies más grandes que MAX_BODY_BYTES (413).

Responsabilidades:
  - Aceptar X-Request-Id entrante (si es razonable) o generar uno nuevo;
    dejarlo en request.state y devolverlo en la respuesta.
  - Abrir/cerrar el contexto de logging del request.
  - Rechazar payloads grandes tanto por Content-Length como en streaming.

Colaboradores:
  - taller_charli/context.py
  - crosscutting/error_responses.py (problem_response)
  - crosscutting/logger.py

Notas:
  - Ambos son ASGI puros: el contexto se abre en la misma task que atiende
    el request.
===============================================================================
"""

from __future__ import annotations

import time
import uuid

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..context import clear_context, set_request_context
from .error_responses import AppHTTPException, ErrorCode, problem_response
from .logger import logger

REQUEST_ID_HEADER = "X-Request-Id"
_MAX_REQUEST_ID_CHARS = 128
_QUIET_PATHS = frozenset({"/healthz", "/readyz"})


def _header(scope: Scope, name: bytes) -> str:
    for key, value in scope.get("headers", []):
        if key.lower() == name:
            return value.decode("latin-1").strip()
    return ""


def _state(scope: Scope) -> dict:
    return scope.setdefault("state", {})


class RequestContextMiddleware:
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = _header(scope, b"x-request-id")
        request_id = (
            incoming
            if incoming and len(incoming) <= _MAX_REQUEST_ID_CHARS
            else str(uuid.uuid4())
        )
        _state(scope)["request_id"] = request_id
        path = scope.get("path", "")
        set_request_context(request_id=request_id, method=scope["method"], path=path)

        status_code = 500
        started = time.perf_counter()

        async def send_with_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        try:
            await self.app(scope, receive, send_with_id)
        finally:
            if path not in _QUIET_PATHS:
                logger.info(
                    "request completado",
                    extra={
                        "status_code": status_code,
                        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
                    },
                )
            clear_context()


def _too_large_detail(max_bytes: int) -> str:
    return f"El body supera el máximo permitido de {max_bytes} bytes"


class _BodyTooLarge(AppHTTPException):
    # FastAPI re-lanza HTTPException al leer el body; cualquier otra la vuelve 400.
    def __init__(self, max_bytes: int):
        super().__init__(ErrorCode.PAYLOAD_TOO_LARGE, _too_large_detail(max_bytes))


class BodyLimitMiddleware:
    def __init__(self, app: ASGIApp, max_bytes: int | None = None):
        self.app = app
        if max_bytes is None:
            from .config import get_settings

            max_bytes = get_settings().max_body_bytes
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = _header(scope, b"content-length")
        if declared.isdigit() and int(declared) > self.max_bytes:
            logger.warning(
                "Body rechazado por Content-Length",
                extra={"content_length": int(declared), "max_bytes": self.max_bytes},
            )
            await self._reject(scope, receive, send)
            return

        received = 0
        response_started = False

        async def counting_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body") or b"")
                if received > self.max_bytes:
                    raise _BodyTooLarge(self.max_bytes)
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, counting_receive, tracking_send)
        except _BodyTooLarge:
            # Con la respuesta ya iniciada no se puede emitir un 413.
            if response_started:
                raise
            logger.warning(
                "Body rechazado en streaming",
                extra={"received_bytes": received, "max_bytes": self.max_bytes},
            )
            await self._reject(scope, receive, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = problem_response(
            ErrorCode.PAYLOAD_TOO_LARGE,
            _too_large_detail(self.max_bytes),
            instance=scope.get("path"),
            request_id=_state(scope).get("request_id"),
        )
        await response(scope, receive, send)
