# taller_charli/crosscutting/security.py
"""
===============================================================================
MÓDULO: Headers de seguridad de las respuestas
===============================================================================

Responsabilidades:
  - Agregar nosniff, DENY, Referrer-Policy y CSP a toda respuesta HTTP.
  - En producción: CSP sin inline y HSTS cuando el request llegó por HTTPS
    (directo o detrás de un proxy con X-Forwarded-Proto).

Notas:
  - Fuera de producción la CSP deja pasar Swagger UI (/api/docs).
===============================================================================
"""

from __future__ import annotations

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

_SWAGGER_CDN = "https://cdn.jsdelivr.net"
_HSTS = "max-age=31536000; includeSubDomains"


def build_csp(strict: bool) -> str:
    if strict:
        script = style = "'self'"
        img = "'self' data:"
    else:
        script = style = f"'self' 'unsafe-inline' {_SWAGGER_CDN}"
        img = "'self' data: https://fastapi.tiangolo.com"
    directives = {
        "default-src": "'self'",
        "script-src": script,
        "style-src": style,
        "img-src": img,
        "connect-src": "'self'",
        "frame-ancestors": "'none'",
    }
    return "; ".join(f"{name} {value}" for name, value in directives.items())


def _is_https(scope: Scope) -> bool:
    for key, value in scope.get("headers", []):
        if key == b"x-forwarded-proto":
            return value.decode("latin-1").strip().lower() == "https"
    return scope.get("scheme") == "https"


class SecurityHeadersMiddleware:
    def __init__(self, app: ASGIApp, is_production: bool | None = None):
        self.app = app
        if is_production is None:
            from .config import get_settings

            is_production = get_settings().is_production()
        self.is_production = is_production
        self.fixed_headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "strict-origin-when-cross-origin",
            "Content-Security-Policy": build_csp(strict=is_production),
        }

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        add_hsts = self.is_production and _is_https(scope)

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in self.fixed_headers.items():
                    headers[name] = value
                if add_hsts:
                    headers["Strict-Transport-Security"] = _HSTS
            await send(message)

        await self.app(scope, receive, send_with_headers)
