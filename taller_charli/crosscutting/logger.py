# taller_charli/crosscutting/logger.py
"""
===============================================================================
TARJETA CRC — crosscutting/logger.py
===============================================================================

Componente:
  Logger del servicio (una línea JSON por evento en stdout)

Responsabilidades:
  - Serializar cada LogRecord con nivel, mensaje, origen y `extra`.
  - Sumar el contexto del request (request_id, method, path, user_id).
  - Ocultar credenciales (contraseñas, tokens, api keys) en cualquier nivel
    de anidamiento del `extra`.

Colaboradores:
  - taller_charli/context.py (get_context_dict)
  - LOG_LEVEL / LOG_JSON (se leen del entorno: el logger existe antes que
    Settings)
===============================================================================
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

SERVICE_NAME = "taller-charli"

# Atributos estándar de LogRecord: todo lo demás vino por `extra=`.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

# Claves cuyo valor nunca se escribe (comparación en minúsculas).
_REDACTED_KEYS = frozenset(
    {
        "password",
        "token",
        "access_token",
        "refresh_token",
        "refreshtoken",
        "authorization",
        "apikey",
        "api_key",
        "supabase_anon_key",
        "supabase_service_role_key",
        "service_role_key",
    }
)
_REDACTED = "[REDACTED]"
_MAX_VALUE_CHARS = 2_000
_MAX_DEPTH = 4


def _scrub(value: Any, key: str | None = None, depth: int = 0) -> Any:
    """Copia apta para JSON con credenciales ocultas y strings acotados."""
    if key is not None and key.lower() in _REDACTED_KEYS:
        return _REDACTED
    if depth >= _MAX_DEPTH:
        return "[...]"
    if isinstance(value, dict):
        return {str(k): _scrub(v, str(k), depth + 1) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_scrub(v, key, depth + 1) for v in value]
    if isinstance(value, str) and len(value) > _MAX_VALUE_CHARS:
        return f"{value[:_MAX_VALUE_CHARS]}...[{len(value)} chars]"
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        k: _scrub(v, k)
        for k, v in record.__dict__.items()
        if k not in _RECORD_ATTRS and not k.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """LogRecord -> objeto JSON en una sola línea."""

    def format(self, record: logging.LogRecord) -> str:
        from ..context import get_context_dict

        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "message": record.getMessage(),
            "origin": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        entry.update(get_context_dict())
        entry.update(_extra_fields(record))

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc),
                "stacktrace": "".join(traceback.format_exception(exc_type, exc, tb)),
            }

        return json.dumps(entry, ensure_ascii=False, default=str)


class PlainFormatter(logging.Formatter):
    """Formato legible para desarrollo local (LOG_JSON=false)."""

    def format(self, record: logging.LogRecord) -> str:
        from ..context import get_context_dict

        line = f"{record.levelname:<7} {record.getMessage()}"
        fields = {**get_context_dict(), **_extra_fields(record)}
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def setup_logger(name: str = SERVICE_NAME) -> logging.Logger:
    """Logger del proceso; idempotente (no duplica handlers)."""
    log = logging.getLogger(name)
    level_name = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    level = getattr(logging, level_name, None)
    log.setLevel(level if isinstance(level, int) else logging.INFO)

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            JSONFormatter() if _env_flag("LOG_JSON", True) else PlainFormatter()
        )
        log.addHandler(handler)
    return log


logger = setup_logger()
