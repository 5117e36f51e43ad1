"""
Arranque local: `python -m taller_charli`.

Levanta uvicorn con la app factory sobre el puerto configurado (PORT).
"""

import uvicorn

from .crosscutting.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "taller_charli.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
