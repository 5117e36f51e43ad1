# taller_charli/crosscutting/pagination.py
"""
===============================================================================
MÓDULO: Utilidades de paginación (page/limit 1-based)
===============================================================================

Objetivo
--------
Paginación por página numerada, consistente para listados activos y
eliminados:
- offset = (page - 1) * limit
- total_pages = ceil(total / limit)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  PageParams + total_pages()

Responsabilidades:
  - Normalizar page/limit con defaults
  - Calcular offset y total de páginas

Colaboradores:
  - infrastructure/repositories (offset/limit en queries)
  - application/usecases/users/list_users.py
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class PageParams:
    """Página 1-based + tamaño. Ambos deben ser enteros positivos."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.limit < 1:
            raise ValueError("limit must be >= 1")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def of(
        cls,
        page: int | None = None,
        limit: int | None = None,
        *,
        default_limit: int = DEFAULT_LIMIT,
    ) -> "PageParams":
        return cls(
            page=DEFAULT_PAGE if page is None else page,
            limit=default_limit if limit is None else limit,
        )


def total_pages(total: int, limit: int) -> int:
    """ceil(total / limit) sin floats; 0 filas -> 0 páginas."""
    if limit < 1:
        raise ValueError("limit must be >= 1")
    return -(-max(0, total) // limit)
