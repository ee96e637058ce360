# staffdesk/crosscutting/pagination.py
"""
===============================================================================
MÓDULO: Utilidades de paginación (offset por número de página)
===============================================================================

Objetivo
--------
Paginación simple y consistente para tablas del dashboard:
- local: la página se calcula del lado del cliente sobre la lista completa
- remota: el backend devuelve {data, pagination} y solo lo modelamos

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  paginate + Page[T] + RemotePage

Responsabilidades:
  - Acotar la página pedida a [1, total_pages]
  - Armar metadata has_next/has_prev y rango "Mostrando X a Y de Z"
  - Tolerar claves extra en la paginación remota
===============================================================================
"""

from __future__ import annotations

import math
from typing import Any, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PageInfo(BaseModel):
    page: int = Field(description="Página actual (1-based, ya acotada)")
    page_size: int = Field(description="Items por página")
    total: int = Field(description="Total de items filtrados")
    total_pages: int = Field(description="Total de páginas (mínimo 1)")
    has_next: bool = Field(description="Hay más items después de esta página")
    has_prev: bool = Field(description="Hay items antes de esta página")
    start_index: int = Field(description="Índice (1-based) del primer item, 0 si vacío")
    end_index: int = Field(description="Índice (1-based) del último item, 0 si vacío")


class Page(BaseModel, Generic[T]):
    items: List[T] = Field(description="Items de la página actual")
    page_info: PageInfo = Field(description="Metadatos de paginación")


def paginate(items: Sequence[T], page: int, page_size: int) -> Page[T]:
    """
    Corta `items` en la página pedida.

    - total_pages nunca es 0 (una lista vacía tiene 1 página vacía)
    - page fuera de rango se acota, no falla
    """
    page_size = max(1, int(page_size))
    total = len(items)
    total_pages = max(1, math.ceil(total / page_size))
    page = min(max(1, int(page)), total_pages)

    offset = (page - 1) * page_size
    page_items = list(items[offset : offset + page_size])

    return Page(
        items=page_items,
        page_info=PageInfo(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
            start_index=offset + 1 if page_items else 0,
            end_index=offset + len(page_items),
        ),
    )


class RemotePagination(BaseModel):
    """Bloque `pagination` que devuelve el backend (camelCase, claves extra OK)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    current_page: int = Field(1, alias="currentPage")
    total_pages: int = Field(1, alias="totalPages")
    total_items: Optional[int] = Field(None, alias="totalItems")
    items_per_page: Optional[int] = Field(None, alias="itemsPerPage")
    has_next_page: Optional[bool] = Field(None, alias="hasNextPage")
    has_prev_page: Optional[bool] = Field(None, alias="hasPrevPage")


class RemotePage(BaseModel):
    data: List[dict[str, Any]] = Field(default_factory=list)
    pagination: RemotePagination = Field(default_factory=RemotePagination)
