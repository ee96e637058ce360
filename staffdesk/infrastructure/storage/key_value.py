"""
===============================================================================
TARJETA CRC — infrastructure/storage/key_value.py (Claves de sesión durables)
===============================================================================

Class: SqlKeyValueStorage

Responsibilities:
  - Implementar domain.repositories.KeyValueStorage sobre la tabla kv_store.
  - set_many() atómico: token + user + tokenExpiry se escriben juntos o nada.

Collaborators:
  - infrastructure/storage/database.LocalDatabase
  - application/session_manager.py
===============================================================================
"""

from __future__ import annotations

from typing import Iterable, Optional

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from ...crosscutting.exceptions import StorageUnavailableError
from .database import LocalDatabase, kv_store_table


class SqlKeyValueStorage:
    def __init__(self, database: LocalDatabase):
        self._database = database

    def get(self, key: str) -> Optional[str]:
        try:
            with self._database.open().connect() as conn:
                return conn.execute(
                    sa.select(kv_store_table.c.value).where(kv_store_table.c.key == key)
                ).scalar()
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(
                "Failed to read session storage", original_error=exc
            ) from exc

    def set_many(self, values: dict[str, str]) -> None:
        if not values:
            return
        keys = list(values)
        try:
            with self._database.open().begin() as conn:
                conn.execute(
                    sa.delete(kv_store_table).where(kv_store_table.c.key.in_(keys))
                )
                conn.execute(
                    sa.insert(kv_store_table),
                    [{"key": k, "value": v} for k, v in values.items()],
                )
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(
                "Failed to write session storage", original_error=exc
            ) from exc

    def remove_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        try:
            with self._database.open().begin() as conn:
                conn.execute(
                    sa.delete(kv_store_table).where(kv_store_table.c.key.in_(keys))
                )
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(
                "Failed to clear session storage", original_error=exc
            ) from exc
