"""
===============================================================================
CRC CARD — infrastructure/storage/database.py
===============================================================================

Componente:
  Base de datos local (SQLite vía SQLAlchemy Core)

Responsabilidades:
  - Abrir/crear la base una sola vez y devolver siempre el mismo Engine.
  - Definir el esquema (una tabla por tipo de registro + kv_store + schema_meta).
  - Versionar el esquema y rechazar versiones más nuevas que la soportada.
  - Traducir fallas de SQLAlchemy/IO a StorageUnavailableError.

Colaboradores:
  - sqlalchemy (Engine, MetaData, Table)
  - infrastructure/storage/records.py, key_value.py (usan las tablas)
  - container.py (decide fallback si falla open())

Convención de nombres:
  uq_<tabla>_<col>   - Unique constraints
  ix_<tabla>_<col>   - Indexes
===============================================================================
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from ...crosscutting.exceptions import StorageUnavailableError
from ...crosscutting.logger import logger

SCHEMA_VERSION = 1

metadata = sa.MetaData()


def _record_table(name: str) -> sa.Table:
    # R: `seq` fija el orden de inserción; `id` es la clave de negocio.
    return sa.Table(
        name,
        metadata,
        sa.Column("seq", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("id", sa.Integer, nullable=False),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        # R: email normalizado (trim + lower); NULL si vacío para no chocar en el índice único.
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("status", sa.String(50), nullable=False, server_default=""),
        sa.Column("payload", sa.JSON, nullable=False),
        sa.UniqueConstraint("id", name=f"uq_{name}_id"),
        sa.UniqueConstraint("email", name=f"uq_{name}_email"),
        sa.Index(f"ix_{name}_name", "name"),
        sa.Index(f"ix_{name}_status", "status"),
    )


employees_table = _record_table("employees")
projects_table = _record_table("projects")

kv_store_table = sa.Table(
    "kv_store",
    metadata,
    sa.Column("key", sa.String(64), primary_key=True),
    sa.Column("value", sa.Text, nullable=False),
)

schema_meta_table = sa.Table(
    "schema_meta",
    metadata,
    sa.Column("version", sa.Integer, nullable=False),
)


def record_table(table_name: str) -> sa.Table:
    try:
        return metadata.tables[table_name]
    except KeyError:
        raise ValueError(f"Unknown record table: {table_name}") from None


class LocalDatabase:
    """
    Handle perezoso sobre la base local.

    - open() es idempotente: la primera llamada crea el esquema, las siguientes
      devuelven el mismo Engine.
    - created_schema queda en True solo si esta apertura creó la base (primer uso),
      para que el container decida si sembrar datos por defecto.
    """

    def __init__(self, url: str):
        self._url = url
        self._engine: Optional[Engine] = None
        self._lock = threading.Lock()
        self.created_schema = False

    @property
    def url(self) -> str:
        return self._url

    def open(self) -> Engine:
        with self._lock:
            if self._engine is not None:
                return self._engine

            engine: Optional[Engine] = None
            try:
                self._ensure_parent_dir()
                engine = sa.create_engine(self._url, future=True)
                metadata.create_all(engine)
                self.created_schema = self._check_schema_version(engine)
            except StorageUnavailableError:
                self._discard(engine)
                raise
            except (SQLAlchemyError, ArgumentError, OSError) as exc:
                self._discard(engine)
                logger.error(
                    "Local database unavailable",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                )
                raise StorageUnavailableError(
                    "Local storage is unavailable", original_error=exc
                ) from exc

            self._engine = engine
            logger.info(
                "Local database initialized",
                extra={"created_schema": self.created_schema},
            )
            return engine

    def close(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None

    @staticmethod
    def _discard(engine: Optional[Engine]) -> None:
        # R: Una apertura fallida no deja conexiones ni el archivo tomado.
        if engine is not None:
            engine.dispose()

    def _ensure_parent_dir(self) -> None:
        url = make_url(self._url)
        if not url.drivername.startswith("sqlite"):
            return
        database = url.database
        if not database or database == ":memory:":
            return
        Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _check_schema_version(engine: Engine) -> bool:
        """R: Devuelve True si la base se acaba de crear (sin versión previa)."""
        with engine.begin() as conn:
            stored = conn.execute(sa.select(schema_meta_table.c.version)).scalar()
            if stored is None:
                conn.execute(
                    sa.insert(schema_meta_table).values(version=SCHEMA_VERSION)
                )
                return True

        if int(stored) > SCHEMA_VERSION:
            raise StorageUnavailableError(
                f"Local storage schema v{stored} is newer than supported v{SCHEMA_VERSION}"
            )
        return False
