"""
===============================================================================
TARJETA CRC — infrastructure/storage/records.py (Repositorio SQL de registros)
===============================================================================

Class: SqlRecordRepository

Responsibilities:
  - Implementar domain.repositories.RecordRepository sobre SQLite.
  - Garantizar unicidad de id y de email no vacío (DuplicateKeyError).
  - Devolver registros en orden de inserción (seq).
  - Escrituras transaccionales: una mutación fallida no deja nada a medias.

Collaborators:
  - infrastructure/storage/database.LocalDatabase (Engine + tablas)
  - domain.records.RecordSchema (tabla, from_dict, clave única)

Notes:
  - El payload completo se guarda como JSON; name/email/status se duplican
    en columnas para los índices.
===============================================================================
"""

from __future__ import annotations

import threading
from typing import Any, List, Optional

import sqlalchemy as sa
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ...crosscutting.exceptions import DuplicateKeyError, StorageUnavailableError
from ...crosscutting.logger import logger
from ...domain.records import Record, RecordSchema
from .database import LocalDatabase, record_table


class SqlRecordRepository:
    def __init__(self, database: LocalDatabase, schema: RecordSchema):
        self._database = database
        self._schema = schema
        self._table = record_table(schema.table_name)
        self._lock = threading.Lock()

    # =========================================================
    # Helpers internos
    # =========================================================
    def _engine(self) -> Engine:
        return self._database.open()

    def _row_values(self, record: Record) -> dict[str, Any]:
        payload = record.to_dict()
        name_attr = self._schema.search_fields[0]
        status = getattr(record, "status", "")
        return {
            "id": record.id,
            "name": str(getattr(record, name_attr, "") or ""),
            "email": self._schema.unique_key(record),
            "status": getattr(status, "value", status) or "",
            "payload": payload,
        }

    def _exists(self, conn: Connection, record_id: int) -> bool:
        stmt = sa.select(self._table.c.seq).where(self._table.c.id == record_id)
        return conn.execute(stmt).first() is not None

    def _check_email(
        self, conn: Connection, record: Record, *, exclude_id: Optional[int] = None
    ) -> None:
        email = self._schema.unique_key(record)
        if email is None:
            return
        stmt = sa.select(self._table.c.id).where(self._table.c.email == email)
        if exclude_id is not None:
            stmt = stmt.where(self._table.c.id != exclude_id)
        if conn.execute(stmt).first() is not None:
            raise DuplicateKeyError(self._schema.unique_field, email)

    def _duplicate_from_integrity(
        self, record: Record, exc: IntegrityError
    ) -> DuplicateKeyError:
        # R: Fallback por si otra escritura ganó la carrera entre el check y el insert.
        text = str(exc.orig).lower()
        if "email" in text:
            return DuplicateKeyError(
                self._schema.unique_field,
                self._schema.unique_key(record),
                original_error=exc,
            )
        return DuplicateKeyError("id", record.id, original_error=exc)

    def _storage_error(self, action: str, exc: SQLAlchemyError) -> StorageUnavailableError:
        logger.error(
            "Local storage operation failed",
            extra={
                "table": self._schema.table_name,
                "action": action,
                "error": str(exc),
            },
        )
        return StorageUnavailableError(
            f"Local storage failed to {action}", original_error=exc
        )

    # =========================================================
    # RecordRepository
    # =========================================================
    def initialize(self) -> None:
        self._engine()

    def insert(self, record: Record) -> None:
        with self._lock:
            try:
                with self._engine().begin() as conn:
                    if self._exists(conn, record.id):
                        raise DuplicateKeyError("id", record.id)
                    self._check_email(conn, record)
                    conn.execute(sa.insert(self._table).values(**self._row_values(record)))
            except IntegrityError as exc:
                raise self._duplicate_from_integrity(record, exc) from exc
            except SQLAlchemyError as exc:
                raise self._storage_error("insert", exc) from exc

    def replace(self, record: Record) -> bool:
        with self._lock:
            try:
                with self._engine().begin() as conn:
                    if not self._exists(conn, record.id):
                        return False
                    self._check_email(conn, record, exclude_id=record.id)
                    conn.execute(
                        sa.update(self._table)
                        .where(self._table.c.id == record.id)
                        .values(**self._row_values(record))
                    )
                    return True
            except IntegrityError as exc:
                raise self._duplicate_from_integrity(record, exc) from exc
            except SQLAlchemyError as exc:
                raise self._storage_error("replace", exc) from exc

    def upsert(self, record: Record) -> None:
        with self._lock:
            try:
                with self._engine().begin() as conn:
                    self._check_email(conn, record, exclude_id=record.id)
                    values = self._row_values(record)
                    if self._exists(conn, record.id):
                        conn.execute(
                            sa.update(self._table)
                            .where(self._table.c.id == record.id)
                            .values(**values)
                        )
                    else:
                        conn.execute(sa.insert(self._table).values(**values))
            except IntegrityError as exc:
                raise self._duplicate_from_integrity(record, exc) from exc
            except SQLAlchemyError as exc:
                raise self._storage_error("upsert", exc) from exc

    def delete(self, record_id: int) -> bool:
        with self._lock:
            try:
                with self._engine().begin() as conn:
                    result = conn.execute(
                        sa.delete(self._table).where(self._table.c.id == record_id)
                    )
                    return result.rowcount > 0
            except SQLAlchemyError as exc:
                raise self._storage_error("delete", exc) from exc

    def get(self, record_id: int) -> Optional[Record]:
        try:
            with self._engine().connect() as conn:
                payload = conn.execute(
                    sa.select(self._table.c.payload).where(self._table.c.id == record_id)
                ).scalar()
        except SQLAlchemyError as exc:
            raise self._storage_error("read", exc) from exc
        return self._schema.from_dict(payload) if payload is not None else None

    def list_all(self) -> List[Record]:
        try:
            with self._engine().connect() as conn:
                rows = conn.execute(
                    sa.select(self._table.c.payload).order_by(self._table.c.seq)
                ).scalars().all()
        except SQLAlchemyError as exc:
            raise self._storage_error("read", exc) from exc
        return [self._schema.from_dict(payload) for payload in rows]

    def max_id(self) -> int:
        try:
            with self._engine().connect() as conn:
                value = conn.execute(sa.select(sa.func.max(self._table.c.id))).scalar()
        except SQLAlchemyError as exc:
            raise self._storage_error("read", exc) from exc
        return int(value or 0)
