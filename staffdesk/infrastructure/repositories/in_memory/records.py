"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/records.py
============================================================
Class: InMemoryRecordRepository

Responsibilities:
  - Almacenar registros en memoria (tests / fallback si SQLite no abre).
  - Mismas reglas que el repo SQL: id único, email no vacío único,
    orden de inserción estable.

Collaborators:
  - domain.records.RecordSchema (clave única)
  - domain.repositories.RecordRepository (contrato a implementar)

Constraints / Notes:
  - Thread-safe: acceso protegido por Lock.
  - Copias defensivas: los callers nunca comparten instancias con el repo.
============================================================
"""

from __future__ import annotations

from copy import deepcopy
from threading import Lock
from typing import Dict, List, Optional

from ....crosscutting.exceptions import DuplicateKeyError
from ....domain.records import Record, RecordSchema


class InMemoryRecordRepository:
    """
    Modelo mental:
    - _records es la "tabla" (id -> Record); dict conserva el orden de inserción.
    - Un replace mantiene la posición original del registro.
    """

    def __init__(self, schema: RecordSchema) -> None:
        self._schema = schema
        self._lock = Lock()
        self._records: Dict[int, Record] = {}

    def _check_email(self, record: Record, *, exclude_id: Optional[int] = None) -> None:
        """R: Debe llamarse con el lock tomado."""
        email = self._schema.unique_key(record)
        if email is None:
            return
        for other in self._records.values():
            if other.id == exclude_id:
                continue
            if self._schema.unique_key(other) == email:
                raise DuplicateKeyError(self._schema.unique_field, email)

    def initialize(self) -> None:
        return None

    def insert(self, record: Record) -> None:
        with self._lock:
            if record.id in self._records:
                raise DuplicateKeyError("id", record.id)
            self._check_email(record)
            self._records[record.id] = deepcopy(record)

    def replace(self, record: Record) -> bool:
        with self._lock:
            if record.id not in self._records:
                return False
            self._check_email(record, exclude_id=record.id)
            self._records[record.id] = deepcopy(record)
            return True

    def upsert(self, record: Record) -> None:
        with self._lock:
            self._check_email(record, exclude_id=record.id)
            self._records[record.id] = deepcopy(record)

    def delete(self, record_id: int) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def get(self, record_id: int) -> Optional[Record]:
        with self._lock:
            record = self._records.get(record_id)
            return deepcopy(record) if record is not None else None

    def list_all(self) -> List[Record]:
        with self._lock:
            return [deepcopy(r) for r in self._records.values()]

    def max_id(self) -> int:
        with self._lock:
            return max(self._records, default=0)
