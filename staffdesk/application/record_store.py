"""
===============================================================================
TARJETA CRC — application/record_store.py (Store local de registros)
===============================================================================

Responsabilidades:
  - CRUD de una colección (empleados o proyectos) sobre un RecordRepository.
  - Validar antes de mutar (una mutación fallida no escribe nada).
  - Búsqueda por substring, case-insensitive, sobre los campos del schema.
  - Paginación del lado del cliente.

Colaboradores:
  - domain.repositories.RecordRepository (SQL o in-memory)
  - domain.records.RecordSchema (campos buscables)
  - application/validation.py
  - crosscutting.pagination.paginate

Reglas:
  - update() es estricto: id inexistente => RecordNotFoundError.
  - upsert() mantiene la semántica "put" (inserta o reemplaza).
  - remove() de un id inexistente es un no-op (False).
===============================================================================
"""

from __future__ import annotations

from typing import List, Optional

from ..crosscutting.exceptions import RecordNotFoundError
from ..crosscutting.logger import logger
from ..crosscutting.pagination import Page, paginate
from ..domain.records import Record, RecordSchema
from ..domain.repositories import RecordRepository
from .validation import RecordValidator, validate_record


class LocalRecordStore:
    def __init__(
        self,
        repository: RecordRepository,
        schema: RecordSchema,
        *,
        validator: RecordValidator = validate_record,
        page_size: int = 6,
    ):
        self._repository = repository
        self._schema = schema
        self._validator = validator
        self._page_size = page_size

    @property
    def schema(self) -> RecordSchema:
        return self._schema

    def initialize(self) -> None:
        """Idempotente. Raises StorageUnavailableError si el storage no abre."""
        self._repository.initialize()

    def add(self, record: Record) -> Record:
        self._validator(record)
        self._repository.insert(record)
        logger.info(
            "Record added",
            extra={"collection": self._schema.table_name, "record_id": record.id},
        )
        return record

    def update(self, record: Record) -> Record:
        self._validator(record)
        if not self._repository.replace(record):
            raise RecordNotFoundError(record.id)
        logger.info(
            "Record updated",
            extra={"collection": self._schema.table_name, "record_id": record.id},
        )
        return record

    def upsert(self, record: Record) -> Record:
        self._validator(record)
        self._repository.upsert(record)
        return record

    def remove(self, record_id: int) -> bool:
        removed = self._repository.delete(record_id)
        if removed:
            logger.info(
                "Record removed",
                extra={"collection": self._schema.table_name, "record_id": record_id},
            )
        return removed

    def get(self, record_id: int) -> Optional[Record]:
        return self._repository.get(record_id)

    def get_all(self) -> List[Record]:
        return self._repository.list_all()

    def search(self, term: Optional[str]) -> List[Record]:
        needle = (term or "").strip().lower()
        records = self.get_all()
        if not needle:
            return records
        return [r for r in records if needle in self._schema.search_text(r)]

    def next_id(self) -> int:
        return self._repository.max_id() + 1

    def page(
        self, term: Optional[str], page: int, page_size: Optional[int] = None
    ) -> Page[Record]:
        return paginate(self.search(term), page, page_size or self._page_size)
