"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts for records and session keys (ports).
- Keep the application layer independent from SQLite/SQLAlchemy or in-memory storage.

Collaborators
- domain.records: Employee, Project, RecordSchema
- infrastructure.storage: SQL implementations
- infrastructure.repositories.in_memory: in-memory implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Records are returned in insertion order.
- Uniqueness (id, non-empty email) is enforced by implementations.
"""

from typing import Iterable, List, Optional, Protocol

from .records import Record


class RecordRepository(Protocol):
    """
    R: Interface for one keyed collection of records.

    Implementations must provide:
      - Idempotent initialization
      - Unique id + unique non-empty email
      - Insertion-ordered listing
    """

    def initialize(self) -> None:
        """R: Open/create the collection. Raises StorageUnavailableError."""
        ...

    def insert(self, record: Record) -> None:
        """R: Insert a new record. Raises DuplicateKeyError on id/email clash."""
        ...

    def replace(self, record: Record) -> bool:
        """R: Replace by id. Returns False when the id is absent."""
        ...

    def upsert(self, record: Record) -> None:
        """R: Insert or replace by id (put semantics)."""
        ...

    def delete(self, record_id: int) -> bool:
        """R: Delete by id. Returns False when the id is absent."""
        ...

    def get(self, record_id: int) -> Optional[Record]:
        ...

    def list_all(self) -> List[Record]:
        ...

    def max_id(self) -> int:
        """R: Highest id stored, 0 when empty."""
        ...


class KeyValueStorage(Protocol):
    """
    R: Interface for durable session keys (token, user, tokenExpiry).

    `set_many` must be atomic: all keys are written or none are.
    """

    def get(self, key: str) -> Optional[str]:
        ...

    def set_many(self, values: dict[str, str]) -> None:
        ...

    def remove_many(self, keys: Iterable[str]) -> None:
        ...
