"""
Durable local storage (SQLite via SQLAlchemy Core).

Exports the database handle plus SQL implementations of the record and
session-key ports.
"""

from .database import SCHEMA_VERSION, LocalDatabase
from .key_value import SqlKeyValueStorage
from .records import SqlRecordRepository

__all__ = [
    "SCHEMA_VERSION",
    "LocalDatabase",
    "SqlKeyValueStorage",
    "SqlRecordRepository",
]
