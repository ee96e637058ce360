"""Repository implementations that are not backed by the SQL store."""

from .in_memory import InMemoryKeyValueStorage, InMemoryRecordRepository

__all__ = [
    "InMemoryKeyValueStorage",
    "InMemoryRecordRepository",
]
