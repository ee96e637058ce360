"""
In-Memory Repository Implementations.

For testing and as the fallback when local storage is unavailable.
Data is lost on process restart.
"""

from .key_value import InMemoryKeyValueStorage
from .records import InMemoryRecordRepository

__all__ = [
    "InMemoryKeyValueStorage",
    "InMemoryRecordRepository",
]
