"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/key_value.py
============================================================
Class: InMemoryKeyValueStorage

Responsibilities:
  - Claves de sesión en memoria (tests / fallback).
  - set_many() atómico bajo lock.
============================================================
"""

from __future__ import annotations

from threading import Lock
from typing import Dict, Iterable, Optional


class InMemoryKeyValueStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._lock = Lock()
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set_many(self, values: dict[str, str]) -> None:
        with self._lock:
            self._values.update(values)

    def remove_many(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._values.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        """R: Copia del contenido (útil en tests)."""
        with self._lock:
            return dict(self._values)
