from __future__ import annotations

from threading import Lock
from typing import Protocol


class KeyValueStore(Protocol):
    """Blob store used for selection and rate persistence.

    Implementations raise ``PersistenceError`` on backend failures.
    """

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._values: dict[str, bytes] = dict(initial or {})
        self._lock = Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._values[key] = bytes(value)


__all__ = ["InMemoryKeyValueStore", "KeyValueStore"]
