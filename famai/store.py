"""Keyed store abstraction for sessions and jobs.

Pipeline components receive a store instead of sharing module-level
maps, so a persistent implementation can replace the in-memory one
without touching pipeline logic.  Writes are last-writer-wins.
"""

from __future__ import annotations

import abc
import threading
from typing import Generic, Iterator, TypeVar

V = TypeVar("V")


class Store(abc.ABC, Generic[V]):
    """Minimal get/put/delete interface."""

    @abc.abstractmethod
    def get(self, key: str) -> V | None:
        """Return the value stored under *key*, or *None*."""

    @abc.abstractmethod
    def put(self, key: str, value: V) -> None:
        """Store *value* under *key*, replacing any previous value."""

    @abc.abstractmethod
    def delete(self, key: str) -> bool:
        """Remove *key*.  Returns *True* if something was removed."""

    @abc.abstractmethod
    def keys(self) -> list[str]:
        """Return a snapshot of all keys."""

    def values(self) -> Iterator[V]:
        for key in self.keys():
            value = self.get(key)
            if value is not None:
                yield value

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None


class InMemoryStore(Store[V]):
    """Dict-backed store guarded by a lock."""

    def __init__(self) -> None:
        self._data: dict[str, V] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> V | None:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: V) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
