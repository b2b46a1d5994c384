"""
Key-value persistence port for the scheduler.

The scheduler only needs to read, write and enumerate JSON-compatible records,
so it depends on this small interface instead of a concrete database.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional

CARD_PREFIX = "srs:card:"
STATS_KEY = "srs:stats"


def card_key(question_id: str) -> str:
    return f"{CARD_PREFIX}{question_id}"


class KeyValueStore(ABC):
    """
    Port for storing scheduler records.

    Implementations:
        - MemoryKeyValueStore: process memory, used by tests and degraded mode.
        - SQLiteKeyValueStore (db.database): the on-disk store.

    Implementations raise StorageUnavailableError when the backend fails.
    get() raises UnreadableRecordError for a record that cannot be decoded.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored record or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: Dict[str, Any]) -> None:
        """Replace the record stored under key."""

    @abstractmethod
    def set_many(self, items: Mapping[str, Dict[str, Any]]) -> None:
        """Replace several records at once; either all are written or none."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""

    @abstractmethod
    def delete_many(self, keys: Iterable[str]) -> None:
        """Remove several keys at once; either all are removed or none."""

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        """Return stored keys starting with prefix, in insertion order."""


class MemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Mapping[str, Dict[str, Any]]] = None):
        self._data: Dict[str, Dict[str, Any]] = {}
        if initial:
            self.set_many(initial)

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(value)

    def set_many(self, items: Mapping[str, Dict[str, Any]]) -> None:
        staged = {key: copy.deepcopy(value) for key, value in items.items()}
        self._data.update(staged)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def delete_many(self, keys: Iterable[str]) -> None:
        for key in list(keys):
            self._data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        return [key for key in self._data if key.startswith(prefix)]
