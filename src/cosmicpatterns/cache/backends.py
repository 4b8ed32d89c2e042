"""Key-value backends for the ephemeral client cache."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Protocol

from cosmicpatterns.errors import CacheQuotaExceededError


class KeyValueBackend(Protocol):
    """Protocol for string key-value storage (browser-storage semantics)."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...

    def keys(self) -> List[str]:
        ...


class InMemoryStorageBackend:
    """Process-local backend with an optional byte quota.

    Size is the UTF-8 length of every key plus value; a write that would
    exceed the quota raises CacheQuotaExceededError and leaves the previous
    value in place.
    """

    def __init__(self, quota_bytes: Optional[int] = None) -> None:
        self.quota_bytes = quota_bytes
        self._items: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            if self.quota_bytes is not None:
                current = self._items.get(key)
                projected = (
                    self._size()
                    - (_entry_size(key, current) if current is not None else 0)
                    + _entry_size(key, value)
                )
                if projected > self.quota_bytes:
                    raise CacheQuotaExceededError(
                        f"Cache quota of {self.quota_bytes} bytes exceeded",
                        details={"key": key, "projected_bytes": projected},
                    )
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._items)

    @property
    def size_bytes(self) -> int:
        with self._lock:
            return self._size()

    def _size(self) -> int:
        return sum(_entry_size(key, value) for key, value in self._items.items())


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


__all__ = ["InMemoryStorageBackend", "KeyValueBackend"]
