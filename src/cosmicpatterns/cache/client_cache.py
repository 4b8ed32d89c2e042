"""Ephemeral client-side cache for snapshot reads.

Entries are JSON envelopes ``{"data": ..., "timestamp": <epoch ms>}`` keyed
as ``"{namespace}:{user_id}"`` or ``"{namespace}:{user_id}:{sub_type}"``, with
``%`` and ``:`` in the user id percent-escaped.
The cache is best effort: expired or corrupted entries are evicted and
reported as misses, and failed writes are dropped silently.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Optional

from cosmicpatterns.cache.backends import KeyValueBackend

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "cosmic-patterns"
DEFAULT_MAX_AGE_MS = 60 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


def _escape_user_id(user_id: str) -> str:
    """Percent-escape the key separator so one user's prefix never matches another."""
    return user_id.replace("%", "%25").replace(":", "%3A")


class ClientCache:
    """Namespaced, age-checked cache over a key-value backend.

    Example:
        >>> cache = ClientCache(InMemoryStorageBackend())
        >>> key = cache.make_key("user-1", "current")
        >>> cache.set(key, {"tarot_season": {...}})
        True
        >>> cache.get(key, max_age_ms=3_600_000)
        {'tarot_season': {...}}
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        namespace: str = DEFAULT_NAMESPACE,
        clock_ms: Optional[Callable[[], int]] = None,
        default_max_age_ms: int = DEFAULT_MAX_AGE_MS,
    ) -> None:
        if ":" in namespace:
            raise ValueError("namespace must not contain ':'")
        self._backend = backend
        self.namespace = namespace
        self._clock_ms = clock_ms or _now_ms
        self.default_max_age_ms = default_max_age_ms

    def make_key(self, user_id: str, sub_type: Optional[str] = None) -> str:
        key = f"{self.namespace}:{_escape_user_id(user_id)}"
        return f"{key}:{sub_type}" if sub_type else key

    def get(self, key: str, max_age_ms: Optional[int] = None) -> Optional[Any]:
        """Cached data, or None when missing, expired or unreadable."""
        max_age = self.default_max_age_ms if max_age_ms is None else max_age_ms
        try:
            raw = self._backend.get_item(key)
        except Exception as exc:
            logger.debug(f"Cache read failed for {key}: {exc}")
            return None
        if raw is None:
            return None

        try:
            entry = json.loads(raw)
            timestamp = entry["timestamp"]
            data = entry["data"]
            if not isinstance(timestamp, (int, float)) or isinstance(timestamp, bool):
                raise ValueError("timestamp is not numeric")
        except (ValueError, KeyError, TypeError) as exc:
            logger.debug(f"Evicting corrupted cache entry {key}: {exc}")
            self.clear(key)
            return None

        if self._clock_ms() - timestamp > max_age:
            logger.debug(f"Evicting expired cache entry {key}")
            self.clear(key)
            return None
        return data

    def set(self, key: str, data: Any) -> bool:
        """Store ``data``; returns False instead of raising when the write fails."""
        try:
            payload = json.dumps({"data": data, "timestamp": self._clock_ms()})
            self._backend.set_item(key, payload)
        except Exception as exc:
            logger.debug(f"Cache write dropped for {key}: {exc}")
            return False
        return True

    def clear(self, key: str) -> None:
        try:
            self._backend.remove_item(key)
        except Exception as exc:
            logger.debug(f"Cache remove failed for {key}: {exc}")

    def clear_all(self, user_id: str) -> int:
        """Remove every entry for ``user_id`` in this namespace; returns the count."""
        prefix = self.make_key(user_id)
        try:
            keys = [k for k in self._backend.keys() if k == prefix or k.startswith(prefix + ":")]
        except Exception as exc:
            logger.debug(f"Cache key listing failed: {exc}")
            return 0
        for key in keys:
            self.clear(key)
        return len(keys)


__all__ = ["ClientCache", "DEFAULT_MAX_AGE_MS", "DEFAULT_NAMESPACE"]
