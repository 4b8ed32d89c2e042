"""Ephemeral client cache."""

from cosmicpatterns.cache.backends import InMemoryStorageBackend, KeyValueBackend
from cosmicpatterns.cache.client_cache import ClientCache

__all__ = ["ClientCache", "InMemoryStorageBackend", "KeyValueBackend"]
