"""Encrypted snapshot persistence."""

from cosmicpatterns.storage.base import SnapshotCipher, SnapshotRecord, SnapshotRepository
from cosmicpatterns.storage.snapshot_store import SaveOutcome, SecureSnapshotStore, StoredSnapshot
from cosmicpatterns.storage.sqlite_repository import SQLiteSnapshotRepository

__all__ = [
    "SQLiteSnapshotRepository",
    "SaveOutcome",
    "SecureSnapshotStore",
    "SnapshotCipher",
    "SnapshotRecord",
    "SnapshotRepository",
    "StoredSnapshot",
]
