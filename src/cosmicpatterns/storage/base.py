"""Persistence boundary for encrypted snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol, Sequence


@dataclass(frozen=True)
class SnapshotRecord:
    """One stored row. ``payload`` is the cipher's opaque envelope.

    Records are append-only: rows are inserted and hard-deleted, never
    updated.
    """

    user_id: str
    pattern_type: str
    payload: str
    generated_at: datetime
    expires_at: datetime
    record_id: Optional[int] = None


class SnapshotCipher(Protocol):
    def encrypt_json(self, data: dict) -> str:
        ...

    def decrypt_json(self, encrypted_json: str) -> dict:
        ...


class SnapshotRepository(Protocol):
    """Protocol for the snapshot table.

    Reads only return rows whose ``expires_at`` is after ``now``.
    """

    async def insert(self, record: SnapshotRecord) -> int:
        ...

    async def latest(
        self, user_id: str, pattern_type: str, now: datetime
    ) -> Optional[SnapshotRecord]:
        ...

    async def history(
        self, user_id: str, pattern_types: Sequence[str], limit: int, now: datetime
    ) -> List[SnapshotRecord]:
        """Newest first."""
        ...

    async def latest_generated_at(
        self, user_id: str, pattern_types: Sequence[str]
    ) -> Optional[datetime]:
        ...

    async def delete_by_user(self, user_id: str, pattern_types: Sequence[str]) -> int:
        ...


__all__ = ["SnapshotCipher", "SnapshotRecord", "SnapshotRepository"]
