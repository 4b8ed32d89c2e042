"""SQLite-backed snapshot repository."""

from __future__ import annotations

import asyncio
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from cosmicpatterns.storage.base import SnapshotRecord

SCHEMA = """
CREATE TABLE IF NOT EXISTS journal_patterns (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    pattern_type TEXT NOT NULL,
    pattern_data TEXT NOT NULL,
    generated_at TEXT NOT NULL,
    expires_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_journal_patterns_user_type
    ON journal_patterns (user_id, pattern_type, generated_at);
"""

_COLUMNS = "id, user_id, pattern_type, pattern_data, generated_at, expires_at"


def _ts(moment: datetime) -> str:
    """UTC ISO timestamp with fixed precision, so text order is time order."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _placeholders(values: Sequence[str]) -> str:
    return ", ".join("?" for _ in values)


def _row_to_record(row: Tuple) -> SnapshotRecord:
    record_id, user_id, pattern_type, payload, generated_at, expires_at = row
    return SnapshotRecord(
        record_id=record_id,
        user_id=user_id,
        pattern_type=pattern_type,
        payload=payload,
        generated_at=datetime.fromisoformat(generated_at),
        expires_at=datetime.fromisoformat(expires_at),
    )


class SQLiteSnapshotRepository:
    """Append-only snapshot table in a local SQLite database.

    Calls are serialised on one connection and run in a worker thread so
    the event loop never blocks on disk.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        if str(path) != ":memory:":
            self._path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(SCHEMA)
        self._lock = threading.Lock()

    async def insert(self, record: SnapshotRecord) -> int:
        return await asyncio.to_thread(self._insert, record)

    async def latest(
        self, user_id: str, pattern_type: str, now: datetime
    ) -> Optional[SnapshotRecord]:
        records = await self.history(user_id, [pattern_type], 1, now)
        return records[0] if records else None

    async def history(
        self, user_id: str, pattern_types: Sequence[str], limit: int, now: datetime
    ) -> List[SnapshotRecord]:
        return await asyncio.to_thread(self._history, user_id, list(pattern_types), limit, now)

    async def latest_generated_at(
        self, user_id: str, pattern_types: Sequence[str]
    ) -> Optional[datetime]:
        return await asyncio.to_thread(self._latest_generated_at, user_id, list(pattern_types))

    async def delete_by_user(self, user_id: str, pattern_types: Sequence[str]) -> int:
        return await asyncio.to_thread(self._delete_by_user, user_id, list(pattern_types))

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _insert(self, record: SnapshotRecord) -> int:
        with self._lock:
            with self._conn:
                cur = self._conn.execute(
                    """
                    INSERT INTO journal_patterns(user_id, pattern_type, pattern_data, generated_at, expires_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        record.user_id,
                        record.pattern_type,
                        record.payload,
                        _ts(record.generated_at),
                        _ts(record.expires_at),
                    ),
                )
                return int(cur.lastrowid)

    def _history(
        self, user_id: str, pattern_types: List[str], limit: int, now: datetime
    ) -> List[SnapshotRecord]:
        if not pattern_types:
            return []
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM journal_patterns
                WHERE user_id = ?
                  AND pattern_type IN ({_placeholders(pattern_types)})
                  AND expires_at > ?
                ORDER BY generated_at DESC, id DESC
                LIMIT ?
                """,
                (user_id, *pattern_types, _ts(now), limit),
            )
            rows = cur.fetchall()
        return [_row_to_record(row) for row in rows]

    def _latest_generated_at(
        self, user_id: str, pattern_types: List[str]
    ) -> Optional[datetime]:
        if not pattern_types:
            return None
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(
                f"""
                SELECT MAX(generated_at)
                FROM journal_patterns
                WHERE user_id = ? AND pattern_type IN ({_placeholders(pattern_types)})
                """,
                (user_id, *pattern_types),
            )
            row = cur.fetchone()
        return datetime.fromisoformat(row[0]) if row and row[0] else None

    def _delete_by_user(self, user_id: str, pattern_types: List[str]) -> int:
        if not pattern_types:
            return 0
        with self._lock:
            with self._conn:
                cur = self._conn.execute(
                    f"""
                    DELETE FROM journal_patterns
                    WHERE user_id = ? AND pattern_type IN ({_placeholders(pattern_types)})
                    """,
                    (user_id, *pattern_types),
                )
                return cur.rowcount


__all__ = ["SQLiteSnapshotRepository"]
