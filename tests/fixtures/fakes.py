"""In-memory stand-ins for the engine's external boundaries."""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from cosmicpatterns.models.events import ActivityClass, CosmicContext, RawEvent
from cosmicpatterns.storage.base import SnapshotRecord


class FakeActivitySource:
    """ActivitySource over a fixed list of events."""

    def __init__(self, events: Iterable[RawEvent] = (), error: Optional[Exception] = None):
        self.events = list(events)
        self.error = error
        self.calls: List[tuple] = []

    async def fetch_recent_activity(
        self, user_id: str, activity: ActivityClass, since: datetime
    ) -> List[RawEvent]:
        self.calls.append((user_id, activity, since))
        if self.error is not None:
            raise self.error
        return [
            event
            for event in self.events
            if event.activity is activity and event.created_at >= since
        ]


class FakeContextProvider:
    """CosmicContextProvider over a day -> context mapping."""

    def __init__(self, contexts: Optional[Dict[date, CosmicContext]] = None):
        self.contexts = dict(contexts or {})
        self.calls: List[date] = []

    async def get_context_for_date(self, day: date) -> Optional[CosmicContext]:
        self.calls.append(day)
        return self.contexts.get(day)


class InMemorySnapshotRepository:
    """SnapshotRepository kept in a list, mirroring the SQLite ordering rules."""

    def __init__(self, fail_writes: bool = False):
        self.records: List[SnapshotRecord] = []
        self.fail_writes = fail_writes
        self._next_id = 1

    async def insert(self, record: SnapshotRecord) -> int:
        if self.fail_writes:
            raise RuntimeError("disk full")
        stored = SnapshotRecord(
            user_id=record.user_id,
            pattern_type=record.pattern_type,
            payload=record.payload,
            generated_at=record.generated_at,
            expires_at=record.expires_at,
            record_id=self._next_id,
        )
        self._next_id += 1
        self.records.append(stored)
        return stored.record_id

    async def latest(
        self, user_id: str, pattern_type: str, now: datetime
    ) -> Optional[SnapshotRecord]:
        rows = await self.history(user_id, [pattern_type], 1, now)
        return rows[0] if rows else None

    async def history(
        self, user_id: str, pattern_types: Sequence[str], limit: int, now: datetime
    ) -> List[SnapshotRecord]:
        rows = [
            record
            for record in self.records
            if record.user_id == user_id
            and record.pattern_type in pattern_types
            and record.expires_at > now
        ]
        rows.sort(key=lambda r: (r.generated_at, r.record_id), reverse=True)
        return rows[:limit]

    async def latest_generated_at(
        self, user_id: str, pattern_types: Sequence[str]
    ) -> Optional[datetime]:
        stamps = [
            record.generated_at
            for record in self.records
            if record.user_id == user_id and record.pattern_type in pattern_types
        ]
        return max(stamps) if stamps else None

    async def delete_by_user(self, user_id: str, pattern_types: Sequence[str]) -> int:
        keep = [
            r for r in self.records
            if not (r.user_id == user_id and r.pattern_type in pattern_types)
        ]
        deleted = len(self.records) - len(keep)
        self.records = keep
        return deleted


class FakeCipher:
    """Reversible, visibly non-plaintext cipher for store tests."""

    def encrypt_json(self, data: dict) -> str:
        return json.dumps({"sealed": json.dumps(data)[::-1]})

    def decrypt_json(self, encrypted_json: str) -> dict:
        return json.loads(json.loads(encrypted_json)["sealed"][::-1])


class MockKeyring:
    """Mock keyring for testing without OS keychain."""

    def __init__(self):
        self._store = {}

    def get_password(self, service: str, key: str):
        return self._store.get(f"{service}:{key}")

    def set_password(self, service: str, key: str, value: str):
        self._store[f"{service}:{key}"] = value

    def delete_password(self, service: str, key: str):
        self._store.pop(f"{service}:{key}", None)
