"""Secure, append-only snapshot store.

Every snapshot is encrypted before it reaches the repository. A save is
skipped when the change detector finds nothing meaningful moved since the
latest stored snapshot of the same type.

Error policy:
- write failures raise StoreWriteError; the snapshot is not persisted
- read failures raise StoreReadError
- a row that fails to decrypt or parse is logged and skipped
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from cosmicpatterns.configuration.settings import SnapshotSettings
from cosmicpatterns.errors import CosmicPatternsError, StoreReadError, StoreWriteError
from cosmicpatterns.models.patterns import PatternTier
from cosmicpatterns.models.snapshots import (
    PATTERN_FAMILY,
    SnapshotType,
    parse_snapshot,
    snapshot_to_dict,
    snapshot_type_of,
    visible_snapshot_types,
)
from cosmicpatterns.snapshots.change_detection import has_pattern_changed
from cosmicpatterns.storage.base import SnapshotCipher, SnapshotRecord, SnapshotRepository

logger = logging.getLogger(__name__)

# row type stamping each manual refresh run; never returned by reads
REFRESH_MARKER = "refresh_marker"


class SaveOutcome(str, Enum):
    SAVED = "saved"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class StoredSnapshot:
    """A decrypted snapshot with the row metadata it came from."""

    snapshot: Any
    generated_at: datetime
    expires_at: datetime

    @property
    def type(self) -> str:
        return self.snapshot.type


class SecureSnapshotStore:
    """Encrypted snapshot persistence with change detection.

    Example:
        >>> store = SecureSnapshotStore(repository, EncryptionManager())
        >>> await store.save("user-1", season_snapshot)
        <SaveOutcome.SAVED: 'saved'>
        >>> await store.save("user-1", season_snapshot)
        <SaveOutcome.SKIPPED: 'skipped'>
    """

    def __init__(
        self,
        repository: SnapshotRepository,
        cipher: SnapshotCipher,
        settings: Optional[SnapshotSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._repository = repository
        self._cipher = cipher
        self.settings = settings or SnapshotSettings()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def save(self, user_id: str, snapshot: Any) -> SaveOutcome:
        """Persist ``snapshot`` unless it matches the latest stored one.

        Two concurrent saves of the same type may both write.
        """
        snapshot_type = snapshot_type_of(snapshot).value
        now = self._clock()

        previous = await self._latest(user_id, snapshot_type, now)
        if not has_pattern_changed(previous, snapshot, self.settings.change_threshold):
            logger.info(f"Skipped unchanged {snapshot_type} snapshot for user {user_id}")
            return SaveOutcome.SKIPPED

        await self._write(user_id, snapshot, generated_at=now, now=now)
        logger.info(f"Saved {snapshot_type} snapshot for user {user_id}")
        return SaveOutcome.SAVED

    async def save_historical(self, user_id: str, snapshot: Any) -> None:
        """Insert a backfilled snapshot at its own timestamp, no change check."""
        await self._write(
            user_id, snapshot, generated_at=snapshot.timestamp, now=self._clock()
        )

    async def get_history(
        self,
        user_id: str,
        snapshot_type: Optional[SnapshotType | str] = None,
        limit: Optional[int] = None,
        user_tier: Optional[PatternTier | str] = None,
    ) -> List[StoredSnapshot]:
        """Non-expired snapshots, newest first, undecryptable rows skipped."""
        visible = visible_snapshot_types(user_tier)
        if snapshot_type is not None:
            wanted = SnapshotType(snapshot_type).value
            visible = [value for value in visible if value == wanted]
        if not visible:
            return []

        try:
            records = await self._repository.history(
                user_id, visible, limit or self.settings.history_limit, self._clock()
            )
        except CosmicPatternsError:
            raise
        except Exception as exc:
            logger.error(f"Failed to read snapshot history for user {user_id}: {exc}")
            raise StoreReadError(
                f"Failed to read snapshot history: {exc}", details={"user_id": user_id}
            ) from exc

        stored = []
        for record in records:
            item = self._open(record)
            if item is not None:
                stored.append(item)
        return stored

    async def get_current(
        self, user_id: str, user_tier: Optional[PatternTier | str] = None
    ) -> Dict[str, Any]:
        """Newest snapshot per visible type."""
        now = self._clock()
        current: Dict[str, Any] = {}
        for snapshot_type in visible_snapshot_types(user_tier):
            snapshot = await self._latest(user_id, snapshot_type, now)
            if snapshot is not None:
                current[snapshot_type] = snapshot
        return current

    async def should_generate(self, user_id: str, snapshot_type: SnapshotType | str) -> bool:
        """True when nothing is stored or the newest is past the regeneration interval."""
        last = await self._latest_generated_at(user_id, [SnapshotType(snapshot_type).value])
        if last is None:
            return True
        return self._clock() - last >= timedelta(days=self.settings.regeneration_days)

    async def can_refresh(self, user_id: str) -> bool:
        """Advisory rate limit on manual refreshes.

        The cooldown runs from the newest of any stored snapshot or recorded
        refresh, so a refresh that saved nothing still counts.
        """
        last = await self._latest_generated_at(
            user_id, [*sorted(PATTERN_FAMILY), REFRESH_MARKER]
        )
        if last is None:
            return True
        return self._clock() - last > timedelta(hours=self.settings.refresh_cooldown_hours)

    async def record_refresh(self, user_id: str) -> None:
        """Stamp a refresh run so the cooldown applies even when nothing is saved."""
        now = self._clock()
        try:
            await self._repository.insert(
                SnapshotRecord(
                    user_id=user_id,
                    pattern_type=REFRESH_MARKER,
                    payload=self._cipher.encrypt_json({"type": REFRESH_MARKER}),
                    generated_at=now,
                    expires_at=now + timedelta(days=self.settings.retention_days),
                )
            )
        except Exception as exc:
            logger.error(f"Failed to record refresh for user {user_id}: {exc}")
            raise StoreWriteError(
                f"Failed to record refresh: {exc}", details={"user_id": user_id}
            ) from exc

    async def delete(self, user_id: str) -> int:
        """Hard-delete every pattern-family row for the user.

        Refresh markers go too but are not counted.
        """
        try:
            deleted = await self._repository.delete_by_user(user_id, sorted(PATTERN_FAMILY))
            await self._repository.delete_by_user(user_id, [REFRESH_MARKER])
        except Exception as exc:
            logger.error(f"Failed to delete snapshots for user {user_id}: {exc}")
            raise StoreWriteError(
                f"Failed to delete snapshots: {exc}", details={"user_id": user_id}
            ) from exc
        logger.info(f"Deleted {deleted} snapshots for user {user_id}")
        return deleted

    async def _write(
        self, user_id: str, snapshot: Any, generated_at: datetime, now: datetime
    ) -> None:
        snapshot_type = snapshot_type_of(snapshot).value
        try:
            payload = self._cipher.encrypt_json(snapshot_to_dict(snapshot))
            await self._repository.insert(
                SnapshotRecord(
                    user_id=user_id,
                    pattern_type=snapshot_type,
                    payload=payload,
                    generated_at=generated_at,
                    expires_at=now + timedelta(days=self.settings.retention_days),
                )
            )
        except Exception as exc:
            logger.error(f"Failed to write {snapshot_type} snapshot for user {user_id}: {exc}")
            raise StoreWriteError(
                f"Failed to write {snapshot_type} snapshot: {exc}",
                details={"user_id": user_id, "type": snapshot_type},
            ) from exc

    async def _latest(self, user_id: str, snapshot_type: str, now: datetime) -> Optional[Any]:
        try:
            record = await self._repository.latest(user_id, snapshot_type, now)
        except Exception as exc:
            logger.error(f"Failed to read latest {snapshot_type} for user {user_id}: {exc}")
            raise StoreReadError(
                f"Failed to read latest {snapshot_type} snapshot: {exc}",
                details={"user_id": user_id, "type": snapshot_type},
            ) from exc
        if record is None:
            return None
        item = self._open(record)
        return item.snapshot if item else None

    async def _latest_generated_at(self, user_id: str, types: List[str]) -> Optional[datetime]:
        try:
            return await self._repository.latest_generated_at(user_id, types)
        except Exception as exc:
            raise StoreReadError(
                f"Failed to read snapshot timestamps: {exc}", details={"user_id": user_id}
            ) from exc

    def _open(self, record: SnapshotRecord) -> Optional[StoredSnapshot]:
        try:
            snapshot = parse_snapshot(self._cipher.decrypt_json(record.payload))
        except Exception as exc:
            logger.warning(
                f"Skipping unreadable {record.pattern_type} snapshot "
                f"{record.record_id} for user {record.user_id}: {exc}"
            )
            return None
        return StoredSnapshot(
            snapshot=snapshot, generated_at=record.generated_at, expires_at=record.expires_at
        )


__all__ = ["REFRESH_MARKER", "SaveOutcome", "SecureSnapshotStore", "StoredSnapshot"]
