"""Cosmic patterns service facade.

The single object external callers (HTTP routes, the CLI, scheduled jobs)
talk to. It wires the detection engine, snapshot generator, secure store
and client cache together:

- detect_cosmic_patterns: run detection
- generate_*_snapshot / save_snapshot: produce and persist snapshots
- get_current_snapshots / get_history: tier-filtered reads, cache first
- refresh_snapshots: rate-limited regeneration of every snapshot kind
- backfill_snapshots: weekly historical snapshots
- delete_user_data: hard delete of the pattern family

Example:
    >>> service = create_service(settings, activity_source, context_provider)
    >>> summary = await service.refresh_snapshots("user-1", user_tier="premium")
    >>> summary.saved
    ['tarot_moon_phase', 'tarot_season', 'life_themes']
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cosmicpatterns.cache.backends import InMemoryStorageBackend
from cosmicpatterns.cache.client_cache import ClientCache
from cosmicpatterns.configuration.settings import EngineSettings
from cosmicpatterns.detection.engine import CosmicPatternEngine
from cosmicpatterns.errors import CosmicPatternsError
from cosmicpatterns.models.patterns import DetectionResult, Pattern, PatternTier
from cosmicpatterns.models.snapshots import (
    ArchetypeSnapshot,
    LifeThemeSnapshot,
    SnapshotType,
    TarotSeasonSnapshot,
    parse_snapshot,
    snapshot_to_dict,
)
from cosmicpatterns.privacy.encryption import EncryptionManager
from cosmicpatterns.snapshots.generators import SnapshotGenerator
from cosmicpatterns.sources.base import ActivitySource, CosmicContextProvider
from cosmicpatterns.storage.base import SnapshotCipher, SnapshotRepository
from cosmicpatterns.storage.snapshot_store import SaveOutcome, SecureSnapshotStore, StoredSnapshot
from cosmicpatterns.storage.sqlite_repository import SQLiteSnapshotRepository

logger = logging.getLogger(__name__)

CURRENT_CACHE_KEY = "current"


@dataclass
class RefreshSummary:
    """Outcome of a manual refresh."""

    user_id: str
    refreshed: bool
    saved: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "refreshed": self.refreshed,
            "saved": list(self.saved),
            "skipped": list(self.skipped),
            "reason": self.reason,
        }


class CosmicPatternsService:
    """Facade over detection, snapshot generation, storage and caching."""

    def __init__(
        self,
        engine: CosmicPatternEngine,
        generator: SnapshotGenerator,
        store: SecureSnapshotStore,
        cache: Optional[ClientCache] = None,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self.engine = engine
        self.generator = generator
        self.store = store
        self.cache = cache
        self.settings = settings or EngineSettings()

    async def detect_cosmic_patterns(
        self,
        user_id: str,
        days_back: Optional[int] = None,
        user_tier: PatternTier | str = PatternTier.FREE,
        category: Optional[str] = None,
    ) -> DetectionResult:
        return await self.engine.detect_cosmic_patterns(
            user_id, days_back=days_back, user_tier=user_tier, category=category
        )

    async def generate_tarot_season_snapshot(self, user_id: str) -> Optional[TarotSeasonSnapshot]:
        return await self.generator.generate_tarot_season_snapshot(user_id)

    async def generate_life_themes_snapshot(self, user_id: str) -> Optional[LifeThemeSnapshot]:
        return await self.generator.generate_life_themes_snapshot(user_id)

    async def generate_archetype_snapshot(self, user_id: str) -> Optional[ArchetypeSnapshot]:
        return await self.generator.generate_archetype_snapshot(user_id)

    async def generate_pattern_snapshots(
        self, user_id: str, user_tier: PatternTier | str = PatternTier.FREE
    ) -> List[Pattern]:
        return await self.generator.generate_pattern_snapshots(user_id, user_tier)

    async def save_snapshot(self, user_id: str, snapshot: Any) -> bool:
        """True when the snapshot was written, False when skipped as unchanged.

        Raises:
            StoreWriteError: The snapshot was not persisted
        """
        outcome = await self.store.save(user_id, snapshot)
        if outcome is SaveOutcome.SAVED:
            self._invalidate(user_id)
        return outcome is SaveOutcome.SAVED

    async def get_current_snapshots(
        self,
        user_id: str,
        user_tier: PatternTier | str = PatternTier.FREE,
        use_cache: bool = True,
    ) -> Dict[str, Any]:
        """Newest snapshot per type visible to ``user_tier``."""
        tier = PatternTier(user_tier)
        key = self.cache.make_key(user_id, f"{CURRENT_CACHE_KEY}-{tier.value}") if self.cache else None

        if key and use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                try:
                    return {name: parse_snapshot(data) for name, data in cached.items()}
                except (CosmicPatternsError, AttributeError) as exc:
                    logger.debug(f"Discarding unreadable cached snapshots: {exc}")
                    self.cache.clear(key)

        current = await self.store.get_current(user_id, user_tier=tier)
        if key:
            self.cache.set(
                key, {name: snapshot_to_dict(snapshot) for name, snapshot in current.items()}
            )
        return current

    async def get_history(
        self,
        user_id: str,
        snapshot_type: Optional[SnapshotType | str] = None,
        limit: Optional[int] = None,
        user_tier: PatternTier | str = PatternTier.FREE,
    ) -> List[StoredSnapshot]:
        return await self.store.get_history(
            user_id, snapshot_type=snapshot_type, limit=limit, user_tier=user_tier
        )

    async def should_generate(self, user_id: str, snapshot_type: SnapshotType | str) -> bool:
        return await self.store.should_generate(user_id, snapshot_type)

    async def can_refresh(self, user_id: str) -> bool:
        return await self.store.can_refresh(user_id)

    async def refresh_snapshots(
        self,
        user_id: str,
        user_tier: PatternTier | str = PatternTier.FREE,
        force: bool = False,
    ) -> RefreshSummary:
        """Regenerate and save every snapshot kind, honouring the cooldown.

        ``force`` bypasses the cooldown (scheduled jobs).
        """
        if not force and not await self.store.can_refresh(user_id):
            logger.info(f"Refresh for user {user_id} rejected by cooldown")
            return RefreshSummary(user_id=user_id, refreshed=False, reason="rate_limited")

        await self.store.record_refresh(user_id)
        snapshots = await self.generator.generate_all(user_id, user_tier)
        summary = RefreshSummary(user_id=user_id, refreshed=True)
        for snapshot in snapshots:
            outcome = await self.store.save(user_id, snapshot)
            target = summary.saved if outcome is SaveOutcome.SAVED else summary.skipped
            target.append(snapshot.type)

        if not snapshots:
            summary.reason = "insufficient_data"
        self._invalidate(user_id)
        logger.info(
            f"Refreshed user {user_id}: {len(summary.saved)} saved, "
            f"{len(summary.skipped)} unchanged"
        )
        return summary

    async def backfill_snapshots(self, user_id: str, weeks_back: int = 26) -> int:
        """Write weekly historical snapshots; returns how many were written."""
        snapshots = await self.generator.generate_historical_snapshots(user_id, weeks_back)
        for snapshot in snapshots:
            await self.store.save_historical(user_id, snapshot)
        if snapshots:
            self._invalidate(user_id)
        return len(snapshots)

    async def delete_user_data(self, user_id: str) -> int:
        deleted = await self.store.delete(user_id)
        self._invalidate(user_id)
        return deleted

    def _invalidate(self, user_id: str) -> None:
        if self.cache is not None:
            self.cache.clear_all(user_id)


def create_service(
    activity_source: ActivitySource,
    context_provider: CosmicContextProvider,
    settings: Optional[EngineSettings] = None,
    *,
    repository: Optional[SnapshotRepository] = None,
    cipher: Optional[SnapshotCipher] = None,
    cache: Optional[ClientCache] = None,
) -> CosmicPatternsService:
    """Wire a service from settings, defaulting to SQLite + keychain encryption."""
    settings = settings or EngineSettings()
    snapshot_settings = settings.snapshots

    if cipher is None:
        manager = EncryptionManager(
            service_name=snapshot_settings.keyring_service,
            enabled=snapshot_settings.encryption_enabled,
        )
        manager.initialize()
        cipher = manager
    if repository is None:
        repository = SQLiteSnapshotRepository(snapshot_settings.database_path)
    if cache is None:
        cache = ClientCache(
            InMemoryStorageBackend(quota_bytes=settings.cache.quota_bytes),
            namespace=settings.cache.namespace,
            default_max_age_ms=settings.cache.default_max_age_ms,
        )

    engine = CosmicPatternEngine(activity_source, context_provider, settings=settings)
    return CosmicPatternsService(
        engine=engine,
        generator=SnapshotGenerator(activity_source, engine=engine, settings=settings),
        store=SecureSnapshotStore(repository, cipher, settings=snapshot_settings),
        cache=cache,
        settings=settings,
    )


__all__ = ["CosmicPatternsService", "RefreshSummary", "create_service"]
