"""Snapshot generation.

Produces every snapshot kind for a user:
- tarot season, life themes and archetypes from a recent activity period
- pattern snapshots: the strongest pattern of each co-occurrence type
- weekly historical snapshots for backfilling pattern evolution

Example:
    >>> generator = SnapshotGenerator(activity_source, engine)
    >>> season = await generator.generate_tarot_season_snapshot("user-1")
    >>> season.season.name
    'Emotional Depth'
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import Any, Callable, List, Optional, Sequence

from cosmicpatterns.configuration.settings import EngineSettings
from cosmicpatterns.detection.engine import CosmicPatternEngine
from cosmicpatterns.errors import CosmicPatternsError, SourceError
from cosmicpatterns.models.events import ActivityClass, RawEvent
from cosmicpatterns.models.patterns import Pattern, PatternTier, PatternType
from cosmicpatterns.models.snapshots import (
    ArchetypeSnapshot,
    LifeThemeSnapshot,
    TarotSeasonSnapshot,
)
from cosmicpatterns.snapshots.archetypes import build_archetype_snapshot
from cosmicpatterns.snapshots.season import build_tarot_season_snapshot
from cosmicpatterns.snapshots.signals import ActivitySignals
from cosmicpatterns.snapshots.themes import build_life_themes_snapshot
from cosmicpatterns.sources.base import ActivitySource

logger = logging.getLogger(__name__)

PATTERN_SNAPSHOT_TYPES = (
    PatternType.TAROT_MOON_PHASE.value,
    PatternType.EMOTION_MOON_PHASE.value,
    PatternType.TAROT_SUN_SIGN.value,
    PatternType.EMOTION_SUN_SIGN.value,
)


@dataclass(frozen=True)
class HistoricalPeriod:
    """One backfill slot: snapshot date and the look-back period ending at it."""

    snapshot_at: datetime
    start: datetime

    @property
    def end(self) -> datetime:
        return self.snapshot_at


def start_of_week(moment: datetime) -> datetime:
    """Midnight of the Sunday starting ``moment``'s week."""
    days_since_sunday = (moment.weekday() + 1) % 7
    day = (moment - timedelta(days=days_since_sunday)).date()
    return datetime.combine(day, time.min, tzinfo=moment.tzinfo or timezone.utc)


def weekly_periods(now: datetime, weeks_back: int, period_days: int) -> List[HistoricalPeriod]:
    """Newest first: one period per week, each looking back ``period_days``."""
    periods = []
    for week in range(weeks_back):
        snapshot_at = start_of_week(now - timedelta(weeks=week))
        periods.append(
            HistoricalPeriod(snapshot_at=snapshot_at, start=snapshot_at - timedelta(days=period_days))
        )
    return periods


def _within(events: Sequence[RawEvent], start: datetime, end: datetime) -> List[RawEvent]:
    return [event for event in events if start <= event.created_at <= end]


class SnapshotGenerator:
    """Build snapshots from a user's activity and detected patterns."""

    def __init__(
        self,
        activity_source: ActivitySource,
        engine: Optional[CosmicPatternEngine] = None,
        settings: Optional[EngineSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._source = activity_source
        self._engine = engine
        self.settings = settings or EngineSettings()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def period_days(self) -> int:
        return self.settings.snapshots.season_period_days

    async def fetch_activity(
        self,
        user_id: str,
        since: datetime,
        activities: Sequence[ActivityClass] = (ActivityClass.TAROT, ActivityClass.JOURNAL),
    ) -> List[RawEvent]:
        """Raw events of the given classes created at or after ``since``."""
        try:
            batches = await asyncio.gather(
                *(self._source.fetch_recent_activity(user_id, activity, since) for activity in activities)
            )
        except CosmicPatternsError:
            raise
        except Exception as exc:
            raise SourceError(
                f"Failed to fetch activity for snapshots: {exc}", details={"user_id": user_id}
            ) from exc
        return [event for batch in batches for event in batch]

    async def generate_tarot_season_snapshot(self, user_id: str) -> Optional[TarotSeasonSnapshot]:
        now = self._clock()
        events = await self.fetch_activity(
            user_id, now - timedelta(days=self.period_days), activities=(ActivityClass.TAROT,)
        )
        return build_tarot_season_snapshot(events, self.period_days, now)

    async def generate_life_themes_snapshot(self, user_id: str) -> Optional[LifeThemeSnapshot]:
        now = self._clock()
        events = await self.fetch_activity(user_id, now - timedelta(days=self.period_days))
        return build_life_themes_snapshot(ActivitySignals.from_events(events), now)

    async def generate_archetype_snapshot(self, user_id: str) -> Optional[ArchetypeSnapshot]:
        now = self._clock()
        events = await self.fetch_activity(user_id, now - timedelta(days=self.period_days))
        return build_archetype_snapshot(ActivitySignals.from_events(events), now)

    async def generate_pattern_snapshots(
        self, user_id: str, user_tier: PatternTier | str = PatternTier.FREE
    ) -> List[Pattern]:
        """Strongest pattern per co-occurrence type, empty on insufficient data."""
        if self._engine is None:
            return []
        result = await self._engine.detect_cosmic_patterns(user_id, user_tier=user_tier)
        if result.meta.insufficient_data:
            return []

        strongest = {}
        for pattern in result.patterns:
            if pattern.type in PATTERN_SNAPSHOT_TYPES and pattern.type not in strongest:
                strongest[pattern.type] = pattern
        return list(strongest.values())

    async def generate_all(
        self, user_id: str, user_tier: PatternTier | str = PatternTier.FREE
    ) -> List[Any]:
        """Every snapshot kind currently generatable for the user."""
        now = self._clock()
        events = await self.fetch_activity(user_id, now - timedelta(days=self.period_days))
        signals = ActivitySignals.from_events(events)

        snapshots: List[Any] = list(await self.generate_pattern_snapshots(user_id, user_tier))
        for snapshot in (
            build_tarot_season_snapshot(events, self.period_days, now),
            build_life_themes_snapshot(signals, now),
            build_archetype_snapshot(signals, now),
        ):
            if snapshot is not None:
                snapshots.append(snapshot)
        return snapshots

    async def generate_historical_snapshots(self, user_id: str, weeks_back: int) -> List[Any]:
        """Weekly tarot season, life theme and archetype snapshots.

        Each snapshot carries its historical week start as timestamp. Weeks
        without enough activity are skipped.
        """
        periods = weekly_periods(self._clock(), weeks_back, self.period_days)
        if not periods:
            return []

        events = await self.fetch_activity(user_id, periods[-1].start)
        snapshots: List[Any] = []
        for period in periods:
            window = _within(events, period.start, period.end)
            if not window:
                continue
            signals = ActivitySignals.from_events(window)
            for snapshot in (
                build_tarot_season_snapshot(window, self.period_days, period.snapshot_at),
                build_life_themes_snapshot(signals, period.snapshot_at),
                build_archetype_snapshot(signals, period.snapshot_at),
            ):
                if snapshot is not None:
                    snapshots.append(snapshot)

        logger.info(
            f"Generated {len(snapshots)} historical snapshots for user {user_id} "
            f"over {weeks_back} weeks"
        )
        return snapshots


__all__ = [
    "HistoricalPeriod",
    "PATTERN_SNAPSHOT_TYPES",
    "SnapshotGenerator",
    "start_of_week",
    "weekly_periods",
]
