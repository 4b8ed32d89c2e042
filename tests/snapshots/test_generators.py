"""Tests for snapshot generation."""

from datetime import datetime, timedelta, timezone

import pytest

from cosmicpatterns.detection.engine import CosmicPatternEngine
from cosmicpatterns.errors import SourceError
from cosmicpatterns.snapshots.generators import (
    SnapshotGenerator,
    start_of_week,
    weekly_periods,
)
from tests.fixtures.builders import NOW, tarot_moon_history
from tests.fixtures.fakes import FakeActivitySource, FakeContextProvider


@pytest.fixture
def history():
    return tarot_moon_history()


@pytest.fixture
def generator(history):
    events, contexts = history
    source = FakeActivitySource(events)
    engine = CosmicPatternEngine(source, FakeContextProvider(contexts), clock=lambda: NOW)
    return SnapshotGenerator(source, engine=engine, clock=lambda: NOW)


class TestWeeklyPeriods:
    def test_start_of_week_is_sunday_midnight(self):
        # 2026-03-31 is a Tuesday
        assert start_of_week(NOW) == datetime(2026, 3, 29, tzinfo=timezone.utc)
        sunday = datetime(2026, 3, 29, 18, 30, tzinfo=timezone.utc)
        assert start_of_week(sunday) == datetime(2026, 3, 29, tzinfo=timezone.utc)

    def test_newest_first(self):
        periods = weekly_periods(NOW, 3, 30)

        assert [p.snapshot_at.day for p in periods] == [29, 22, 15]
        assert all(p.end - p.start == timedelta(days=30) for p in periods)

    def test_zero_weeks(self):
        assert weekly_periods(NOW, 0, 30) == []


class TestCurrentSnapshots:
    @pytest.mark.asyncio
    async def test_tarot_season(self, generator):
        snapshot = await generator.generate_tarot_season_snapshot("user-1")

        assert snapshot.season.suit == "Cups"
        assert snapshot.dominant_theme == "healing"
        assert snapshot.period_days == 30
        assert snapshot.timestamp == NOW

    @pytest.mark.asyncio
    async def test_life_themes_and_archetypes(self, generator):
        themes = await generator.generate_life_themes_snapshot("user-1")
        archetypes = await generator.generate_archetype_snapshot("user-1")

        assert themes is not None and themes.themes
        assert archetypes is not None and archetypes.archetypes

    @pytest.mark.asyncio
    async def test_unknown_user_has_nothing(self, generator):
        assert await generator.generate_tarot_season_snapshot("nobody") is None
        assert await generator.generate_life_themes_snapshot("nobody") is None
        assert await generator.generate_pattern_snapshots("nobody") == []

    @pytest.mark.asyncio
    async def test_pattern_snapshots_by_tier(self, generator):
        free = await generator.generate_pattern_snapshots("user-1", "free")
        premium = await generator.generate_pattern_snapshots("user-1", "premium")

        assert [p.type for p in free] == ["tarot_moon_phase"]
        assert sorted(p.type for p in premium) == ["tarot_moon_phase", "tarot_sun_sign"]

    @pytest.mark.asyncio
    async def test_pattern_snapshots_need_an_engine(self, history):
        events, _ = history
        generator = SnapshotGenerator(FakeActivitySource(events), clock=lambda: NOW)

        assert await generator.generate_pattern_snapshots("user-1") == []

    @pytest.mark.asyncio
    async def test_generate_all(self, generator):
        snapshots = await generator.generate_all("user-1", "premium")

        assert sorted(s.type for s in snapshots) == [
            "archetype",
            "life_themes",
            "tarot_moon_phase",
            "tarot_season",
            "tarot_sun_sign",
        ]

    @pytest.mark.asyncio
    async def test_source_failure(self):
        generator = SnapshotGenerator(FakeActivitySource(error=RuntimeError("down")), clock=lambda: NOW)

        with pytest.raises(SourceError):
            await generator.generate_tarot_season_snapshot("user-1")


class TestHistoricalSnapshots:
    """Weekly backfill over past activity."""

    @pytest.mark.asyncio
    async def test_one_fetch_sliced_per_week(self, history):
        events, _ = history
        source = FakeActivitySource(events)
        generator = SnapshotGenerator(source, clock=lambda: NOW)

        snapshots = await generator.generate_historical_snapshots("user-1", weeks_back=2)

        assert len(source.calls) == 2  # one per activity class
        assert len(snapshots) == 6
        stamps = sorted({s.timestamp for s in snapshots}, reverse=True)
        assert stamps == [
            datetime(2026, 3, 29, tzinfo=timezone.utc),
            datetime(2026, 3, 22, tzinfo=timezone.utc),
        ]

    @pytest.mark.asyncio
    async def test_weeks_without_activity_are_skipped(self, history):
        events, _ = history
        generator = SnapshotGenerator(FakeActivitySource(events), clock=lambda: NOW + timedelta(days=120))

        assert await generator.generate_historical_snapshots("user-1", weeks_back=4) == []
