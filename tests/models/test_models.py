"""Tests for activity, pattern and snapshot models."""

from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from cosmicpatterns.errors import InvalidSnapshotError
from cosmicpatterns.models.events import ActivityClass, CosmicContext, RawEvent
from cosmicpatterns.models.patterns import (
    AnalysisWindow,
    DetectionMeta,
    DetectionResult,
    EmotionSunSignPattern,
    Pattern,
    PatternTier,
    PatternType,
    TarotMoonPhasePattern,
    TarotSunSignPattern,
    pattern_model_for,
)
from cosmicpatterns.models.snapshots import (
    LifeThemeSnapshot,
    SnapshotType,
    parse_snapshot,
    snapshot_tier,
    snapshot_to_dict,
    visible_snapshot_types,
)
from tests.fixtures.builders import NOW, make_archetypes, make_life_themes, make_pattern


class TestRawEvent:
    def test_from_dict(self):
        event = RawEvent.from_dict(
            {
                "event_id": 42,
                "activity": "tarot",
                "created_at": "2026-03-01T09:30:00",
                "tags": ["healing"],
                "entities": ["The Star"],
            }
        )

        assert event.event_id == "42"
        assert event.activity is ActivityClass.TAROT
        assert event.category == "tarot"
        assert event.created_at.tzinfo == timezone.utc
        assert event.day == date(2026, 3, 1)
        assert event.entities == ("The Star",)
        assert event.content == ""

    def test_defaults_to_journal(self):
        event = RawEvent.from_dict({"event_id": "j", "created_at": "2026-03-01T09:30:00+02:00"})

        assert event.activity is ActivityClass.JOURNAL
        assert event.category == "journal"
        assert event.created_at.utcoffset() == timedelta(hours=2)

    def test_unknown_activity(self):
        with pytest.raises(ValueError):
            RawEvent.from_dict({"event_id": "x", "activity": "chess", "created_at": "2026-03-01"})


class TestCosmicContext:
    def test_from_dict(self):
        context = CosmicContext.from_dict(
            {
                "day": "2026-03-14",
                "moon": {"name": "Full Moon", "illumination": 0.99},
                "planets": {"Sun": {"sign": "Pisces", "degree": 23.4}},
                "aspects": [{"planet_a": "Sun", "planet_b": "Moon", "aspect_type": "opposition"}],
            }
        )

        assert context.day == date(2026, 3, 14)
        assert context.moon.name == "Full Moon"
        assert context.sign_of("Sun") == "Pisces"
        assert context.sign_of("Mars") is None
        assert context.aspects[0].aspect_type == "opposition"
        assert not context.is_empty()

    def test_empty_context(self):
        assert CosmicContext.from_dict({"day": "2026-03-14"}).is_empty()


class TestPatterns:
    def test_pattern_model_for(self):
        assert pattern_model_for("tarot_sun_sign") is TarotSunSignPattern
        assert pattern_model_for("emotion_sun_sign") is EmotionSunSignPattern
        assert pattern_model_for(PatternType.TAROT_MOON_PHASE) is TarotMoonPhasePattern
        assert pattern_model_for("unknown") is Pattern

    def test_patterns_are_frozen(self):
        pattern = make_pattern()

        with pytest.raises(ValidationError):
            pattern.confidence = 0.1

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            Pattern(type="x", title="t", description="d", confidence=1.5, generated_at=NOW)

    def test_occurrences_and_timestamp(self):
        pattern = make_pattern()

        assert pattern.occurrences == 6
        assert pattern.timestamp == NOW

    def test_detection_result_to_dict(self):
        window = AnalysisWindow(start=NOW - timedelta(days=90), end=NOW, days_back=90)
        meta = DetectionMeta(
            total_patterns=1,
            analysis_window=window,
            events_analyzed={"tarot": 10, "journal": 0},
            by_category={"tarot": 1},
            by_type={"tarot_moon_phase": 1},
            user_tier=PatternTier.PREMIUM,
        )

        data = DetectionResult(patterns=[make_pattern()], meta=meta).to_dict()

        assert data["meta"]["user_tier"] == "premium"
        assert data["meta"]["analysis_window"]["days_back"] == 90
        assert data["patterns"][0]["type"] == "tarot_moon_phase"
        assert data["patterns"][0]["data"]["category_value"] == "Full Moon"


class TestSnapshots:
    def test_parse_round_trip(self):
        for snapshot in (make_life_themes(), make_archetypes(), make_pattern()):
            assert parse_snapshot(snapshot_to_dict(snapshot)) == snapshot

    def test_parse_picks_variant_by_type(self):
        parsed = parse_snapshot(snapshot_to_dict(make_life_themes()))
        assert isinstance(parsed, LifeThemeSnapshot)

    @pytest.mark.parametrize(
        "payload",
        [
            {"type": "horoscope"},
            {"type": "life_themes", "themes": "not a list"},
            {"no_type": True},
        ],
    )
    def test_invalid_payload(self, payload):
        with pytest.raises(InvalidSnapshotError):
            parse_snapshot(payload)

    def test_tiers(self):
        assert snapshot_tier("archetype") is PatternTier.PREMIUM
        assert snapshot_tier(SnapshotType.LIFE_THEMES) is PatternTier.FREE

    def test_visible_types(self):
        assert set(visible_snapshot_types("free")) == {"tarot_moon_phase", "life_themes", "tarot_season"}
        assert len(visible_snapshot_types(PatternTier.PREMIUM)) == 7
        assert len(visible_snapshot_types(None)) == 7

    def test_naive_timestamps_are_accepted(self):
        data = snapshot_to_dict(make_life_themes())
        data["timestamp"] = datetime(2026, 3, 1).isoformat()

        assert parse_snapshot(data).timestamp == datetime(2026, 3, 1)
