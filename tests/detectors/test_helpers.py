"""Tests for shared detector helpers."""

from datetime import timedelta

import pytest

from cosmicpatterns.detectors.helpers import (
    count_top_entities,
    create_pattern,
    create_time_window,
    filter_by_threshold,
    has_sufficient_data,
    sort_by_confidence,
    take_top,
    validate_cosmic_data,
)
from cosmicpatterns.models.events import CosmicContext, EnrichedEvent, MoonPhase
from cosmicpatterns.models.patterns import (
    InsufficientDataPattern,
    InsufficientDataPayload,
    PatternTier,
    PatternType,
    TarotMoonPhasePattern,
)
from tests.fixtures.builders import NOW, make_context, make_cooccurrence, make_event, make_pattern


def _enriched(days_ago, moon="Full Moon"):
    event = make_event(f"e{days_ago}", NOW - timedelta(days=days_ago))
    return EnrichedEvent(event=event, context=make_context(event.day, moon=moon))


class TestGuards:
    def test_has_sufficient_data(self):
        assert has_sufficient_data([1, 2, 3], 3)
        assert not has_sufficient_data([1, 2], 3)

    def test_validate_cosmic_data_rejects_empty_context(self):
        good = _enriched(1)
        bad_event = make_event("bad", NOW)
        bad = EnrichedEvent(event=bad_event, context=CosmicContext(day=bad_event.day, moon=MoonPhase(name="")))

        assert validate_cosmic_data([good])
        assert not validate_cosmic_data([good, bad])


class TestTimeWindow:
    def test_spans_first_to_last_event(self):
        window = create_time_window([_enriched(10), _enriched(3), _enriched(7)])

        assert window.start_date == NOW - timedelta(days=10)
        assert window.end_date == NOW - timedelta(days=3)
        assert window.days_analyzed == 7

    def test_single_event_counts_one_day(self):
        assert create_time_window([_enriched(2)]).days_analyzed == 1

    def test_empty_window_at_now(self):
        window = create_time_window([], now=NOW)

        assert window.start_date == window.end_date == NOW
        assert window.days_analyzed == 0


class TestResultShaping:
    """Threshold filtering, stable sorting and truncation."""

    def test_filter_by_threshold(self):
        strong = make_pattern(confidence=0.8)
        weak = make_pattern(confidence=0.5)

        assert filter_by_threshold([strong, weak], 3, 0.6) == [strong]
        assert filter_by_threshold([strong], 7, 0.6) == []

    def test_sort_is_descending_and_stable(self):
        first = make_pattern(confidence=0.7, category_value="Full Moon")
        second = make_pattern(confidence=0.9, category_value="New Moon")
        third = make_pattern(confidence=0.7, category_value="Last Quarter")

        ordered = sort_by_confidence([first, second, third])

        assert ordered == [second, first, third]

    def test_take_top(self):
        patterns = [make_pattern(confidence=c) for c in (0.6, 0.9, 0.75)]

        assert [p.confidence for p in take_top(patterns, 2)] == [0.9, 0.75]
        assert take_top(patterns, -1) == []


class TestCountTopEntities:
    def test_drops_singletons_and_truncates(self):
        values = ["The Star"] * 3 + ["The Moon"] * 2 + ["Death"] + ["The Sun"] * 2 + ["Strength"] * 2

        top = count_top_entities(values, limit=3)

        assert [(e.name, e.count) for e in top] == [
            ("The Star", 3),
            ("The Moon", 2),
            ("The Sun", 2),
        ]

    def test_ignores_empty_values(self):
        assert count_top_entities(["", "", ""]) == []


class TestCreatePattern:
    def test_builds_typed_pattern_with_text(self):
        pattern = create_pattern(
            make_cooccurrence(), 0.71234, PatternType.TAROT_MOON_PHASE, now=NOW
        )

        assert isinstance(pattern, TarotMoonPhasePattern)
        assert pattern.confidence == pytest.approx(0.7123)
        assert pattern.title == "Your readings gather around the Full Moon"
        assert "6 of your 10 tarot draws" in pattern.description
        assert "4.8x" in pattern.description
        assert pattern.generated_at == NOW
        assert pattern.tier is PatternTier.FREE

    def test_patterns_are_immutable(self):
        pattern = make_pattern()

        with pytest.raises(Exception):
            pattern.confidence = 0.1

    def test_insufficient_data_description_lists_progress(self):
        pattern = create_pattern(
            InsufficientDataPayload(current={"tarot": 2}, required={"tarot": 5}),
            0.0,
            PatternType.INSUFFICIENT_DATA,
            now=NOW,
        )

        assert isinstance(pattern, InsufficientDataPattern)
        assert "2/5 tarot" in pattern.description
