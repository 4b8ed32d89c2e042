"""Builders for activity, cosmic context and snapshot test data."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Sequence, Tuple

from cosmicpatterns.models.events import (
    ActivityClass,
    CosmicContext,
    EnrichedEvent,
    MoonPhase,
    PlanetPosition,
    RawEvent,
)
from cosmicpatterns.models.patterns import (
    CooccurrenceData,
    Pattern,
    PatternTier,
    PatternType,
    TimeWindow,
)
from cosmicpatterns.models.snapshots import (
    ArchetypeEntry,
    ArchetypeSnapshot,
    LifeThemeEntry,
    LifeThemeSnapshot,
    SuitShare,
    TarotSeason,
    TarotSeasonSnapshot,
)
from cosmicpatterns.detectors.helpers import create_pattern

NOW = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)

FULL_MOON_DRAWS = 6
OTHER_PHASES = ("New Moon", "First Quarter", "Waning Gibbous", "Last Quarter")


def make_context(day: date, moon: str = "Full Moon", sun: str = "Aries") -> CosmicContext:
    return CosmicContext(
        day=day,
        moon=MoonPhase(name=moon, illumination=1.0 if moon == "Full Moon" else 0.5),
        planets={"Sun": PlanetPosition(sign=sun, degree=12.0)},
    )


def make_event(
    event_id: str,
    created_at: datetime,
    activity: ActivityClass = ActivityClass.TAROT,
    **fields,
) -> RawEvent:
    if activity is ActivityClass.TAROT:
        fields.setdefault("category", "tarot")
    return RawEvent(event_id=event_id, activity=activity, created_at=created_at, **fields)


def enrich(events: Sequence[RawEvent], contexts: Dict[date, CosmicContext]) -> List[EnrichedEvent]:
    return [EnrichedEvent(event=event, context=contexts[event.day]) for event in events]


def tarot_moon_history(
    now: datetime = NOW,
) -> Tuple[List[RawEvent], Dict[date, CosmicContext]]:
    """Ten Cups draws over 18 days, six of them under the Full Moon, all in Aries."""
    phases = ["Full Moon"] * FULL_MOON_DRAWS + list(OTHER_PHASES)
    events: List[RawEvent] = []
    contexts: Dict[date, CosmicContext] = {}
    for index, phase in enumerate(phases):
        created_at = now - timedelta(days=2 + index * 2)
        card = "Three of Cups" if phase == "Full Moon" else "Ace of Cups"
        events.append(
            make_event(f"tarot-{index}", created_at, entities=(card,), tags=("healing",))
        )
        contexts[created_at.date()] = make_context(created_at.date(), moon=phase)
    return events, contexts


def journal_emotion_history(
    now: datetime = NOW,
) -> Tuple[List[RawEvent], Dict[date, CosmicContext]]:
    """Eight entries on odd days over 14 days: anxious under the Full Moon, grateful under the New Moon."""
    events: List[RawEvent] = []
    contexts: Dict[date, CosmicContext] = {}
    for index in range(8):
        created_at = now - timedelta(days=1 + index * 2)
        if index % 2 == 0:
            moon, content, tags = "Full Moon", "Feeling anxious about work again", ("work",)
        else:
            moon, content, tags = "New Moon", "So grateful for a quiet evening", ("home",)
        events.append(
            make_event(
                f"journal-{index}",
                created_at,
                activity=ActivityClass.JOURNAL,
                content=content,
                tags=tags,
            )
        )
        contexts[created_at.date()] = make_context(created_at.date(), moon=moon)
    return events, contexts


def make_cooccurrence(
    category_value: str = "Full Moon",
    occurrences: int = 6,
    total_events: int = 10,
    subject: str | None = None,
    now: datetime = NOW,
) -> CooccurrenceData:
    return CooccurrenceData(
        category="moon_phase",
        category_value=category_value,
        subject=subject,
        occurrences=occurrences,
        total_events=total_events,
        expected_frequency=0.125,
        frequency_ratio=occurrences / total_events / 0.125,
        percentage_deviation=(occurrences / total_events - 0.125) / 0.125 * 100,
        time_window=TimeWindow(start_date=now - timedelta(days=30), end_date=now, days_analyzed=30),
    )


def make_pattern(
    confidence: float = 0.7,
    pattern_type: PatternType = PatternType.TAROT_MOON_PHASE,
    tier: PatternTier = PatternTier.FREE,
    category_value: str = "Full Moon",
    subject: str | None = None,
) -> Pattern:
    return create_pattern(
        make_cooccurrence(category_value=category_value, subject=subject),
        confidence,
        pattern_type,
        tier=tier,
        now=NOW,
    )


def make_life_themes(score: float = 0.4, theme: str = "Healing & Restoration") -> LifeThemeSnapshot:
    return LifeThemeSnapshot(
        themes=[LifeThemeEntry(id="healing", name=theme, score=score)],
        dominant_theme=theme,
        timestamp=NOW,
    )


def make_tarot_season(percentage: float = 40.0, suit: str = "Cups") -> TarotSeasonSnapshot:
    return TarotSeasonSnapshot(
        season=TarotSeason(name="Emotional Depth", suit=suit, description="feelings"),
        dominant_theme="healing",
        suit_distribution=[SuitShare(suit=suit, count=4, percentage=percentage)],
        period_days=30,
        timestamp=NOW,
    )


def make_archetypes(strength: float = 0.4, name: str = "The Restorer") -> ArchetypeSnapshot:
    return ArchetypeSnapshot(
        archetypes=[ArchetypeEntry(name=name, strength=strength, based_on=["healing"])],
        dominant_archetype=name,
        timestamp=NOW,
    )
