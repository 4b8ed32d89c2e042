"""Life theme catalog and analysis."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from cosmicpatterns.models.snapshots import LifeThemeEntry, LifeThemeSnapshot, ThemeSources
from cosmicpatterns.snapshots.signals import ActivitySignals, TriggerSet, score_triggers

logger = logging.getLogger(__name__)

MIN_JOURNAL_ENTRIES = 2
MIN_TAROT_READINGS = 3
MIN_DREAM_TAGS = 3


@dataclass(frozen=True)
class LifeTheme:
    id: str
    name: str
    short_summary: str
    triggers: TriggerSet


LIFE_THEMES: Tuple[LifeTheme, ...] = (
    LifeTheme(
        id="healing",
        name="Healing & Restoration",
        short_summary="A period of emotional mending and rebuilding inner strength.",
        triggers=TriggerSet(
            tarot_suits=("Cups",),
            tarot_majors=("The Star", "Temperance", "The Empress"),
            journal_keywords=(
                "healing", "recovery", "letting go", "peace", "rest", "self-care",
                "gentle", "mending",
            ),
            mood_tags=("peaceful", "hopeful", "tender", "vulnerable"),
        ),
    ),
    LifeTheme(
        id="transformation",
        name="Deep Transformation",
        short_summary="Fundamental shifts are reshaping how you see yourself and your path.",
        triggers=TriggerSet(
            tarot_suits=("Swords",),
            tarot_majors=("Death", "The Tower", "Judgement", "The Hanged Man", "The World"),
            journal_keywords=(
                "change", "transformation", "different", "evolving", "shifting",
                "becoming", "new", "letting go",
            ),
            mood_tags=("intense", "uncertain", "powerful", "raw"),
        ),
    ),
    LifeTheme(
        id="seeking",
        name="Quest for Meaning",
        short_summary="An inner explorer emerges, drawn toward deeper understanding.",
        triggers=TriggerSet(
            tarot_suits=("Wands",),
            tarot_majors=("The Hermit", "The Fool", "The High Priestess", "The Moon"),
            journal_keywords=(
                "wondering", "seeking", "purpose", "meaning", "why", "learning",
                "curious", "exploring",
            ),
            mood_tags=("curious", "seeking", "open", "questioning"),
        ),
    ),
    LifeTheme(
        id="creation",
        name="Creative Emergence",
        short_summary="Creative energy is rising, ready to be channeled into expression.",
        triggers=TriggerSet(
            tarot_suits=("Wands",),
            tarot_majors=("The Empress", "The Magician", "The Sun", "The Star"),
            journal_keywords=(
                "create", "making", "idea", "inspiration", "project", "building",
                "art", "express",
            ),
            mood_tags=("inspired", "creative", "energized", "playful"),
        ),
    ),
    LifeTheme(
        id="grounding",
        name="Building Foundations",
        short_summary="A call to establish stability and strengthen your roots.",
        triggers=TriggerSet(
            tarot_suits=("Pentacles",),
            tarot_majors=("The Emperor", "The Hierophant", "The World"),
            journal_keywords=(
                "stable", "routine", "home", "work", "money", "health", "practical",
                "building",
            ),
            mood_tags=("grounded", "stable", "focused", "determined"),
        ),
    ),
    LifeTheme(
        id="connection",
        name="Deepening Connection",
        short_summary="Relationships and emotional bonds are taking center stage.",
        triggers=TriggerSet(
            tarot_suits=("Cups",),
            tarot_majors=("The Lovers", "The Empress", "Two of Cups", "The Sun"),
            journal_keywords=(
                "relationship", "love", "friend", "partner", "family", "connection",
                "together", "heart",
            ),
            mood_tags=("loving", "connected", "open", "grateful"),
        ),
    ),
    LifeTheme(
        id="empowerment",
        name="Reclaiming Power",
        short_summary="A journey toward personal authority and confident action.",
        triggers=TriggerSet(
            tarot_suits=("Wands", "Swords"),
            tarot_majors=("Strength", "The Chariot", "The Emperor", "The Magician", "Justice"),
            journal_keywords=(
                "power", "strength", "confident", "boundary", "standing up", "voice",
                "action", "courage",
            ),
            mood_tags=("powerful", "confident", "determined", "fierce"),
        ),
    ),
    LifeTheme(
        id="integration",
        name="Integration & Synthesis",
        short_summary="Bringing together disparate parts into a cohesive whole.",
        triggers=TriggerSet(
            tarot_suits=("Pentacles", "Cups"),
            tarot_majors=("The World", "Judgement", "Temperance", "The Hermit"),
            journal_keywords=(
                "learning", "understanding", "making sense", "connecting", "realizing",
                "pattern", "whole",
            ),
            mood_tags=("reflective", "contemplative", "peaceful", "wise"),
        ),
    ),
)


def has_enough_data_for_themes(signals: ActivitySignals) -> bool:
    return (
        signals.journal_entries >= MIN_JOURNAL_ENTRIES
        or signals.readings >= MIN_TAROT_READINGS
        or len(signals.dream_tags) >= MIN_DREAM_TAGS
    )


def analyze_life_themes(signals: ActivitySignals, limit: int = 3) -> List[LifeThemeEntry]:
    """Top ``limit`` themes with a positive score, strongest first."""
    sources = ThemeSources(
        journal_entries=signals.journal_entries,
        tarot_cards=[name for name, _ in Counter(signals.tarot_cards).most_common(5)],
        dream_tags=list(dict.fromkeys(signals.dream_tags))[:10],
    )
    scored = [(theme, score_triggers(theme.triggers, signals)) for theme in LIFE_THEMES]
    ranked = sorted(
        (item for item in scored if item[1].raw > 0),
        key=lambda item: item[1].raw,
        reverse=True,
    )
    return [
        LifeThemeEntry(
            id=theme.id,
            name=theme.name,
            score=score.normalized,
            short_summary=theme.short_summary,
            sources=sources,
        )
        for theme, score in ranked[:limit]
    ]


def build_life_themes_snapshot(
    signals: ActivitySignals, timestamp: datetime, limit: int = 3
) -> Optional[LifeThemeSnapshot]:
    if not has_enough_data_for_themes(signals):
        logger.debug("Not enough activity for life themes")
        return None
    themes = analyze_life_themes(signals, limit=limit)
    if not themes:
        return None
    return LifeThemeSnapshot(themes=themes, dominant_theme=themes[0].name, timestamp=timestamp)


__all__ = [
    "LIFE_THEMES",
    "LifeTheme",
    "analyze_life_themes",
    "build_life_themes_snapshot",
    "has_enough_data_for_themes",
]
