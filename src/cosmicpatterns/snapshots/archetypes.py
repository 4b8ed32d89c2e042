"""Archetype catalog and detection.

Archetypes are scored from tarot majors and suits, journal keywords and
mood tags, and dream motifs. Strength saturates towards 1.0 as evidence
accumulates; only archetypes with some evidence are reported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from cosmicpatterns.models.snapshots import ArchetypeEntry, ArchetypeSnapshot
from cosmicpatterns.snapshots.signals import ActivitySignals, TriggerSet, score_triggers

logger = logging.getLogger(__name__)

MIN_JOURNAL_ENTRIES = 2
MIN_TAROT_READINGS = 3
MAX_BASED_ON = 10


@dataclass(frozen=True)
class Archetype:
    id: str
    name: str
    summary: str
    triggers: TriggerSet


ARCHETYPES: Tuple[Archetype, ...] = (
    Archetype(
        id="restorer",
        name="The Restorer",
        summary="A healing phase, rebuilding emotional foundations and resilience.",
        triggers=TriggerSet(
            tarot_suits=("Cups",),
            tarot_majors=("The Star", "Temperance", "The Empress", "The High Priestess"),
            journal_keywords=(
                "healing", "recovery", "restoration", "mending", "peace", "rest",
                "gentle", "care", "wounded", "rebuilding",
            ),
            dream_motifs=("water", "gardens", "hospitals", "medicine", "nurturing"),
            mood_tags=("healing", "peaceful", "tender", "recovering", "hopeful"),
        ),
    ),
    Archetype(
        id="seeker",
        name="The Seeker",
        summary="An inner explorer drawn toward deeper understanding and meaning.",
        triggers=TriggerSet(
            tarot_suits=("Wands",),
            tarot_majors=(
                "The Hermit", "The Fool", "The High Priestess", "The Moon",
                "Wheel of Fortune",
            ),
            journal_keywords=(
                "seeking", "wondering", "curious", "meaning", "purpose", "why",
                "exploring", "questioning", "truth",
            ),
            dream_motifs=("journeys", "roads", "doors", "libraries", "teachers", "mountains"),
            mood_tags=("curious", "seeking", "questioning", "open", "wondering"),
        ),
    ),
    Archetype(
        id="catalyst",
        name="The Catalyst",
        summary="Transformation energy is active; an agent of change.",
        triggers=TriggerSet(
            tarot_suits=("Swords",),
            tarot_majors=("Death", "The Tower", "Judgement", "The Hanged Man"),
            journal_keywords=(
                "transformation", "change", "shift", "different", "breaking", "ending",
                "becoming", "evolving",
            ),
            dream_motifs=("fire", "destruction", "renovation", "metamorphosis", "volcanoes"),
            mood_tags=("intense", "transforming", "raw", "powerful", "changing"),
        ),
    ),
    Archetype(
        id="grounded-one",
        name="The Grounded One",
        summary="Stability and practical wisdom, building foundations for growth.",
        triggers=TriggerSet(
            tarot_suits=("Pentacles",),
            tarot_majors=("The Emperor", "The Hierophant", "The World", "Four of Pentacles"),
            journal_keywords=(
                "stable", "grounded", "practical", "routine", "building", "foundation",
                "work", "home", "body",
            ),
            dream_motifs=("houses", "earth", "trees", "anchors", "roots"),
            mood_tags=("grounded", "stable", "focused", "practical", "determined"),
        ),
    ),
    Archetype(
        id="empath",
        name="The Empath",
        summary="Heightened emotional sensitivity, tuned into subtle energies.",
        triggers=TriggerSet(
            tarot_suits=("Cups",),
            tarot_majors=("The High Priestess", "The Moon", "The Empress", "Queen of Cups"),
            journal_keywords=(
                "feeling", "sensing", "intuition", "overwhelm", "absorbing", "sensitive",
                "emotional", "empathy",
            ),
            dream_motifs=("water", "oceans", "merging", "boundaries dissolving", "crowds"),
            mood_tags=("sensitive", "emotional", "overwhelmed", "intuitive", "absorbing"),
        ),
    ),
    Archetype(
        id="shadow-dancer",
        name="The Shadow Dancer",
        summary="Called to face hidden truths and integrate rejected parts of the self.",
        triggers=TriggerSet(
            tarot_suits=("Swords",),
            tarot_majors=("The Devil", "The Moon", "Death", "The Tower", "The Hanged Man"),
            journal_keywords=(
                "shadow", "hidden", "dark", "rejected", "secret", "shame", "facing",
                "integrating", "truth",
            ),
            dream_motifs=("darkness", "monsters", "underground", "mirrors", "confrontation"),
            mood_tags=("confronting", "raw", "honest", "deep", "uncomfortable"),
        ),
    ),
    Archetype(
        id="visionary",
        name="The Visionary",
        summary="Creative vision is activated; glimpsing possibilities not yet real.",
        triggers=TriggerSet(
            tarot_suits=("Wands",),
            tarot_majors=("The Star", "The Sun", "The Magician", "Ace of Wands"),
            journal_keywords=(
                "vision", "future", "imagine", "create", "possibility", "dream", "idea",
                "inspiration",
            ),
            dream_motifs=("flying", "light", "expansive spaces", "creation", "stars"),
            mood_tags=("inspired", "creative", "visionary", "hopeful", "imaginative"),
        ),
    ),
    Archetype(
        id="mystic",
        name="The Mystic",
        summary="Inner knowing and spiritual intuition are awakening.",
        triggers=TriggerSet(
            tarot_suits=("Cups",),
            tarot_majors=("The High Priestess", "The Hermit", "The Star", "The Moon"),
            journal_keywords=(
                "spiritual", "knowing", "intuition", "sacred", "divine", "meditation",
                "presence", "stillness",
            ),
            dream_motifs=("temples", "light", "guides", "symbols", "ascension"),
            mood_tags=("spiritual", "connected", "peaceful", "intuitive", "mystical"),
        ),
    ),
    Archetype(
        id="protector",
        name="The Protector",
        summary="Guardian energy; establishing boundaries and protecting what matters.",
        triggers=TriggerSet(
            tarot_suits=("Swords", "Wands"),
            tarot_majors=("Strength", "The Chariot", "Justice", "King of Swords"),
            journal_keywords=(
                "boundary", "protect", "guard", "safe", "defend", "loyal", "strength",
                "fierce",
            ),
            dream_motifs=("walls", "shields", "guardians", "fortresses", "warriors"),
            mood_tags=("protective", "fierce", "vigilant", "strong", "guarding"),
        ),
    ),
    Archetype(
        id="heart-opener",
        name="The Heart Opener",
        summary="Love and connection are calling; deeper intimacy and relational healing.",
        triggers=TriggerSet(
            tarot_suits=("Cups",),
            tarot_majors=("The Lovers", "The Empress", "Two of Cups", "The Sun", "Ace of Cups"),
            journal_keywords=(
                "love", "heart", "connection", "relationship", "intimacy", "vulnerability",
                "open", "together",
            ),
            dream_motifs=("hearts", "embraces", "reunions", "weddings", "roses"),
            mood_tags=("loving", "open", "connected", "tender", "vulnerable"),
        ),
    ),
    Archetype(
        id="lunar-weaver",
        name="The Lunar Weaver",
        summary="Attuned to natural rhythms and cycles, in step with cosmic timing.",
        triggers=TriggerSet(
            tarot_suits=("Cups",),
            tarot_majors=("The Moon", "The High Priestess", "Wheel of Fortune", "The Star"),
            journal_keywords=(
                "cycle", "rhythm", "timing", "moon", "flow", "phase", "season", "patience",
            ),
            dream_motifs=("moon", "tides", "seasons", "spirals", "circles"),
            mood_tags=("cyclical", "flowing", "patient", "attuned", "rhythmic"),
        ),
    ),
    Archetype(
        id="alchemist",
        name="The Alchemist",
        summary="Transmuting experience into wisdom.",
        triggers=TriggerSet(
            tarot_suits=("Pentacles", "Cups"),
            tarot_majors=("The World", "Judgement", "Temperance", "The Magician"),
            journal_keywords=(
                "meaning", "learning", "integration", "wisdom", "understanding", "pattern",
                "growth", "transmute",
            ),
            dream_motifs=("laboratories", "gold", "transformation", "synthesis", "completion"),
            mood_tags=("integrating", "wise", "understanding", "complete", "synthesizing"),
        ),
    ),
)


def has_enough_data_for_archetypes(signals: ActivitySignals) -> bool:
    return (
        signals.journal_entries >= MIN_JOURNAL_ENTRIES
        or signals.readings >= MIN_TAROT_READINGS
    )


def detect_archetypes(signals: ActivitySignals, limit: int = 3) -> List[ArchetypeEntry]:
    """Top ``limit`` archetypes by evidence, strongest first."""
    scored = [(archetype, score_triggers(archetype.triggers, signals)) for archetype in ARCHETYPES]
    ranked = sorted(
        (item for item in scored if item[1].raw > 0),
        key=lambda item: item[1].raw,
        reverse=True,
    )
    return [
        ArchetypeEntry(
            name=archetype.name,
            strength=score.normalized,
            based_on=list(score.matched[:MAX_BASED_ON]),
        )
        for archetype, score in ranked[:limit]
    ]


def build_archetype_snapshot(
    signals: ActivitySignals, timestamp: datetime, limit: int = 3
) -> Optional[ArchetypeSnapshot]:
    if not has_enough_data_for_archetypes(signals):
        logger.debug("Not enough activity for archetypes")
        return None
    archetypes = detect_archetypes(signals, limit=limit)
    if not archetypes:
        return None
    return ArchetypeSnapshot(
        archetypes=archetypes,
        dominant_archetype=archetypes[0].name,
        timestamp=timestamp,
    )


__all__ = [
    "ARCHETYPES",
    "Archetype",
    "build_archetype_snapshot",
    "detect_archetypes",
    "has_enough_data_for_archetypes",
]
