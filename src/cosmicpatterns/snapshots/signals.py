"""Activity signals scored against theme and archetype trigger sets."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from cosmicpatterns.models.events import ActivityClass, RawEvent
from cosmicpatterns.tarot import is_major_arcana, suit_of

KEYWORD_WEIGHT = 2.0
MOOD_TAG_WEIGHT = 2.0
DREAM_MOTIF_WEIGHT = 2.0
MAJOR_ARCANA_WEIGHT = 2.0
SUIT_CARD_WEIGHT = 0.5

# raw score at which a catalog entry reaches 0.5
SATURATION = 10.0


@dataclass(frozen=True)
class TriggerSet:
    tarot_suits: Tuple[str, ...] = ()
    tarot_majors: Tuple[str, ...] = ()
    journal_keywords: Tuple[str, ...] = ()
    mood_tags: Tuple[str, ...] = ()
    dream_motifs: Tuple[str, ...] = ()


@dataclass
class ActivitySignals:
    """Flattened view of a period's activity.

    Journal and ritual entries contribute text and mood tags, dream entries
    contribute dream tags, tarot draws contribute cards.
    """

    journal_texts: List[str] = field(default_factory=list)
    mood_tags: List[str] = field(default_factory=list)
    dream_tags: List[str] = field(default_factory=list)
    tarot_cards: List[str] = field(default_factory=list)
    readings: int = 0

    @classmethod
    def from_events(cls, events: Iterable[RawEvent]) -> "ActivitySignals":
        signals = cls()
        for event in events:
            if event.activity is ActivityClass.TAROT:
                signals.readings += 1
                signals.tarot_cards.extend(event.entities)
            elif event.category == "dream":
                signals.dream_tags.extend(tag.lower() for tag in event.tags)
            else:
                signals.journal_texts.append(event.content)
                signals.mood_tags.extend(tag.lower() for tag in event.tags)
                signals.mood_tags.extend(emotion.lower() for emotion in event.emotions)
        return signals

    @property
    def journal_entries(self) -> int:
        return len(self.journal_texts)

    @property
    def tarot_majors(self) -> List[str]:
        return [card for card in self.tarot_cards if is_major_arcana(card)]

    def suit_counts(self) -> Counter:
        return Counter(suit_of(card) for card in self.tarot_cards)

    def is_empty(self) -> bool:
        return not (self.journal_texts or self.dream_tags or self.tarot_cards)


@dataclass(frozen=True)
class TriggerScore:
    raw: float
    matched: Tuple[str, ...]

    @property
    def normalized(self) -> float:
        return round(self.raw / (self.raw + SATURATION), 3) if self.raw > 0 else 0.0


def _mentions(text: str, keyword: str) -> bool:
    return re.search(rf"\b{re.escape(keyword)}", text, re.IGNORECASE) is not None


def score_triggers(triggers: TriggerSet, signals: ActivitySignals) -> TriggerScore:
    """Weighted count of trigger hits in ``signals``."""
    raw = 0.0
    matched: List[str] = []

    for keyword in triggers.journal_keywords:
        hits = sum(1 for text in signals.journal_texts if text and _mentions(text, keyword))
        if hits:
            raw += hits * KEYWORD_WEIGHT
            matched.append(keyword)

    mood_counts = Counter(signals.mood_tags)
    for tag in triggers.mood_tags:
        if mood_counts[tag]:
            raw += mood_counts[tag] * MOOD_TAG_WEIGHT
            matched.append(tag)

    for motif in triggers.dream_motifs:
        hits = sum(1 for tag in signals.dream_tags if motif in tag)
        if hits:
            raw += hits * DREAM_MOTIF_WEIGHT
            matched.append(motif)

    card_counts = Counter(signals.tarot_cards)
    for card in triggers.tarot_majors:
        if card_counts[card]:
            raw += card_counts[card] * MAJOR_ARCANA_WEIGHT
            matched.append(card)

    suits = signals.suit_counts()
    for suit in triggers.tarot_suits:
        if suits[suit]:
            raw += suits[suit] * SUIT_CARD_WEIGHT
            matched.append(suit)

    return TriggerScore(raw=raw, matched=tuple(matched))


__all__ = ["ActivitySignals", "TriggerScore", "TriggerSet", "score_triggers"]
