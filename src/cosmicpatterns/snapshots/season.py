"""Tarot season: which suit has dominated recent readings."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional

from cosmicpatterns.models.events import ActivityClass, RawEvent
from cosmicpatterns.models.patterns import EntityCount
from cosmicpatterns.models.snapshots import SuitShare, TarotSeason, TarotSeasonSnapshot
from cosmicpatterns.tarot import infer_theme_from_keyword, season_for_suit, suit_of

logger = logging.getLogger(__name__)

MIN_READINGS = 3
FREQUENT_CARDS = 5
DEFAULT_THEME = "transformation"


def suit_distribution(cards: Iterable[str]) -> List[SuitShare]:
    """Suit shares as percentages, most drawn first."""
    counts = Counter(suit_of(card) for card in cards)
    total = sum(counts.values())
    if total == 0:
        return []
    return [
        SuitShare(suit=suit, count=count, percentage=round(count / total * 100, 2))
        for suit, count in counts.most_common()
    ]


def build_tarot_season_snapshot(
    events: Iterable[RawEvent], period_days: int, timestamp: datetime
) -> Optional[TarotSeasonSnapshot]:
    """Season snapshot from a period's readings, None under three readings."""
    readings = [event for event in events if event.activity is ActivityClass.TAROT]
    if len(readings) < MIN_READINGS:
        logger.debug(f"Only {len(readings)} readings, no tarot season")
        return None

    cards = [card for reading in readings for card in reading.entities if card]
    distribution = suit_distribution(cards)
    if not distribution:
        return None

    top = distribution[0]
    name, description = season_for_suit(top.suit)

    themes = Counter(
        theme
        for reading in readings
        for keyword in reading.tags
        if (theme := infer_theme_from_keyword(keyword))
    )
    dominant_theme = themes.most_common(1)[0][0] if themes else DEFAULT_THEME

    return TarotSeasonSnapshot(
        season=TarotSeason(name=name, suit=top.suit, description=description),
        dominant_theme=dominant_theme,
        suit_distribution=distribution,
        frequent_cards=[
            EntityCount(name=card, count=count)
            for card, count in Counter(cards).most_common(FREQUENT_CARDS)
        ],
        period_days=period_days,
        timestamp=timestamp,
    )


__all__ = ["build_tarot_season_snapshot", "suit_distribution"]
