"""Decide whether a new snapshot differs enough from the last stored one.

Pure functions only; the snapshot store calls ``has_pattern_changed`` before
every write and skips the write when nothing meaningful moved.

Comparators per snapshot type:
- life_themes: dominant theme changed or its score moved > threshold (0-1 scale)
- tarot_season: dominant suit changed or its share moved > threshold * 100
  (percentages are stored on a 0-100 scale)
- archetype: dominant archetype changed or its strength moved > threshold
- co-occurrence patterns: bucket or subject changed, or confidence moved > threshold
- any other pattern: confidence moved > threshold
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from cosmicpatterns.models.patterns import Pattern
from cosmicpatterns.models.snapshots import (
    ArchetypeSnapshot,
    LifeThemeSnapshot,
    SnapshotType,
    TarotSeasonSnapshot,
)

DEFAULT_THRESHOLD = 0.2

Comparator = Callable[[Any, Any, float], bool]


def has_pattern_changed(
    previous: Optional[Any], current: Any, threshold: float = DEFAULT_THRESHOLD
) -> bool:
    """True when ``current`` should be persisted after ``previous``.

    Example:
        >>> has_pattern_changed(None, snapshot)
        True
        >>> has_pattern_changed(snapshot, snapshot)
        False
    """
    if previous is None:
        return True
    if previous.type != current.type:
        return True

    comparator = COMPARATORS.get(current.type, _pattern_changed)
    return comparator(previous, current, threshold)


def _life_themes_changed(
    previous: LifeThemeSnapshot, current: LifeThemeSnapshot, threshold: float
) -> bool:
    if previous.dominant_theme != current.dominant_theme:
        return True
    before, after = previous.dominant_entry(), current.dominant_entry()
    before_score = before.score if before else 0.0
    after_score = after.score if after else 0.0
    return abs(after_score - before_score) > threshold


def _tarot_season_changed(
    previous: TarotSeasonSnapshot, current: TarotSeasonSnapshot, threshold: float
) -> bool:
    if previous.season.suit != current.season.suit:
        return True
    suit = current.season.suit
    return abs(current.share_of(suit) - previous.share_of(suit)) > threshold * 100


def _archetype_changed(
    previous: ArchetypeSnapshot, current: ArchetypeSnapshot, threshold: float
) -> bool:
    if previous.dominant_archetype != current.dominant_archetype:
        return True
    name = current.dominant_archetype
    return abs(current.strength_of(name) - previous.strength_of(name)) > threshold


def _cooccurrence_changed(previous: Pattern, current: Pattern, threshold: float) -> bool:
    if _payload(previous, "category_value") != _payload(current, "category_value"):
        return True
    if _payload(previous, "subject") != _payload(current, "subject"):
        return True
    return _pattern_changed(previous, current, threshold)


def _pattern_changed(previous: Any, current: Any, threshold: float) -> bool:
    before = getattr(previous, "confidence", 0.0)
    after = getattr(current, "confidence", 0.0)
    return abs(after - before) > threshold


def _payload(pattern: Any, key: str) -> Any:
    data = getattr(pattern, "data", None)
    if isinstance(data, dict):
        return data.get(key)
    return getattr(data, key, None)


COMPARATORS: Dict[str, Comparator] = {
    SnapshotType.LIFE_THEMES.value: _life_themes_changed,
    SnapshotType.TAROT_SEASON.value: _tarot_season_changed,
    SnapshotType.ARCHETYPE.value: _archetype_changed,
    SnapshotType.TAROT_MOON_PHASE.value: _cooccurrence_changed,
    SnapshotType.EMOTION_MOON_PHASE.value: _cooccurrence_changed,
    SnapshotType.TAROT_SUN_SIGN.value: _cooccurrence_changed,
    SnapshotType.EMOTION_SUN_SIGN.value: _cooccurrence_changed,
}


__all__ = ["COMPARATORS", "DEFAULT_THRESHOLD", "has_pattern_changed"]
