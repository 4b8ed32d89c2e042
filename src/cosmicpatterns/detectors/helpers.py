"""Shared detector behaviour.

Every detector strategy composes these helpers instead of inheriting them:
- has_sufficient_data / validate_cosmic_data: guards before analysis
- create_time_window: observation window from event timestamps
- filter_by_threshold / sort_by_confidence / take_top: result shaping
- create_pattern: stamps title, description and generated_at
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from cosmicpatterns.models.events import EnrichedEvent
from cosmicpatterns.models.patterns import (
    EntityCount,
    Pattern,
    PatternTier,
    PatternType,
    TimeWindow,
    pattern_model_for,
)

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400

# pattern type -> (title template, description template)
PATTERN_FORMATS: Dict[str, Tuple[str, str]] = {
    PatternType.TAROT_MOON_PHASE.value: (
        "Your readings gather around the {category_value}",
        "{occurrences} of your {total_events} tarot draws happened during the "
        "{category_value}, {ratio} the rate chance would suggest.",
    ),
    PatternType.EMOTION_MOON_PHASE.value: (
        "{subject_title} surfaces during the {category_value}",
        "You wrote about feeling {subject} in {occurrences} of {total_events} "
        "entries during the {category_value}, {ratio} the usual rate.",
    ),
    PatternType.TAROT_SUN_SIGN.value: (
        "{subject} energy in {category_value} season",
        "{occurrences} of your {total_events} {subject} cards were drawn while "
        "the Sun was in {category_value}, {ratio} the rate chance would suggest.",
    ),
    PatternType.EMOTION_SUN_SIGN.value: (
        "{subject_title} in {category_value} season",
        "You wrote about feeling {subject} in {occurrences} of {total_events} "
        "entries while the Sun was in {category_value}, {ratio} the rate chance "
        "would suggest.",
    ),
    PatternType.INSUFFICIENT_DATA.value: (
        "Not enough activity yet",
        "Keep drawing cards and journaling to reveal your cosmic patterns "
        "({progress}).",
    ),
}
FALLBACK_FORMAT: Tuple[str, str] = ("Cosmic pattern", "A recurring cosmic pattern.")


def has_sufficient_data(events: Sequence[Any], min_events: int) -> bool:
    return len(events) >= min_events


def validate_cosmic_data(events: Sequence[EnrichedEvent], detector: str = "detector") -> bool:
    """Every event must carry non-empty cosmic context.

    Logs and returns False on the first offender; context is never invented.
    """
    for event in events:
        context = getattr(event, "context", None)
        if context is None or context.is_empty():
            logger.warning(
                f"{detector}: event {event.event.event_id} has no cosmic context, "
                "aborting analysis"
            )
            return False
    return True


def create_time_window(
    events: Sequence[EnrichedEvent], now: Optional[datetime] = None
) -> TimeWindow:
    """Window spanning the earliest and latest event.

    An empty event set yields a zero-width window at ``now``.
    """
    if not events:
        moment = now or datetime.now(timezone.utc)
        return TimeWindow(start_date=moment, end_date=moment, days_analyzed=0)

    timestamps = [event.created_at for event in events]
    start, end = min(timestamps), max(timestamps)
    span_days = math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)
    return TimeWindow(start_date=start, end_date=end, days_analyzed=max(1, span_days))


def filter_by_threshold(
    patterns: Iterable[Pattern], min_occurrences: int, min_confidence: float
) -> List[Pattern]:
    """Keep candidates meeting both the occurrence and the confidence floor."""
    return [
        pattern
        for pattern in patterns
        if pattern.occurrences >= min_occurrences and pattern.confidence >= min_confidence
    ]


def sort_by_confidence(patterns: Iterable[Pattern]) -> List[Pattern]:
    """Descending confidence; ties keep encounter order (sorted is stable)."""
    return sorted(patterns, key=lambda pattern: pattern.confidence, reverse=True)


def take_top(patterns: Iterable[Pattern], n: int) -> List[Pattern]:
    return sort_by_confidence(patterns)[: max(0, n)]


def count_top_entities(
    values: Iterable[str], limit: int = 3, min_count: int = 2
) -> List[EntityCount]:
    """Most recurring values, singletons dropped, truncated to ``limit``."""
    counts = Counter(value for value in values if value)
    return [
        EntityCount(name=name, count=count)
        for name, count in counts.most_common()
        if count >= min_count
    ][:limit]


def create_pattern(
    data: Any,
    confidence: float,
    pattern_type: PatternType | str,
    tier: PatternTier = PatternTier.FREE,
    now: Optional[datetime] = None,
) -> Pattern:
    """Build an immutable pattern of the model registered for ``pattern_type``."""
    type_value = PatternType(pattern_type).value
    title_template, description_template = PATTERN_FORMATS.get(type_value, FALLBACK_FORMAT)
    fields = _format_fields(data)
    model = pattern_model_for(type_value)
    return model(
        type=type_value,
        title=title_template.format_map(fields),
        description=description_template.format_map(fields),
        confidence=round(confidence, 4),
        tier=tier,
        data=data,
        generated_at=now or datetime.now(timezone.utc),
    )


class _Fields(dict):
    def __missing__(self, key: str) -> str:
        return ""


def _format_fields(data: Any) -> _Fields:
    raw = data.model_dump() if isinstance(data, BaseModel) else dict(data or {})
    fields = _Fields(raw)

    subject = raw.get("subject") or ""
    fields["subject_title"] = subject[:1].upper() + subject[1:]

    ratio = raw.get("frequency_ratio")
    if isinstance(ratio, (int, float)):
        fields["ratio"] = f"{ratio:.1f}x"

    current, required = raw.get("current"), raw.get("required")
    if isinstance(current, dict) and isinstance(required, dict):
        fields["progress"] = ", ".join(
            f"{current.get(name, 0)}/{needed} {name}" for name, needed in required.items()
        )
    return fields


__all__ = [
    "PATTERN_FORMATS",
    "count_top_entities",
    "create_pattern",
    "create_time_window",
    "filter_by_threshold",
    "has_sufficient_data",
    "sort_by_confidence",
    "take_top",
    "validate_cosmic_data",
]
