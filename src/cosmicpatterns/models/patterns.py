"""Pattern models produced by the detection engine.

Defines:
- PatternType / PatternTier: tagged variant and access class of a pattern
- TimeWindow / ConfidenceFactors: explainability payloads
- Pattern and its typed variants (pydantic, frozen)
- DetectionMeta / DetectionResult: orchestrator output

Patterns are immutable once created; a new detection run produces new
Pattern instances instead of mutating old ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field


class PatternType(str, Enum):
    """Pattern variants the engine can emit."""

    TAROT_MOON_PHASE = "tarot_moon_phase"
    """Tarot activity concentrated in a moon phase."""

    EMOTION_MOON_PHASE = "emotion_moon_phase"
    """An emotion recurring during a moon phase."""

    TAROT_SUN_SIGN = "tarot_sun_sign"
    """A tarot suit recurring during a sun sign season."""

    EMOTION_SUN_SIGN = "emotion_sun_sign"
    """An emotion recurring during a sun sign season."""

    INSUFFICIENT_DATA = "insufficient_data"
    """Sentinel emitted when there is too little activity to analyse."""


class PatternTier(str, Enum):
    FREE = "free"
    PREMIUM = "premium"


class TimeWindow(BaseModel):
    """Observation window derived from the analysed events."""

    model_config = ConfigDict(frozen=True)

    start_date: datetime
    end_date: datetime
    days_analyzed: int = Field(ge=0)


class ConfidenceFactors(BaseModel):
    """Decomposed terms behind a confidence score.

    Kept for explainability and debugging only; confidence is never
    recomputed from these.
    """

    model_config = ConfigDict(frozen=True)

    base_frequency: float = 0.0
    sample_size_bonus: float = 0.0
    time_window_penalty: float = 0.0
    statistical_significance: float = 0.0


class EntityCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    count: int


class CooccurrenceData(BaseModel):
    """Payload of a categorical co-occurrence pattern.

    Attributes:
        category: Cosmic dimension the events were bucketed by (moon_phase, sun_sign)
        category_value: Bucket value, e.g. "Full Moon"
        subject: Activity-side value when the detector tracks one (emotion, suit)
        occurrences: Events in the bucket carrying the subject
        total_events: Events considered for the subject
        expected_frequency: Reference share of the bucket
        frequency_ratio: Observed share divided by the expected share
        percentage_deviation: Percent difference between observed and expected
        top_entities: Most recurring entities inside the bucket
        time_window: Window the events were drawn from
        factors: Confidence breakdown
    """

    model_config = ConfigDict(frozen=True)

    category: str
    category_value: str
    subject: Optional[str] = None
    occurrences: int
    total_events: int
    expected_frequency: float
    frequency_ratio: float
    percentage_deviation: float
    top_entities: List[EntityCount] = Field(default_factory=list)
    time_window: TimeWindow
    factors: ConfidenceFactors = Field(default_factory=ConfidenceFactors)


class InsufficientDataPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    current: Dict[str, int]
    required: Dict[str, int]


class Pattern(BaseModel):
    """A scored, typed candidate correlation between activity and the sky."""

    model_config = ConfigDict(frozen=True)

    type: str
    title: str
    description: str
    confidence: float = Field(ge=0.0, le=1.0)
    tier: PatternTier = PatternTier.FREE
    data: Dict[str, Any] = Field(default_factory=dict)
    generated_at: datetime

    @property
    def timestamp(self) -> datetime:
        return self.generated_at

    @property
    def occurrences(self) -> int:
        return int(_payload_value(self.data, "occurrences", 0))


class TarotMoonPhasePattern(Pattern):
    type: Literal["tarot_moon_phase"] = "tarot_moon_phase"
    data: CooccurrenceData


class EmotionMoonPhasePattern(Pattern):
    type: Literal["emotion_moon_phase"] = "emotion_moon_phase"
    data: CooccurrenceData


class TarotSunSignPattern(Pattern):
    type: Literal["tarot_sun_sign"] = "tarot_sun_sign"
    data: CooccurrenceData


class EmotionSunSignPattern(Pattern):
    type: Literal["emotion_sun_sign"] = "emotion_sun_sign"
    data: CooccurrenceData


class InsufficientDataPattern(Pattern):
    type: Literal["insufficient_data"] = "insufficient_data"
    data: InsufficientDataPayload


PATTERN_MODELS: Dict[PatternType, Type[Pattern]] = {
    PatternType.TAROT_MOON_PHASE: TarotMoonPhasePattern,
    PatternType.EMOTION_MOON_PHASE: EmotionMoonPhasePattern,
    PatternType.TAROT_SUN_SIGN: TarotSunSignPattern,
    PatternType.EMOTION_SUN_SIGN: EmotionSunSignPattern,
    PatternType.INSUFFICIENT_DATA: InsufficientDataPattern,
}


def pattern_model_for(pattern_type: PatternType | str) -> Type[Pattern]:
    """Return the model class for a pattern type, falling back to Pattern."""
    try:
        return PATTERN_MODELS[PatternType(pattern_type)]
    except ValueError:
        return Pattern


def _payload_value(data: Any, key: str, default: Any) -> Any:
    if isinstance(data, BaseModel):
        return getattr(data, key, default)
    if isinstance(data, dict):
        return data.get(key, default)
    return default


@dataclass(frozen=True)
class AnalysisWindow:
    start: datetime
    end: datetime
    days_back: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "days_back": self.days_back,
        }


@dataclass
class DetectionMeta:
    """Metadata returned alongside every detection run.

    Present on the insufficient-data path as well, so callers can always
    show how much activity was analysed.
    """

    total_patterns: int
    analysis_window: AnalysisWindow
    events_analyzed: Dict[str, int]
    by_category: Dict[str, int] = field(default_factory=dict)
    by_type: Dict[str, int] = field(default_factory=dict)
    user_tier: PatternTier = PatternTier.FREE
    insufficient_data: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_patterns": self.total_patterns,
            "analysis_window": self.analysis_window.to_dict(),
            "events_analyzed": dict(self.events_analyzed),
            "by_category": dict(self.by_category),
            "by_type": dict(self.by_type),
            "user_tier": self.user_tier.value,
            "insufficient_data": self.insufficient_data,
        }


@dataclass
class DetectionResult:
    patterns: List[Pattern]
    meta: DetectionMeta

    def to_dict(self) -> Dict[str, Any]:
        return {
            "patterns": [pattern.model_dump(mode="json") for pattern in self.patterns],
            "meta": self.meta.to_dict(),
        }


__all__ = [
    "AnalysisWindow",
    "ConfidenceFactors",
    "CooccurrenceData",
    "DetectionMeta",
    "DetectionResult",
    "EmotionMoonPhasePattern",
    "EmotionSunSignPattern",
    "EntityCount",
    "InsufficientDataPattern",
    "InsufficientDataPayload",
    "PATTERN_MODELS",
    "Pattern",
    "PatternTier",
    "PatternType",
    "TarotMoonPhasePattern",
    "TarotSunSignPattern",
    "TimeWindow",
    "pattern_model_for",
]
