"""Data models for activity, cosmic context, patterns and snapshots."""

from .events import (
    ActivityClass,
    Aspect,
    CosmicContext,
    EnrichedEvent,
    MOON_PHASES,
    MoonPhase,
    PlanetPosition,
    RawEvent,
    ZODIAC_SIGNS,
)
from .patterns import (
    AnalysisWindow,
    ConfidenceFactors,
    CooccurrenceData,
    DetectionMeta,
    DetectionResult,
    EmotionMoonPhasePattern,
    EmotionSunSignPattern,
    EntityCount,
    InsufficientDataPattern,
    InsufficientDataPayload,
    Pattern,
    PatternTier,
    PatternType,
    TarotMoonPhasePattern,
    TarotSunSignPattern,
    TimeWindow,
)
from .snapshots import (
    ArchetypeEntry,
    ArchetypeSnapshot,
    LifeThemeEntry,
    LifeThemeSnapshot,
    PATTERN_FAMILY,
    Snapshot,
    SnapshotType,
    SuitShare,
    TarotSeason,
    TarotSeasonSnapshot,
    ThemeSources,
    parse_snapshot,
    snapshot_to_dict,
)

__all__ = [
    "ActivityClass",
    "AnalysisWindow",
    "ArchetypeEntry",
    "ArchetypeSnapshot",
    "Aspect",
    "ConfidenceFactors",
    "CooccurrenceData",
    "CosmicContext",
    "DetectionMeta",
    "DetectionResult",
    "EmotionMoonPhasePattern",
    "EmotionSunSignPattern",
    "EnrichedEvent",
    "EntityCount",
    "InsufficientDataPattern",
    "InsufficientDataPayload",
    "LifeThemeEntry",
    "LifeThemeSnapshot",
    "MOON_PHASES",
    "MoonPhase",
    "PATTERN_FAMILY",
    "Pattern",
    "PatternTier",
    "PatternType",
    "PlanetPosition",
    "RawEvent",
    "Snapshot",
    "SnapshotType",
    "SuitShare",
    "TarotMoonPhasePattern",
    "TarotSeason",
    "TarotSeasonSnapshot",
    "TarotSunSignPattern",
    "ThemeSources",
    "TimeWindow",
    "ZODIAC_SIGNS",
    "parse_snapshot",
    "snapshot_to_dict",
]
