"""Snapshot models persisted by the secure snapshot store.

A snapshot is a tagged union over correlation patterns and higher level
summaries (life themes, tarot season, archetypes). The ``type`` field is the
discriminator; pydantic picks the right model when a decrypted payload is
parsed back.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, FrozenSet, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from cosmicpatterns.errors import InvalidSnapshotError
from cosmicpatterns.models.patterns import (
    EmotionMoonPhasePattern,
    EmotionSunSignPattern,
    EntityCount,
    PatternTier,
    PatternType,
    TarotMoonPhasePattern,
    TarotSunSignPattern,
)


class SnapshotType(str, Enum):
    """Every snapshot variant the store knows about (the pattern family)."""

    TAROT_MOON_PHASE = PatternType.TAROT_MOON_PHASE.value
    EMOTION_MOON_PHASE = PatternType.EMOTION_MOON_PHASE.value
    TAROT_SUN_SIGN = PatternType.TAROT_SUN_SIGN.value
    EMOTION_SUN_SIGN = PatternType.EMOTION_SUN_SIGN.value
    LIFE_THEMES = "life_themes"
    TAROT_SEASON = "tarot_season"
    ARCHETYPE = "archetype"


SNAPSHOT_TIERS: Dict[SnapshotType, PatternTier] = {
    SnapshotType.TAROT_MOON_PHASE: PatternTier.FREE,
    SnapshotType.EMOTION_MOON_PHASE: PatternTier.PREMIUM,
    SnapshotType.TAROT_SUN_SIGN: PatternTier.PREMIUM,
    SnapshotType.EMOTION_SUN_SIGN: PatternTier.PREMIUM,
    SnapshotType.LIFE_THEMES: PatternTier.FREE,
    SnapshotType.TAROT_SEASON: PatternTier.FREE,
    SnapshotType.ARCHETYPE: PatternTier.PREMIUM,
}

PATTERN_FAMILY: FrozenSet[str] = frozenset(item.value for item in SnapshotType)


class ThemeSources(BaseModel):
    model_config = ConfigDict(frozen=True)

    journal_entries: int = 0
    tarot_cards: List[str] = Field(default_factory=list)
    dream_tags: List[str] = Field(default_factory=list)


class LifeThemeEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    score: float = Field(ge=0.0, le=1.0)
    short_summary: str = ""
    sources: ThemeSources = Field(default_factory=ThemeSources)


class LifeThemeSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["life_themes"] = "life_themes"
    themes: List[LifeThemeEntry]
    dominant_theme: str
    timestamp: datetime

    def dominant_entry(self) -> LifeThemeEntry | None:
        return next((t for t in self.themes if t.name == self.dominant_theme), None)


class SuitShare(BaseModel):
    model_config = ConfigDict(frozen=True)

    suit: str
    count: int
    percentage: float = Field(ge=0.0, le=100.0)


class TarotSeason(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    suit: str
    description: str


class TarotSeasonSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["tarot_season"] = "tarot_season"
    season: TarotSeason
    dominant_theme: str
    suit_distribution: List[SuitShare]
    frequent_cards: List[EntityCount] = Field(default_factory=list)
    period_days: int = 0
    timestamp: datetime

    def share_of(self, suit: str) -> float:
        """Percentage of cards drawn from ``suit`` (0 when absent)."""
        for share in self.suit_distribution:
            if share.suit == suit:
                return share.percentage
        return 0.0


class ArchetypeEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    strength: float = Field(ge=0.0, le=1.0)
    based_on: List[str] = Field(default_factory=list)


class ArchetypeSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["archetype"] = "archetype"
    archetypes: List[ArchetypeEntry]
    dominant_archetype: str
    timestamp: datetime

    def strength_of(self, name: str) -> float:
        for entry in self.archetypes:
            if entry.name == name:
                return entry.strength
        return 0.0


Snapshot = Annotated[
    Union[
        TarotMoonPhasePattern,
        EmotionMoonPhasePattern,
        TarotSunSignPattern,
        EmotionSunSignPattern,
        LifeThemeSnapshot,
        TarotSeasonSnapshot,
        ArchetypeSnapshot,
    ],
    Field(discriminator="type"),
]

SNAPSHOT_ADAPTER: TypeAdapter = TypeAdapter(Snapshot)


def snapshot_type_of(snapshot: Any) -> SnapshotType:
    return SnapshotType(snapshot.type)


def snapshot_tier(snapshot_type: SnapshotType | str) -> PatternTier:
    return SNAPSHOT_TIERS[SnapshotType(snapshot_type)]


def visible_snapshot_types(user_tier: PatternTier | str | None) -> List[str]:
    """Snapshot types a caller on ``user_tier`` may read.

    ``None`` means no tier filtering (internal callers).
    """
    if user_tier is None or PatternTier(user_tier) == PatternTier.PREMIUM:
        return [item.value for item in SnapshotType]
    return [
        item.value
        for item, tier in SNAPSHOT_TIERS.items()
        if tier == PatternTier.FREE
    ]


def snapshot_to_dict(snapshot: Any) -> Dict[str, Any]:
    """JSON-safe dict for a snapshot (input to the cipher)."""
    return snapshot.model_dump(mode="json")


def parse_snapshot(data: Dict[str, Any]) -> Any:
    """Parse a decrypted payload back into its snapshot model.

    Raises:
        InvalidSnapshotError: payload has an unknown type or bad shape
    """
    try:
        return SNAPSHOT_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise InvalidSnapshotError(
            f"Invalid snapshot payload: {exc.error_count()} validation errors",
            details={"type": data.get("type") if isinstance(data, dict) else None},
        ) from exc


__all__ = [
    "ArchetypeEntry",
    "ArchetypeSnapshot",
    "LifeThemeEntry",
    "LifeThemeSnapshot",
    "PATTERN_FAMILY",
    "SNAPSHOT_ADAPTER",
    "SNAPSHOT_TIERS",
    "Snapshot",
    "SnapshotType",
    "SuitShare",
    "TarotSeason",
    "TarotSeasonSnapshot",
    "ThemeSources",
    "parse_snapshot",
    "snapshot_tier",
    "snapshot_to_dict",
    "snapshot_type_of",
    "visible_snapshot_types",
]
