"""Activity and cosmic context records consumed by the engine.

RawEvent and CosmicContext are produced by other subsystems (the activity
store and the per-day ephemeris cache) and are read-only here. EnrichedEvent
is built per detection run and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ActivityClass(str, Enum):
    """The two activity classes fetched from the event source."""

    TAROT = "tarot"
    """Structured tarot draws carrying discrete card entities."""

    JOURNAL = "journal"
    """Free-text journal, dream and ritual entries with tags."""


MOON_PHASES: Tuple[str, ...] = (
    "New Moon",
    "Waxing Crescent",
    "First Quarter",
    "Waxing Gibbous",
    "Full Moon",
    "Waning Gibbous",
    "Last Quarter",
    "Waning Crescent",
)

ZODIAC_SIGNS: Tuple[str, ...] = (
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
)


@dataclass(frozen=True)
class RawEvent:
    """One user activity record.

    Attributes:
        event_id: Identifier assigned by the activity store
        activity: Activity class the record was fetched under
        created_at: Creation timestamp (timezone-aware)
        content: Free-text content (empty for bare tarot draws)
        category: Finer grained kind: tarot, journal, dream or ritual
        tags: User or system tags (card keywords for tarot draws)
        emotions: Explicit emotion tags chosen by the user
        entities: Discrete entities, e.g. drawn card names
    """

    event_id: str
    activity: ActivityClass
    created_at: datetime
    content: str = ""
    category: str = "journal"
    tags: Tuple[str, ...] = ()
    emotions: Tuple[str, ...] = ()
    entities: Tuple[str, ...] = ()

    @property
    def day(self) -> date:
        """Calendar day used to look up cosmic context."""
        return self.created_at.date()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawEvent":
        """Build an event from an exported activity record."""
        activity = ActivityClass(data.get("activity", ActivityClass.JOURNAL.value))
        created_at = datetime.fromisoformat(data["created_at"])
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            event_id=str(data["event_id"]),
            activity=activity,
            created_at=created_at,
            content=data.get("content") or "",
            category=data.get("category") or activity.value,
            tags=tuple(data.get("tags") or ()),
            emotions=tuple(data.get("emotions") or ()),
            entities=tuple(data.get("entities") or ()),
        )


@dataclass(frozen=True)
class MoonPhase:
    name: str
    illumination: float = 0.0
    energy: str = ""


@dataclass(frozen=True)
class PlanetPosition:
    sign: str
    degree: float = 0.0


@dataclass(frozen=True)
class Aspect:
    planet_a: str
    planet_b: str
    aspect_type: str


@dataclass(frozen=True)
class CosmicContext:
    """Cosmic context observed on one calendar day.

    Published once per date by the ephemeris cache and immutable afterwards.
    """

    day: date
    moon: MoonPhase
    planets: Dict[str, PlanetPosition] = field(default_factory=dict)
    aspects: Tuple[Aspect, ...] = ()

    def is_empty(self) -> bool:
        """A context without a moon phase carries nothing to correlate on."""
        return not self.moon.name

    def sign_of(self, planet: str) -> Optional[str]:
        position = self.planets.get(planet)
        return position.sign if position else None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CosmicContext":
        moon = data.get("moon") or {}
        planets = {
            name: PlanetPosition(sign=pos.get("sign", ""), degree=float(pos.get("degree", 0.0)))
            for name, pos in (data.get("planets") or {}).items()
        }
        aspects = tuple(
            Aspect(
                planet_a=item["planet_a"],
                planet_b=item["planet_b"],
                aspect_type=item["aspect_type"],
            )
            for item in data.get("aspects") or ()
        )
        return cls(
            day=date.fromisoformat(data["day"]),
            moon=MoonPhase(
                name=moon.get("name", ""),
                illumination=float(moon.get("illumination", 0.0)),
                energy=moon.get("energy", ""),
            ),
            planets=planets,
            aspects=aspects,
        )


@dataclass(frozen=True)
class EnrichedEvent:
    """A raw event paired with the cosmic context for its creation date."""

    event: RawEvent
    context: CosmicContext

    @property
    def created_at(self) -> datetime:
        return self.event.created_at

    @property
    def moon_phase(self) -> str:
        return self.context.moon.name


__all__ = [
    "ActivityClass",
    "Aspect",
    "CosmicContext",
    "EnrichedEvent",
    "MOON_PHASES",
    "MoonPhase",
    "PlanetPosition",
    "RawEvent",
    "ZODIAC_SIGNS",
]
