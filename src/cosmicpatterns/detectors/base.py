"""Pattern detector contract.

Detectors are plain objects satisfying ``PatternDetector``; shared behaviour
(thresholds, windows, sorting, pattern construction) lives in
``cosmicpatterns.detectors.helpers`` and is used by composition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Sequence

from cosmicpatterns.models.events import ActivityClass, EnrichedEvent
from cosmicpatterns.models.patterns import Pattern, PatternTier, PatternType


@dataclass(frozen=True)
class DetectorMetadata:
    """Describes a detector to the orchestrator.

    Attributes:
        pattern_type: Type of patterns the detector emits
        category: Caller-facing category used for filtering (tarot, journal)
        activity: Event class the detector consumes
        tier: Access tier stamped on emitted patterns
        description: Short human description
    """

    pattern_type: PatternType
    category: str
    activity: ActivityClass
    tier: PatternTier
    description: str = ""


class PatternDetector(Protocol):
    """A correlation strategy over enriched events."""

    def detect(self, events: Sequence[EnrichedEvent]) -> List[Pattern]:
        """Return accepted patterns, highest confidence first."""
        ...

    def get_metadata(self) -> DetectorMetadata:
        ...


__all__ = ["DetectorMetadata", "PatternDetector"]
