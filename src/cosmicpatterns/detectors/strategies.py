"""Registered co-occurrence strategies.

- tarot_moon_phase (free): tarot draws x moon phase, uniform over 8 phases
- emotion_moon_phase (premium): emotions x moon phase, empirical phase share
- tarot_sun_sign (premium): tarot suits x sun sign, uniform over 12 signs
- emotion_sun_sign (premium): emotions x sun sign, uniform over 12 signs

``DETECTOR_FACTORIES`` is the registry the detection engine instantiates
on every run.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from cosmicpatterns.analysis.confidence import ConfidenceScorer
from cosmicpatterns.configuration.settings import DetectionSettings
from cosmicpatterns.detectors.base import PatternDetector
from cosmicpatterns.detectors.cooccurrence import (
    CategoricalCooccurrenceDetector,
    CooccurrenceSpec,
)
from cosmicpatterns.detectors.emotions import extract_emotions
from cosmicpatterns.models.events import (
    MOON_PHASES,
    ZODIAC_SIGNS,
    ActivityClass,
    EnrichedEvent,
)
from cosmicpatterns.models.patterns import PatternTier, PatternType
from cosmicpatterns.tarot import suit_of

DetectorFactory = Callable[[ConfidenceScorer, DetectionSettings], PatternDetector]


def _moon_phase(event: EnrichedEvent) -> Optional[str]:
    return event.moon_phase or None


def _sun_sign(event: EnrichedEvent) -> Optional[str]:
    return event.context.sign_of("Sun")


def _cards(event: EnrichedEvent, subject: Optional[str]) -> Iterable[str]:
    return event.event.entities


def _cards_of_suit(event: EnrichedEvent, suit: Optional[str]) -> Iterable[str]:
    return [card for card in event.event.entities if suit_of(card) == suit]


def _suits(event: EnrichedEvent) -> Iterable[str]:
    return [suit_of(card) for card in event.event.entities]


def _tags(event: EnrichedEvent, subject: Optional[str]) -> Iterable[str]:
    return [tag.lower() for tag in event.event.tags if tag.lower() != subject]


def _emotions(event: EnrichedEvent) -> Iterable[str]:
    return extract_emotions(event.event)


def tarot_moon_phase_spec() -> CooccurrenceSpec:
    return CooccurrenceSpec(
        pattern_type=PatternType.TAROT_MOON_PHASE,
        category="moon_phase",
        activity=ActivityClass.TAROT,
        tier=PatternTier.FREE,
        detector_category="tarot",
        category_of=_moon_phase,
        entities_of=_cards,
        reference_categories=MOON_PHASES,
        description="Tarot draws concentrated in a moon phase",
    )


def emotion_moon_phase_spec() -> CooccurrenceSpec:
    return CooccurrenceSpec(
        pattern_type=PatternType.EMOTION_MOON_PHASE,
        category="moon_phase",
        activity=ActivityClass.JOURNAL,
        tier=PatternTier.PREMIUM,
        detector_category="journal",
        category_of=_moon_phase,
        entities_of=_tags,
        subjects_of=_emotions,
        description="Emotions recurring during a moon phase",
    )


def tarot_sun_sign_spec() -> CooccurrenceSpec:
    return CooccurrenceSpec(
        pattern_type=PatternType.TAROT_SUN_SIGN,
        category="sun_sign",
        activity=ActivityClass.TAROT,
        tier=PatternTier.PREMIUM,
        detector_category="tarot",
        category_of=_sun_sign,
        entities_of=_cards_of_suit,
        subjects_of=_suits,
        reference_categories=ZODIAC_SIGNS,
        description="Tarot suits recurring during a sun sign season",
    )


def emotion_sun_sign_spec() -> CooccurrenceSpec:
    return CooccurrenceSpec(
        pattern_type=PatternType.EMOTION_SUN_SIGN,
        category="sun_sign",
        activity=ActivityClass.JOURNAL,
        tier=PatternTier.PREMIUM,
        detector_category="journal",
        category_of=_sun_sign,
        entities_of=_tags,
        subjects_of=_emotions,
        reference_categories=ZODIAC_SIGNS,
        description="Emotions recurring during a sun sign season",
    )


def _factory(spec_builder: Callable[[], CooccurrenceSpec]) -> DetectorFactory:
    def build(scorer: ConfidenceScorer, settings: DetectionSettings) -> PatternDetector:
        return CategoricalCooccurrenceDetector(spec_builder(), scorer=scorer, settings=settings)

    return build


DETECTOR_FACTORIES: Dict[PatternType, DetectorFactory] = {
    PatternType.TAROT_MOON_PHASE: _factory(tarot_moon_phase_spec),
    PatternType.EMOTION_MOON_PHASE: _factory(emotion_moon_phase_spec),
    PatternType.TAROT_SUN_SIGN: _factory(tarot_sun_sign_spec),
    PatternType.EMOTION_SUN_SIGN: _factory(emotion_sun_sign_spec),
}


def build_detectors(
    scorer: Optional[ConfidenceScorer] = None,
    settings: Optional[DetectionSettings] = None,
    factories: Optional[Dict[PatternType, DetectorFactory]] = None,
) -> List[PatternDetector]:
    """Fresh detector instances for one detection run."""
    scorer = scorer or ConfidenceScorer()
    settings = settings or DetectionSettings()
    registry = DETECTOR_FACTORIES if factories is None else factories
    return [factory(scorer, settings) for factory in registry.values()]


__all__ = [
    "DETECTOR_FACTORIES",
    "DetectorFactory",
    "build_detectors",
    "emotion_moon_phase_spec",
    "emotion_sun_sign_spec",
    "tarot_moon_phase_spec",
    "tarot_sun_sign_spec",
]
