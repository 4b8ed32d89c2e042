"""Pattern detectors: contract, shared helpers and registered strategies."""

from cosmicpatterns.detectors.base import DetectorMetadata, PatternDetector
from cosmicpatterns.detectors.cooccurrence import (
    CategoricalCooccurrenceDetector,
    CooccurrenceSpec,
)
from cosmicpatterns.detectors.emotions import extract_emotions
from cosmicpatterns.detectors.strategies import (
    DETECTOR_FACTORIES,
    DetectorFactory,
    build_detectors,
    emotion_moon_phase_spec,
    emotion_sun_sign_spec,
    tarot_moon_phase_spec,
    tarot_sun_sign_spec,
)

__all__ = [
    "CategoricalCooccurrenceDetector",
    "CooccurrenceSpec",
    "DETECTOR_FACTORIES",
    "DetectorFactory",
    "DetectorMetadata",
    "PatternDetector",
    "build_detectors",
    "emotion_moon_phase_spec",
    "emotion_sun_sign_spec",
    "extract_emotions",
    "tarot_moon_phase_spec",
    "tarot_sun_sign_spec",
]
