"""Categorical co-occurrence detection.

Buckets enriched events by a cosmic category (moon phase, sun sign) and,
optionally, by an activity-side subject (an emotion, a tarot suit), then
scores each bucket against a reference frequency:

- uniform reference: 1 / number of reference categories
- empirical reference: the bucket's share of all events in the run

Every concrete strategy (tarot x moon phase, emotion x moon phase,
tarot suit x sun sign) is an instance of this detector configured by a
``CooccurrenceSpec``.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from cosmicpatterns.analysis.confidence import ConfidenceScorer
from cosmicpatterns.analysis.statistics import frequency_ratio, percentage_deviation
from cosmicpatterns.configuration.settings import DetectionSettings
from cosmicpatterns.detectors.base import DetectorMetadata
from cosmicpatterns.detectors.helpers import (
    count_top_entities,
    create_pattern,
    create_time_window,
    filter_by_threshold,
    has_sufficient_data,
    sort_by_confidence,
    validate_cosmic_data,
)
from cosmicpatterns.models.events import ActivityClass, EnrichedEvent
from cosmicpatterns.models.patterns import (
    CooccurrenceData,
    Pattern,
    PatternTier,
    PatternType,
    TimeWindow,
)

logger = logging.getLogger(__name__)

CategoryFn = Callable[[EnrichedEvent], Optional[str]]
SubjectsFn = Callable[[EnrichedEvent], Iterable[str]]
EntitiesFn = Callable[[EnrichedEvent, Optional[str]], Iterable[str]]


@dataclass(frozen=True)
class CooccurrenceSpec:
    """Configuration of one co-occurrence strategy.

    Attributes:
        pattern_type: Type stamped on emitted patterns
        category: Name of the cosmic dimension (moon_phase, sun_sign)
        activity: Event class the strategy consumes
        tier: Access tier of emitted patterns
        detector_category: Caller-facing category (tarot, journal)
        category_of: Cosmic bucket of an event, None to skip the event
        entities_of: Entities reported as top co-occurrences for a subject
        subjects_of: Activity-side subjects of an event; None for a single group
        reference_categories: Uniform reference when set, empirical otherwise
        min_events: Events required before analysis starts
    """

    pattern_type: PatternType
    category: str
    activity: ActivityClass
    tier: PatternTier
    detector_category: str
    category_of: CategoryFn
    entities_of: EntitiesFn
    subjects_of: Optional[SubjectsFn] = None
    reference_categories: Optional[Sequence[str]] = None
    min_events: int = 3
    description: str = ""


class CategoricalCooccurrenceDetector:
    """Detect activity concentrated in a cosmic category.

    Example:
        >>> detector = CategoricalCooccurrenceDetector(tarot_moon_phase_spec())
        >>> patterns = detector.detect(enriched_tarot_events)
        >>> [p.data.category_value for p in patterns]
        ['Full Moon']
    """

    def __init__(
        self,
        spec: CooccurrenceSpec,
        scorer: Optional[ConfidenceScorer] = None,
        settings: Optional[DetectionSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.spec = spec
        self._scorer = scorer or ConfidenceScorer()
        self._settings = settings or DetectionSettings()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def get_metadata(self) -> DetectorMetadata:
        return DetectorMetadata(
            pattern_type=self.spec.pattern_type,
            category=self.spec.detector_category,
            activity=self.spec.activity,
            tier=self.spec.tier,
            description=self.spec.description,
        )

    def detect(self, events: Sequence[EnrichedEvent]) -> List[Pattern]:
        name = self.spec.pattern_type.value
        if not has_sufficient_data(events, self.spec.min_events):
            logger.debug(f"{name}: {len(events)} events, below minimum {self.spec.min_events}")
            return []
        if not validate_cosmic_data(events, detector=name):
            return []

        now = self._clock()
        window = create_time_window(events, now=now)
        references = self._reference_frequencies(events)

        candidates: List[Pattern] = []
        for subject, group in self._group_by_subject(events).items():
            candidates.extend(self._score_group(subject, group, references, window, now))

        scoring = self._scorer.settings
        accepted = filter_by_threshold(
            candidates, scoring.min_occurrences, scoring.min_confidence
        )
        logger.debug(
            f"{name}: {len(candidates)} candidates, {len(accepted)} accepted "
            f"from {len(events)} events"
        )
        return sort_by_confidence(accepted)

    def _group_by_subject(
        self, events: Sequence[EnrichedEvent]
    ) -> Dict[Optional[str], List[EnrichedEvent]]:
        if self.spec.subjects_of is None:
            return {None: list(events)}

        groups: Dict[Optional[str], List[EnrichedEvent]] = defaultdict(list)
        for event in events:
            for subject in dict.fromkeys(self.spec.subjects_of(event)):
                groups[subject].append(event)
        return groups

    def _reference_frequencies(self, events: Sequence[EnrichedEvent]) -> Dict[str, float]:
        if self.spec.reference_categories:
            share = 1.0 / len(self.spec.reference_categories)
            return {value: share for value in self.spec.reference_categories}

        counts = Counter(
            value for value in (self.spec.category_of(event) for event in events) if value
        )
        total = sum(counts.values())
        if total == 0:
            return {}
        return {value: count / total for value, count in counts.items()}

    def _score_group(
        self,
        subject: Optional[str],
        group: Sequence[EnrichedEvent],
        references: Dict[str, float],
        window: TimeWindow,
        now: datetime,
    ) -> List[Pattern]:
        buckets: Dict[str, List[EnrichedEvent]] = defaultdict(list)
        for event in group:
            value = self.spec.category_of(event)
            if value:
                buckets[value].append(event)

        total = len(group)
        min_occurrences = self._scorer.settings.min_occurrences
        patterns: List[Pattern] = []
        for value, bucket in buckets.items():
            occurrences = len(bucket)
            if occurrences < min_occurrences:
                continue
            expected = references.get(value, 0.0)
            if expected <= 0:
                continue

            result = self._scorer.score(
                occurrences=occurrences,
                total_events=total,
                expected_frequency=expected,
                days_analyzed=window.days_analyzed,
            )
            entities = count_top_entities(
                (
                    entity
                    for event in bucket
                    for entity in self.spec.entities_of(event, subject)
                ),
                limit=self._settings.top_entities,
            )
            data = CooccurrenceData(
                category=self.spec.category,
                category_value=value,
                subject=subject,
                occurrences=occurrences,
                total_events=total,
                expected_frequency=expected,
                frequency_ratio=round(frequency_ratio(occurrences, total, expected), 4),
                percentage_deviation=round(
                    percentage_deviation(occurrences, total, expected), 2
                ),
                top_entities=entities,
                time_window=window,
                factors=result.factors,
            )
            patterns.append(
                create_pattern(
                    data, result.confidence, self.spec.pattern_type, tier=self.spec.tier, now=now
                )
            )
        return patterns


__all__ = ["CategoricalCooccurrenceDetector", "CooccurrenceSpec"]
