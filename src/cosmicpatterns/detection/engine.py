"""Detection orchestrator.

Single entry point for pattern detection:
1. fetch and enrich tarot and journal activity concurrently
2. short-circuit with an insufficient-data sentinel on starved input
3. run every registered detector concurrently, isolating failures
4. apply tier filtering, stable confidence sort and the global cap

Example:
    >>> engine = CosmicPatternEngine(activity_source, context_provider)
    >>> result = await engine.detect_cosmic_patterns("user-1", days_back=90)
    >>> result.meta.total_patterns
    4
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence

from cosmicpatterns.analysis.confidence import ConfidenceScorer
from cosmicpatterns.analysis.enrichment import EventEnricher
from cosmicpatterns.configuration.settings import EngineSettings
from cosmicpatterns.detectors.base import PatternDetector
from cosmicpatterns.detectors.helpers import create_pattern, sort_by_confidence
from cosmicpatterns.detectors.strategies import DetectorFactory, build_detectors
from cosmicpatterns.errors import CosmicPatternsError, SourceError, SourceTimeoutError
from cosmicpatterns.models.events import ActivityClass, EnrichedEvent
from cosmicpatterns.models.patterns import (
    AnalysisWindow,
    DetectionMeta,
    DetectionResult,
    InsufficientDataPayload,
    Pattern,
    PatternTier,
    PatternType,
)
from cosmicpatterns.sources.base import ActivitySource, CosmicContextProvider

logger = logging.getLogger(__name__)


class CosmicPatternEngine:
    """Run all applicable detectors over a user's enriched activity."""

    def __init__(
        self,
        activity_source: ActivitySource,
        context_provider: CosmicContextProvider,
        settings: Optional[EngineSettings] = None,
        detector_factories: Optional[Dict[PatternType, DetectorFactory]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._source = activity_source
        self._contexts = context_provider
        self.settings = settings or EngineSettings()
        self._factories = detector_factories
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._scorer = ConfidenceScorer(self.settings.scoring)

    async def detect_cosmic_patterns(
        self,
        user_id: str,
        days_back: Optional[int] = None,
        user_tier: PatternTier | str = PatternTier.FREE,
        category: Optional[str] = None,
    ) -> DetectionResult:
        """Detect cosmic patterns for one user.

        Args:
            user_id: User whose activity is analysed
            days_back: Analysis window length (defaults to settings)
            user_tier: Free-tier callers never see premium patterns
            category: Restrict to one activity category (tarot, journal)

        Returns:
            DetectionResult whose meta is present on every path

        Raises:
            SourceError: The activity source failed or timed out
            ValueError: Unknown category
        """
        tier = PatternTier(user_tier)
        classes = self._included_classes(category)
        detection = self.settings.detection

        days = days_back or detection.default_days_back
        end = self._clock()
        start = end - timedelta(days=days)
        window = AnalysisWindow(start=start, end=end, days_back=days)

        enricher = EventEnricher(self._source, self._contexts)
        fetched = await asyncio.gather(
            *(self._fetch(enricher, user_id, activity, start) for activity in classes)
        )
        events: Dict[ActivityClass, List[EnrichedEvent]] = dict(zip(classes, fetched))
        counts = {activity.value: len(events[activity]) for activity in classes}

        required = {
            activity.value: self._minimum_for(activity) for activity in classes
        }
        if all(counts[name] < required[name] for name in counts):
            logger.info(
                f"Insufficient data for user {user_id}: {counts} (required {required})"
            )
            return self._insufficient_data(counts, required, window, tier, end)

        detectors = [
            detector
            for detector in build_detectors(self._scorer, detection, self._factories)
            if detector.get_metadata().activity in classes
        ]
        results = await asyncio.gather(
            *(
                self._run_detector(detector, events[detector.get_metadata().activity])
                for detector in detectors
            )
        )

        candidates = [pattern for patterns in results for pattern in patterns]
        if tier is PatternTier.FREE:
            candidates = [p for p in candidates if p.tier is PatternTier.FREE]

        ranked = sort_by_confidence(candidates)
        patterns = ranked[: detection.max_patterns]

        category_of = {
            d.get_metadata().pattern_type.value: d.get_metadata().category for d in detectors
        }
        meta = DetectionMeta(
            total_patterns=len(ranked),
            analysis_window=window,
            events_analyzed=counts,
            by_category=dict(Counter(category_of.get(p.type, "other") for p in ranked)),
            by_type=dict(Counter(p.type for p in ranked)),
            user_tier=tier,
        )
        logger.info(
            f"Detected {len(ranked)} patterns for user {user_id}, returning {len(patterns)}"
        )
        return DetectionResult(patterns=patterns, meta=meta)

    async def _fetch(
        self,
        enricher: EventEnricher,
        user_id: str,
        activity: ActivityClass,
        since: datetime,
    ) -> List[EnrichedEvent]:
        timeout = self.settings.detection.fetch_timeout_seconds
        try:
            return await enricher.fetch_enriched(user_id, activity, since, timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise SourceTimeoutError(
                f"Fetching {activity.value} activity timed out after {timeout}s",
                details={"activity": activity.value},
            ) from exc
        except CosmicPatternsError:
            raise
        except Exception as exc:
            logger.error(f"Failed to fetch {activity.value} activity: {exc}")
            raise SourceError(
                f"Failed to fetch {activity.value} activity: {exc}",
                details={"activity": activity.value},
            ) from exc

    async def _run_detector(
        self, detector: PatternDetector, events: Sequence[EnrichedEvent]
    ) -> List[Pattern]:
        pattern_type = detector.get_metadata().pattern_type.value
        try:
            return await asyncio.to_thread(detector.detect, list(events))
        except Exception as exc:
            logger.warning(f"Detector {pattern_type} failed: {exc}")
            return []

    def _included_classes(self, category: Optional[str]) -> List[ActivityClass]:
        if category is None:
            return list(ActivityClass)
        try:
            return [ActivityClass(category)]
        except ValueError:
            raise ValueError(f"Unknown category: {category}") from None

    def _minimum_for(self, activity: ActivityClass) -> int:
        if activity is ActivityClass.TAROT:
            return self.settings.detection.min_tarot_events
        return self.settings.detection.min_journal_events

    def _insufficient_data(
        self,
        counts: Dict[str, int],
        required: Dict[str, int],
        window: AnalysisWindow,
        tier: PatternTier,
        now: datetime,
    ) -> DetectionResult:
        sentinel = create_pattern(
            InsufficientDataPayload(current=counts, required=required),
            0.0,
            PatternType.INSUFFICIENT_DATA,
            tier=PatternTier.FREE,
            now=now,
        )
        meta = DetectionMeta(
            total_patterns=1,
            analysis_window=window,
            events_analyzed=dict(counts),
            by_category={},
            by_type={sentinel.type: 1},
            user_tier=tier,
            insufficient_data=True,
        )
        return DetectionResult(patterns=[sentinel], meta=meta)


__all__ = ["CosmicPatternEngine"]
