"""Confidence scoring for candidate co-occurrence patterns.

Combines the statistical utilities with the tunable weights from
``ScoringSettings`` into a single 0-1 confidence plus a factor breakdown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from cosmicpatterns.analysis.statistics import (
    chi_squared_test,
    frequency_ratio,
    normalize_confidence,
)
from cosmicpatterns.configuration.settings import ScoringSettings
from cosmicpatterns.models.patterns import ConfidenceFactors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfidenceResult:
    confidence: float
    factors: ConfidenceFactors


class ConfidenceScorer:
    """Score how likely a co-occurrence reflects a real tendency.

    Formula:
        base_frequency           = min(ratio * ratio_weight, base_frequency_cap)
        sample_size_bonus        = min(occurrences / sample_size_divisor, sample_size_cap)
        time_window_penalty      = penalty if days_analyzed < min_analysis_days else 0
        statistical_significance = min(chi2 * chi_squared_weight, chi_squared_cap)
        confidence = clamp(base + bonus - penalty + significance)

    Example:
        >>> scorer = ConfidenceScorer()
        >>> result = scorer.score(occurrences=12, total_events=30,
        ...                       expected_frequency=0.125, days_analyzed=60)
        >>> result.confidence >= scorer.settings.min_confidence
        True
    """

    def __init__(self, settings: Optional[ScoringSettings] = None) -> None:
        self.settings = settings or ScoringSettings()

    def score(
        self,
        occurrences: int,
        total_events: int,
        expected_frequency: float,
        days_analyzed: int,
    ) -> ConfidenceResult:
        s = self.settings

        ratio = frequency_ratio(occurrences, total_events, expected_frequency)
        base_frequency = min(ratio * s.ratio_weight, s.base_frequency_cap)
        sample_size_bonus = min(occurrences / s.sample_size_divisor, s.sample_size_cap)
        time_window_penalty = (
            s.time_window_penalty if days_analyzed < s.min_analysis_days else 0.0
        )
        chi_squared = chi_squared_test(
            occurrences, total_events, expected_frequency, s.min_expected_count
        )
        statistical_significance = min(chi_squared * s.chi_squared_weight, s.chi_squared_cap)

        confidence = normalize_confidence(
            base_frequency + sample_size_bonus - time_window_penalty + statistical_significance
        )

        logger.debug(
            f"Scored {occurrences}/{total_events} (expected {expected_frequency:.3f}, "
            f"{days_analyzed} days): confidence={confidence:.3f}"
        )

        return ConfidenceResult(
            confidence=confidence,
            factors=ConfidenceFactors(
                base_frequency=base_frequency,
                sample_size_bonus=sample_size_bonus,
                time_window_penalty=time_window_penalty,
                statistical_significance=statistical_significance,
            ),
        )

    def is_acceptable(self, confidence: float, occurrences: int) -> bool:
        """Both acceptance floors must hold."""
        return (
            confidence >= self.settings.min_confidence
            and occurrences >= self.settings.min_occurrences
        )


__all__ = ["ConfidenceResult", "ConfidenceScorer"]
