"""Statistical primitives, confidence scoring and event enrichment."""

from .confidence import ConfidenceResult, ConfidenceScorer
from .enrichment import EventEnricher
from .statistics import (
    chi_squared_test,
    expected_count,
    frequency_ratio,
    normalize_confidence,
    observed_rate,
    percentage_deviation,
)

__all__ = [
    "ConfidenceResult",
    "ConfidenceScorer",
    "EventEnricher",
    "chi_squared_test",
    "expected_count",
    "frequency_ratio",
    "normalize_confidence",
    "observed_rate",
    "percentage_deviation",
]
