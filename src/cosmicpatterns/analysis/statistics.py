"""Statistical utilities for co-occurrence scoring.

Pure, stateless functions over (observed count, total count, expected
frequency). They guard against the "horoscope problem": a bucket only looks
notable when it beats what chance alone would put there.
"""

from __future__ import annotations

import math


def observed_rate(observed: int, total: int) -> float:
    """Share of ``total`` that landed in the bucket (0 when total is 0)."""
    if total <= 0:
        return 0.0
    return observed / total


def frequency_ratio(observed: int, total: int, expected_frequency: float) -> float:
    """Observed rate divided by the expected rate.

    1.0 means exactly as often as expected, 2.0 twice as often.

    Example:
        >>> frequency_ratio(10, 40, 0.125)
        2.0
    """
    if total <= 0 or expected_frequency <= 0:
        return 0.0
    return observed_rate(observed, total) / expected_frequency


def percentage_deviation(observed: int, total: int, expected_frequency: float) -> float:
    """Percent difference between the observed and expected rate.

    Example:
        >>> percentage_deviation(10, 40, 0.125)
        100.0
    """
    if total <= 0 or expected_frequency <= 0:
        return 0.0
    return (observed_rate(observed, total) - expected_frequency) / expected_frequency * 100.0


def expected_count(total: int, expected_frequency: float) -> float:
    return total * expected_frequency


def chi_squared_test(
    observed: int,
    total: int,
    expected_frequency: float,
    min_expected_count: float = 5.0,
) -> float:
    """Single-cell chi-squared statistic (observed - expected)^2 / expected.

    Returns exactly 0 when the expected count falls below
    ``min_expected_count``; sparse buckets would otherwise explode the score.
    """
    expected = expected_count(total, expected_frequency)
    if expected < min_expected_count or expected <= 0:
        return 0.0
    return (observed - expected) ** 2 / expected


def normalize_confidence(score: float) -> float:
    """Clamp a raw score to [0, 1]."""
    if math.isnan(score):
        return 0.0
    return max(0.0, min(1.0, score))


__all__ = [
    "chi_squared_test",
    "expected_count",
    "frequency_ratio",
    "normalize_confidence",
    "observed_rate",
    "percentage_deviation",
]
