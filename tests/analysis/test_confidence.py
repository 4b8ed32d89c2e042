"""Tests for confidence scoring."""

import pytest

from cosmicpatterns.analysis.confidence import ConfidenceScorer
from cosmicpatterns.configuration.settings import ScoringSettings


@pytest.fixture
def scorer():
    return ConfidenceScorer()


class TestConfidenceScorer:
    """Formula terms and caps."""

    def test_strong_concentration_is_acceptable(self, scorer):
        result = scorer.score(
            occurrences=12, total_events=30, expected_frequency=0.125, days_analyzed=60
        )

        assert result.factors.base_frequency == pytest.approx(0.5)
        assert result.factors.sample_size_bonus == pytest.approx(0.2)
        assert result.factors.time_window_penalty == 0.0
        # expected count 3.75 is below the chi-squared floor
        assert result.factors.statistical_significance == 0.0
        assert result.confidence == pytest.approx(0.7)
        assert scorer.is_acceptable(result.confidence, 12)

    def test_short_window_is_penalised(self, scorer):
        long_window = scorer.score(6, 10, 0.125, days_analyzed=30)
        short_window = scorer.score(6, 10, 0.125, days_analyzed=7)

        assert short_window.factors.time_window_penalty == pytest.approx(0.1)
        assert short_window.confidence == pytest.approx(long_window.confidence - 0.1)

    def test_significance_term_is_capped(self, scorer):
        # expected = 100 * 0.1 = 10, chi2 = (60 - 10)^2 / 10 = 250
        result = scorer.score(60, 100, 0.1, days_analyzed=90)

        assert result.factors.statistical_significance == pytest.approx(0.3)
        assert result.confidence == pytest.approx(1.0)

    def test_chance_level_scores_low(self, scorer):
        result = scorer.score(5, 40, 0.125, days_analyzed=90)

        assert result.factors.base_frequency == pytest.approx(0.3)
        assert result.confidence < scorer.settings.min_confidence

    def test_confidence_never_negative(self, scorer):
        result = scorer.score(0, 4, 0.5, days_analyzed=1)

        assert result.confidence == 0.0

    def test_is_acceptable_requires_both_floors(self, scorer):
        assert not scorer.is_acceptable(0.9, 2)
        assert not scorer.is_acceptable(0.5, 10)
        assert scorer.is_acceptable(0.6, 3)

    def test_custom_settings(self):
        scorer = ConfidenceScorer(ScoringSettings(min_confidence=0.3, min_occurrences=1))

        assert scorer.is_acceptable(0.3, 1)


@pytest.mark.parametrize(
    "total_events, expected_frequency",
    [(1, 0.5), (10, 0.125), (40, 1 / 12), (100, 1 / 7), (30, 0.0)],
)
def test_more_occurrences_never_lower_frequency_terms(scorer, total_events, expected_frequency):
    previous = None
    for occurrences in range(total_events + 1):
        factors = scorer.score(occurrences, total_events, expected_frequency, days_analyzed=30).factors
        if previous is not None:
            assert factors.base_frequency >= previous.base_frequency
            assert factors.sample_size_bonus >= previous.sample_size_bonus
        previous = factors
