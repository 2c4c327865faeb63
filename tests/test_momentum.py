"""Tests for short-term momentum scoring."""

from __future__ import annotations

import pytest

from portfolio_core.errors import InsufficientData
from portfolio_core.indicators import agreement, momentum_score, price_pattern, short_term_momentum
from portfolio_core.models import (
    AgreementConfidence,
    Confidence,
    MomentumResult,
    MomentumSentiment,
    PricePattern,
)


def _geometric(n: int, step: float, start: float = 100.0) -> list[float]:
    return [start * step**i for i in range(n)]


def _result(sentiment: MomentumSentiment, confidence: Confidence) -> MomentumResult:
    return MomentumResult(
        sentiment=sentiment,
        confidence=confidence,
        score=0,
        recent_change=0.0,
        average_change=0.0,
        volatility=0.0,
        pattern=PricePattern.NEUTRAL,
    )


class TestPricePattern:
    @pytest.mark.parametrize(
        "closes, expected",
        [
            ([1.0, 2.0, 3.0], PricePattern.NEUTRAL),
            ([1.0, 2.0, 3.0, 4.0], PricePattern.UPTREND),
            ([5.0, 5.0, 5.0, 5.0], PricePattern.UPTREND),
            ([4.0, 3.0, 2.0, 1.0], PricePattern.DOWNTREND),
            ([100.0, 101.0, 100.5, 101.0], PricePattern.CONSOLIDATION),
            ([100.0, 110.0, 95.0, 105.0], PricePattern.MIXED),
        ],
    )
    def test_classification(self, closes, expected):
        assert price_pattern(closes) is expected

    def test_only_last_four_count(self):
        assert price_pattern([50.0, 1.0, 2.0, 3.0, 4.0]) is PricePattern.UPTREND


class TestMomentumScore:
    def test_strong_rise(self):
        result = momentum_score([100.0, 103.0, 106.0, 109.0], [3.0, 3.0, 3.0])
        assert result.score == 100
        assert result.sentiment is MomentumSentiment.BULLISH
        assert result.confidence is Confidence.HIGH
        assert result.reasoning == (
            "Strong recent momentum (+3.0%)",
            "Strong upward trend (+3.0% avg)",
            "Low volatility (stable movement)",
            "Uptrend pattern detected",
        )

    def test_unstable_moves(self):
        result = momentum_score([100.0, 110.0, 99.0, 108.9], [10.0, -10.0, 10.0])
        assert result.pattern is PricePattern.MIXED
        assert result.volatility > 8
        assert "High volatility (unstable)" in result.reasoning
        # +40 recent, +30 average, -10 dispersion
        assert result.score == 60
        assert result.sentiment is MomentumSentiment.BULLISH

    def test_quiet_drift_down(self):
        result = momentum_score([100.0, 99.5, 99.8, 99.6], [-0.5, 0.3, -0.2])
        # Only the low dispersion rule scores
        assert result.pattern is PricePattern.CONSOLIDATION
        assert result.score == 20
        assert result.sentiment is MomentumSentiment.SLIGHTLY_BULLISH
        assert result.confidence is Confidence.LOW

    @pytest.mark.parametrize(
        "changes, expected",
        [
            ([-1.5, -1.5, -1.5], MomentumSentiment.NEUTRAL),
            ([-3.0, -3.0, -3.0], MomentumSentiment.BEARISH),
        ],
    )
    def test_bearish_bands(self, changes, expected):
        # Consolidating closes isolate the change-driven points
        result = momentum_score([100.0, 100.5, 100.2, 100.4], changes)
        assert result.sentiment is expected


class TestAgreement:
    @pytest.mark.parametrize(
        "four_hour, one_day, expected",
        [
            ((MomentumSentiment.BULLISH, Confidence.HIGH), (MomentumSentiment.BULLISH, Confidence.HIGH),
             AgreementConfidence.VERY_HIGH),
            ((MomentumSentiment.BULLISH, Confidence.HIGH), (MomentumSentiment.BULLISH, Confidence.MEDIUM),
             AgreementConfidence.HIGH),
            ((MomentumSentiment.NEUTRAL, Confidence.LOW), (MomentumSentiment.NEUTRAL, Confidence.LOW),
             AgreementConfidence.MEDIUM),
            ((MomentumSentiment.BEARISH, Confidence.HIGH), (MomentumSentiment.BULLISH, Confidence.LOW),
             AgreementConfidence.MEDIUM),
            ((MomentumSentiment.BEARISH, Confidence.MEDIUM), (MomentumSentiment.NEUTRAL, Confidence.LOW),
             AgreementConfidence.LOW),
        ],
    )
    def test_table(self, four_hour, one_day, expected):
        assert agreement(_result(*four_hour), _result(*one_day)) is expected


class TestShortTermMomentum:
    def test_insufficient_data(self):
        result = short_term_momentum(_geometric(23, 1.01))
        assert isinstance(result, InsufficientData)
        assert result.required == 24
        assert result.available == 23

    def test_non_positive_close(self):
        closes = _geometric(30, 1.01)
        closes[-5] = 0.0
        result = short_term_momentum(closes)
        assert isinstance(result, InsufficientData)
        assert result.available == 23

    def test_steady_rise_agrees(self):
        result = short_term_momentum(_geometric(24, 1.015))
        for window in (result.four_hour, result.one_day):
            assert window.score == 80
            assert window.sentiment is MomentumSentiment.BULLISH
            assert window.recent_change == pytest.approx(1.5)
        assert result.confidence is AgreementConfidence.VERY_HIGH

    def test_steady_decline(self):
        result = short_term_momentum(_geometric(24, 0.97))
        # -20 recent, -15 average, +20 dispersion, -10 pattern
        assert result.four_hour.score == -25
        assert result.four_hour.sentiment is MomentumSentiment.BEARISH
        assert result.four_hour.confidence is Confidence.MEDIUM
        assert result.confidence is AgreementConfidence.MEDIUM

    def test_reversal_splits_windows(self):
        closes = _geometric(21, 1.015)
        for _ in range(3):
            closes.append(closes[-1] * 0.95)
        result = short_term_momentum(closes)
        assert result.four_hour.sentiment is MomentumSentiment.BEARISH
        assert result.one_day.average_change == pytest.approx(15 / 23)
        assert result.one_day.score == 5
        assert result.one_day.sentiment is MomentumSentiment.NEUTRAL
        assert result.confidence is AgreementConfidence.LOW

    def test_uses_last_24_closes(self):
        closes = _geometric(40, 0.9) + _geometric(24, 1.015)
        assert short_term_momentum(closes).one_day.sentiment is MomentumSentiment.BULLISH
