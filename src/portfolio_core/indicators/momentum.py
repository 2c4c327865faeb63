"""Short-term momentum: a rule-scored read of the latest closes.

The last 24 closes are turned into consecutive percentage changes. Two
windows are scored: "4h" (the last four closes and three changes) and "1d"
(all 24). Each window earns points for its latest change, its average
change, low dispersion and a clean trend pattern, and the total maps to a
sentiment band. The two windows are then compared for agreement.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from portfolio_core.errors import InsufficientData
from portfolio_core.models.enums import (
    AgreementConfidence,
    Confidence,
    MomentumSentiment,
    PricePattern,
)
from portfolio_core.models.indicators import MomentumResult, ShortTermMomentum

MOMENTUM_WINDOW = 24
FOUR_HOUR_POINTS = 4
PATTERN_POINTS = 4
CONSOLIDATION_RANGE = 2.0

LOW_DISPERSION = 3.0
HIGH_DISPERSION = 8.0

# (score at least, sentiment, confidence); first match wins
BULLISH_BANDS = (
    (60, MomentumSentiment.BULLISH, Confidence.HIGH),
    (30, MomentumSentiment.BULLISH, Confidence.MEDIUM),
    (10, MomentumSentiment.SLIGHTLY_BULLISH, Confidence.LOW),
)
# (score at most, sentiment, confidence)
BEARISH_BANDS = (
    (-30, MomentumSentiment.BEARISH, Confidence.HIGH),
    (-10, MomentumSentiment.BEARISH, Confidence.MEDIUM),
)


def price_pattern(closes: Sequence[float]) -> PricePattern:
    """Classify the last four closes."""
    if len(closes) < PATTERN_POINTS:
        return PricePattern.NEUTRAL
    recent = list(closes[-PATTERN_POINTS:])
    steps = list(zip(recent, recent[1:]))
    if all(b >= a for a, b in steps):
        return PricePattern.UPTREND
    if all(b <= a for a, b in steps):
        return PricePattern.DOWNTREND
    low, high = min(recent), max(recent)
    if (high - low) / low * 100 < CONSOLIDATION_RANGE:
        return PricePattern.CONSOLIDATION
    return PricePattern.MIXED


def _band(score: int) -> tuple[MomentumSentiment, Confidence]:
    for floor, sentiment, confidence in BULLISH_BANDS:
        if score >= floor:
            return sentiment, confidence
    for ceiling, sentiment, confidence in BEARISH_BANDS:
        if score <= ceiling:
            return sentiment, confidence
    if score < 0:
        return MomentumSentiment.SLIGHTLY_BEARISH, Confidence.LOW
    return MomentumSentiment.NEUTRAL, Confidence.LOW


def momentum_score(closes: Sequence[float], changes: Sequence[float]) -> MomentumResult:
    """Score one window. *changes* are the percentage steps between *closes*."""
    arr = np.asarray(changes, dtype=np.float64)
    average = float(np.mean(arr))
    recent = float(arr[-1])
    dispersion = float(np.std(arr))
    pattern = price_pattern(closes)

    score = 0
    reasoning: list[str] = []

    if recent > 2:
        score += 40
        reasoning.append(f"Strong recent momentum ({recent:+.1f}%)")
    elif recent > 0:
        score += 20
        reasoning.append(f"Positive recent momentum ({recent:+.1f}%)")
    elif recent < -2:
        score -= 20
        reasoning.append(f"Negative recent momentum ({recent:.1f}%)")

    if average > 1:
        score += 30
        reasoning.append(f"Strong upward trend ({average:+.1f}% avg)")
    elif average > 0:
        score += 15
        reasoning.append(f"Positive trend ({average:+.1f}% avg)")
    elif average < -1:
        score -= 15
        reasoning.append(f"Downward trend ({average:.1f}% avg)")

    if dispersion < LOW_DISPERSION:
        score += 20
        reasoning.append("Low volatility (stable movement)")
    elif dispersion > HIGH_DISPERSION:
        score -= 10
        reasoning.append("High volatility (unstable)")

    if pattern is PricePattern.UPTREND:
        score += 10
        reasoning.append("Uptrend pattern detected")
    elif pattern is PricePattern.DOWNTREND:
        score -= 10
        reasoning.append("Downtrend pattern detected")

    sentiment, confidence = _band(score)
    return MomentumResult(
        sentiment=sentiment,
        confidence=confidence,
        score=score,
        recent_change=recent,
        average_change=average,
        volatility=dispersion,
        pattern=pattern,
        reasoning=tuple(reasoning),
    )


def agreement(four_hour: MomentumResult, one_day: MomentumResult) -> AgreementConfidence:
    """Confidence from whether the two windows point the same way."""
    highs = [r.confidence is Confidence.HIGH for r in (four_hour, one_day)]
    if four_hour.sentiment is one_day.sentiment:
        if all(highs):
            return AgreementConfidence.VERY_HIGH
        if any(highs):
            return AgreementConfidence.HIGH
        return AgreementConfidence.MEDIUM
    if any(highs):
        return AgreementConfidence.MEDIUM
    return AgreementConfidence.LOW


def short_term_momentum(closes: Sequence[float]) -> ShortTermMomentum | InsufficientData:
    """Score the 4h and 1d windows over the last 24 closes."""
    window = [float(p) for p in closes[-MOMENTUM_WINDOW:]]
    usable = sum(1 for p in window if p > 0)
    if len(window) < MOMENTUM_WINDOW or usable < len(window):
        return InsufficientData("momentum", MOMENTUM_WINDOW, usable)

    arr = np.asarray(window)
    changes = list(np.diff(arr) / arr[:-1] * 100)

    four_hour = momentum_score(window[-FOUR_HOUR_POINTS:], changes[-(FOUR_HOUR_POINTS - 1):])
    one_day = momentum_score(window, changes)
    return ShortTermMomentum(four_hour=four_hour, one_day=one_day, confidence=agreement(four_hour, one_day))
