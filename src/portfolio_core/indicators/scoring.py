"""Derived scores: volume health, quality score, holding period."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from portfolio_core.errors import InsufficientData
from portfolio_core.models.enums import Confidence, HoldingPeriodBucket
from portfolio_core.models.indicators import HoldingPeriod, VolumeAnalysis

MIN_VOLUME_HISTORY = 4
VOLUME_INCREASING_RATIO = 1.2
VOLUME_TRENDING_CHANGE = 10.0

# Quality score rule table: (threshold, points), first match wins.
EMA_STRENGTH_POINTS = ((5.0, 30), (2.0, 20), (0.0, 10))
RSI_OPTIMAL = (35.0, 65.0)
RSI_HEALTHY = (30.0, 70.0)
RSI_OPTIMAL_POINTS = 25
RSI_HEALTHY_POINTS = 15
VOLUME_HEALTHY_POINTS = 20
MARKET_CAP_POINTS = ((100_000_000, 15), (10_000_000, 10))
MOMENTUM_POINTS = ((5.0, 10), (0.0, 5))

LARGE_CAP = 1_000_000_000
FAST_MOVE_CHANGE = 10.0


def _first_match(value: float, table: Sequence[tuple[float, int]]) -> int:
    for threshold, points in table:
        if value > threshold:
            return points
    return 0


def volume_analysis(
    volume_24h: float,
    volumes: Sequence[float] | None,
) -> VolumeAnalysis | InsufficientData:
    """Compare current volume with its trailing average.

    ratio   = volume_24h / mean(volumes)
    change  = % change of the newer half of *volumes* against the older half
    """
    available = len(volumes) if volumes else 0
    if available < MIN_VOLUME_HISTORY:
        return InsufficientData("volume", MIN_VOLUME_HISTORY, available)

    arr = np.asarray(volumes, dtype=np.float64)
    average = float(np.mean(arr))
    if average <= 0:
        return InsufficientData("volume", MIN_VOLUME_HISTORY, 0)

    half = len(arr) // 2
    older = float(np.mean(arr[:half]))
    newer = float(np.mean(arr[half:]))
    change = (newer - older) / older * 100 if older > 0 else 0.0
    ratio = volume_24h / average

    return VolumeAnalysis(
        ratio=ratio,
        change_percent=change,
        is_increasing=ratio > VOLUME_INCREASING_RATIO,
        is_trending_up=change > VOLUME_TRENDING_CHANGE,
    )


def ema_strength(ema_50: float | None, ema_200: float | None) -> float | None:
    """EMA50 distance above EMA200 in percent."""
    if ema_50 is None or ema_200 is None or ema_200 == 0:
        return None
    return (ema_50 - ema_200) / ema_200 * 100


def quality_score(
    strength: float | None,
    rsi_value: float | None,
    volume_healthy: bool,
    market_cap: float,
    change_24h: float,
) -> float:
    """Weighted 0-100 composite.

    EMA strength 30, RSI health 25, volume health 20, market cap tier 15,
    24h momentum 10. Missing inputs contribute nothing.
    """
    score = 0
    if strength is not None:
        score += _first_match(strength, EMA_STRENGTH_POINTS)

    if rsi_value is not None:
        if RSI_OPTIMAL[0] < rsi_value < RSI_OPTIMAL[1]:
            score += RSI_OPTIMAL_POINTS
        elif RSI_HEALTHY[0] < rsi_value < RSI_HEALTHY[1]:
            score += RSI_HEALTHY_POINTS

    if volume_healthy:
        score += VOLUME_HEALTHY_POINTS

    score += _first_match(market_cap, MARKET_CAP_POINTS)
    score += _first_match(change_24h, MOMENTUM_POINTS)
    return float(min(score, 100))


def holding_period(
    strength: float | None,
    change_24h: float,
    market_cap: float,
) -> HoldingPeriod:
    """Suggested holding window from trend strength and recent movement."""
    period = HoldingPeriodBucket.MEDIUM
    confidence = Confidence.MEDIUM
    reasoning: list[str] = []

    if strength is not None:
        if strength > 5:
            period, confidence = HoldingPeriodBucket.SHORT, Confidence.HIGH
            reasoning.append("Strong EMA crossover suggests quick momentum")
        elif strength > 2:
            period, confidence = HoldingPeriodBucket.MEDIUM, Confidence.MEDIUM
            reasoning.append("Moderate EMA strength indicates steady trend")
        else:
            period, confidence = HoldingPeriodBucket.EXTENDED, Confidence.LOW
            reasoning.append("Weak EMA crossover may need more time to develop")
    else:
        reasoning.append("EMA trend unavailable, using default window")

    if change_24h > FAST_MOVE_CHANGE:
        period = HoldingPeriodBucket.SHORT
        reasoning.append("High volatility suggests quick moves")

    if market_cap > LARGE_CAP:
        reasoning.append("Large cap stability supports longer holds")

    return HoldingPeriod(period=period, confidence=confidence, reasoning=tuple(reasoning))
