"""Support/resistance detection and risk/reward position sizing."""

from __future__ import annotations

import math
from typing import Sequence

import structlog

from portfolio_core.errors import InsufficientData
from portfolio_core.models.indicators import RiskMetrics, SupportResistance

log = structlog.get_logger("indicators.levels")

MIN_SWING = 0.005
MIN_TOLERANCE = 0.005
MAX_TOLERANCE = 0.015
FALLBACK_DISTANCE = 0.05
GOOD_RISK_REWARD = 2.0
MIN_RISK_PER_UNIT = 1e-9


def _find_extrema(prices: Sequence[float]) -> tuple[list[float], list[float]]:
    """Local highs and lows over 2 candles each side.

    An extreme must also stand MIN_SWING away from the far end of its
    neighbourhood, so flat chop does not register.
    """
    highs: list[float] = []
    lows: list[float] = []
    for i in range(2, len(prices) - 2):
        current = prices[i]
        if current <= 0:
            continue
        neighbours = (prices[i - 2], prices[i - 1], prices[i + 1], prices[i + 2])
        if all(current > n for n in neighbours):
            if (current - min(neighbours)) / current >= MIN_SWING:
                highs.append(current)
        elif all(current < n for n in neighbours):
            if (max(neighbours) - current) / current >= MIN_SWING:
                lows.append(current)
    return highs, lows


def _tolerance(prices: Sequence[float]) -> float:
    """Cluster tolerance scaled to the window's price range, ignoring bad points."""
    usable = [p for p in prices if p > 0]
    mean = sum(usable) / len(usable)
    price_range = (max(usable) - min(usable)) / mean
    return min(MAX_TOLERANCE, max(MIN_TOLERANCE, price_range / 10))


def find_significant_level(prices: Sequence[float], tolerance: float) -> float | None:
    """Mean of the largest cluster of *prices*, or None when empty.

    A price joins the first group whose mean is within *tolerance*
    (relative); ties between equally large groups go to the earliest.
    """
    groups: list[list[float]] = []
    for price in prices:
        for group in groups:
            avg = sum(group) / len(group)
            if abs(price - avg) / avg < tolerance:
                group.append(price)
                break
        else:
            groups.append([price])

    if not groups:
        return None
    largest = max(groups, key=len)
    return sum(largest) / len(largest)


def support_resistance(
    closes: Sequence[float],
    lookback: int = 100,
) -> SupportResistance | InsufficientData:
    """Significant support and resistance over the trailing *lookback* closes.

    Always returns support < current price < resistance: a level on the
    wrong side of price (or no level at all) is replaced by a 5% fallback.
    """
    if len(closes) < lookback:
        return InsufficientData("support_resistance", lookback, len(closes))

    window = [float(p) for p in closes[-lookback:]]
    price = window[-1]
    if price <= 0:
        return InsufficientData("support_resistance", lookback, sum(1 for p in window if p > 0))
    tolerance = _tolerance(window)
    highs, lows = _find_extrema(window)

    resistance = find_significant_level(highs, tolerance)
    support = find_significant_level(lows, tolerance)

    resistance_fallback = resistance is None or resistance <= price
    support_fallback = support is None or support >= price
    if resistance_fallback:
        resistance = price * (1 + FALLBACK_DISTANCE)
    if support_fallback:
        support = price * (1 - FALLBACK_DISTANCE)

    return SupportResistance(
        support=support,
        resistance=resistance,
        distance_to_support=(price - support) / price * 100,
        distance_to_resistance=(resistance - price) / price * 100,
        risk_reward_ratio=(resistance - price) / (price - support),
        support_is_fallback=support_fallback,
        resistance_is_fallback=resistance_fallback,
    )


def risk_metrics(
    current_price: float,
    support: float,
    resistance: float,
    account_size: float,
    max_risk_percent: float = 2,
    max_units: int = 1000,
) -> RiskMetrics:
    """Fixed-fractional position sizing with the support as stop.

    risk_per_unit   = price - support
    reward_per_unit = resistance - price
    units           = floor(account * max_risk% / risk_per_unit), capped

    A zero or negative risk per unit is a degenerate ratio: the result is
    flagged and sized at 0 units with a 0 ratio.
    """
    risk_per_unit = current_price - support
    reward_per_unit = resistance - current_price
    max_risk_amount = account_size * (max_risk_percent / 100)

    if risk_per_unit <= MIN_RISK_PER_UNIT or not math.isfinite(risk_per_unit):
        log.warning(
            "degenerate_ratio",
            price=current_price,
            support=support,
            risk_per_unit=risk_per_unit,
        )
        return RiskMetrics(
            stop_loss=support,
            take_profit=resistance,
            risk_per_unit=risk_per_unit,
            reward_per_unit=reward_per_unit,
            risk_reward_ratio=0.0,
            recommended_units=0,
            max_risk_amount=max_risk_amount,
            is_good_risk_reward=False,
            degenerate=True,
        )

    ratio = reward_per_unit / risk_per_unit
    units = min(math.floor(max_risk_amount / risk_per_unit), max_units)

    return RiskMetrics(
        stop_loss=support,
        take_profit=resistance,
        risk_per_unit=risk_per_unit,
        reward_per_unit=reward_per_unit,
        risk_reward_ratio=ratio,
        recommended_units=max(units, 0),
        max_risk_amount=max_risk_amount,
        is_good_risk_reward=ratio >= GOOD_RISK_REWARD,
    )
