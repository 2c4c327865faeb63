"""Technical indicators — pure functions on price series.

Every function takes chronological closes and returns either a value or an
``InsufficientData`` marker when the series is shorter than the indicator's
minimum window.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from portfolio_core.errors import InsufficientData
from portfolio_core.models.enums import BandPosition
from portfolio_core.models.indicators import BollingerResult, MACDResult

SQUEEZE_WIDTH = 0.10


def ema_series(closes: Sequence[float], period: int) -> list[float]:
    """Running EMA seeded with the first price, one value per close."""
    if not closes:
        return []
    multiplier = 2 / (period + 1)
    values = [float(closes[0])]
    for price in closes[1:]:
        values.append(price * multiplier + values[-1] * (1 - multiplier))
    return values


def ema(closes: Sequence[float], period: int) -> float | InsufficientData:
    """Exponential moving average of the whole series.

    Needs at least *period* closes.
    """
    if len(closes) < period:
        return InsufficientData("ema", period, len(closes))
    return ema_series(closes, period)[-1]


def rsi(closes: Sequence[float], period: int = 14) -> float | InsufficientData:
    """Relative Strength Index (Wilder's smoothing).

    Returns a value in [0, 100], or InsufficientData if there are fewer than
    ``period + 1`` closes. A flat series scores 50.
    """
    if len(closes) < period + 1:
        return InsufficientData("rsi", period + 1, len(closes))

    deltas = [closes[i] - closes[i - 1] for i in range(1, len(closes))]

    # Seed with simple average of first *period* changes
    avg_gain = sum(d for d in deltas[:period] if d > 0) / period
    avg_loss = sum(-d for d in deltas[:period] if d < 0) / period

    for d in deltas[period:]:
        avg_gain = (avg_gain * (period - 1) + (d if d > 0 else 0.0)) / period
        avg_loss = (avg_loss * (period - 1) + (-d if d < 0 else 0.0)) / period

    if avg_loss == 0:
        return 50.0 if avg_gain == 0 else 100.0
    rs = avg_gain / avg_loss
    return 100 - 100 / (1 + rs)


def macd(
    closes: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MACDResult | InsufficientData:
    """Moving Average Convergence Divergence.

    MACD line = EMA(fast) - EMA(slow), signal = EMA(signal) of the line,
    histogram = line - signal. Needs ``slow + signal`` closes.
    """
    required = slow + signal
    if len(closes) < required:
        return InsufficientData("macd", required, len(closes))

    fast_values = ema_series(closes, fast)
    slow_values = ema_series(closes, slow)
    line = [f - s for f, s in zip(fast_values, slow_values)]
    signal_line = ema_series(line, signal)

    return MACDResult(
        line=line[-1],
        signal=signal_line[-1],
        histogram=line[-1] - signal_line[-1],
    )


def bollinger_bands(
    closes: Sequence[float],
    period: int = 20,
    std_multiplier: float = 2,
) -> BollingerResult | InsufficientData:
    """Bollinger Bands (SMA +/- std_multiplier * population stdev).

    %B is 0 at the lower band and 1 at the upper band; a collapsed band
    reports 0.5. Squeeze when the band is narrower than 10% of the mean.
    """
    if len(closes) < period:
        return InsufficientData("bollinger", period, len(closes))

    window = np.asarray(closes[-period:], dtype=np.float64)
    middle = float(np.mean(window))
    offset = float(np.std(window)) * std_multiplier
    upper, lower = middle + offset, middle - offset
    price = float(closes[-1])

    width = upper - lower
    percent_b = (price - lower) / width if width > 0 else 0.5
    if price > upper:
        position = BandPosition.ABOVE
    elif price < lower:
        position = BandPosition.BELOW
    else:
        position = BandPosition.INSIDE

    return BollingerResult(
        upper=upper,
        middle=middle,
        lower=lower,
        percent_b=percent_b,
        is_squeeze=middle > 0 and width / middle < SQUEEZE_WIDTH,
        position=position,
    )
