"""Indicator library — pure functions over chronological price series."""

from portfolio_core.indicators.analysis import analyze_asset
from portfolio_core.indicators.core import bollinger_bands, ema, ema_series, macd, rsi
from portfolio_core.indicators.levels import (
    find_significant_level,
    risk_metrics,
    support_resistance,
)
from portfolio_core.indicators.momentum import (
    agreement,
    momentum_score,
    price_pattern,
    short_term_momentum,
)
from portfolio_core.indicators.scoring import (
    ema_strength,
    holding_period,
    quality_score,
    volume_analysis,
)

__all__ = [
    "agreement",
    "analyze_asset",
    "bollinger_bands",
    "ema",
    "ema_series",
    "ema_strength",
    "find_significant_level",
    "holding_period",
    "macd",
    "momentum_score",
    "price_pattern",
    "quality_score",
    "risk_metrics",
    "rsi",
    "short_term_momentum",
    "support_resistance",
    "volume_analysis",
]
