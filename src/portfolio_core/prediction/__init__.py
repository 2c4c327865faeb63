"""Growth projections and risk assessment for a portfolio."""

from portfolio_core.prediction.forecast import (
    BASE_GROWTH_RATES,
    assess_risk,
    max_drawdown,
    portfolio_volatility,
    predict_portfolio,
    predict_timeframe,
    sharpe_ratio,
)

__all__ = [
    "BASE_GROWTH_RATES",
    "assess_risk",
    "max_drawdown",
    "portfolio_volatility",
    "predict_portfolio",
    "predict_timeframe",
    "sharpe_ratio",
]
