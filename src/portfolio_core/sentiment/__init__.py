"""Market sentiment scoring."""

from portfolio_core.sentiment.scorer import score_market, trading_recommendations

__all__ = ["score_market", "trading_recommendations"]
