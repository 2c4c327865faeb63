"""Portfolio construction and price refresh."""

from portfolio_core.portfolio.valuation import build_portfolio, revalue_portfolio

__all__ = ["build_portfolio", "revalue_portfolio"]
