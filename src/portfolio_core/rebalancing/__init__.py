"""Drift-based rebalancing analysis."""

from portfolio_core.rebalancing.analyzer import (
    PROFILE_SETTINGS,
    add_months,
    analyze_rebalancing,
    frequency_recommendation,
    holding_period_recommendation,
    next_review_date,
    target_allocation,
    volatility_damping,
)

__all__ = [
    "PROFILE_SETTINGS",
    "add_months",
    "analyze_rebalancing",
    "frequency_recommendation",
    "holding_period_recommendation",
    "next_review_date",
    "target_allocation",
    "volatility_damping",
]
