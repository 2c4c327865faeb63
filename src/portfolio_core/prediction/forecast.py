"""Heuristic growth forecast.

Risk is read from the portfolio's own 24h moves: dispersion of absolute
moves is the volatility, allocation-weighted moves approximate drawdown,
and the recorded P/L gives a Sharpe-style ratio. Each timeframe then gets a
profile base rate, damped by volatility, spread into three scenarios whose
width depends on the risk level.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import numpy as np
import structlog

from portfolio_core.config.schema import EngineSettings
from portfolio_core.models.enums import RiskLevel, RiskProfile, Timeframe
from portfolio_core.models.portfolio import Portfolio
from portfolio_core.models.prediction import (
    GrowthPrediction,
    PortfolioPrediction,
    RiskAssessment,
    Scenario,
)

log = structlog.get_logger("prediction")

DEFAULT_VOLATILITY = 0.05
MAX_DRAWDOWN_CAP = 0.5
RISK_FREE_RATE = 0.02

# Risk score weights: volatility, drawdown, Sharpe shortfall
RISK_WEIGHTS = (0.4, 0.4, 0.2)
LOW_RISK_SCORE = 0.15
MEDIUM_RISK_SCORE = 0.3

# Growth in percent over the whole timeframe
BASE_GROWTH_RATES: dict[RiskProfile, dict[Timeframe, float]] = {
    RiskProfile.CONSERVATIVE: {
        Timeframe.ONE_WEEK: 0.2,
        Timeframe.ONE_MONTH: 0.8,
        Timeframe.THREE_MONTHS: 2.5,
        Timeframe.SIX_MONTHS: 5.0,
        Timeframe.ONE_YEAR: 10.0,
    },
    RiskProfile.BALANCED: {
        Timeframe.ONE_WEEK: 0.4,
        Timeframe.ONE_MONTH: 1.5,
        Timeframe.THREE_MONTHS: 4.5,
        Timeframe.SIX_MONTHS: 9.0,
        Timeframe.ONE_YEAR: 18.0,
    },
    RiskProfile.AGGRESSIVE: {
        Timeframe.ONE_WEEK: 0.8,
        Timeframe.ONE_MONTH: 3.0,
        Timeframe.THREE_MONTHS: 9.0,
        Timeframe.SIX_MONTHS: 18.0,
        Timeframe.ONE_YEAR: 35.0,
    },
    RiskProfile.DEGEN: {
        Timeframe.ONE_WEEK: 1.6,
        Timeframe.ONE_MONTH: 6.0,
        Timeframe.THREE_MONTHS: 18.0,
        Timeframe.SIX_MONTHS: 36.0,
        Timeframe.ONE_YEAR: 70.0,
    },
}

# risk level -> (optimistic, pessimistic) multiplier on realistic growth
SCENARIO_SPREAD = {
    RiskLevel.LOW: (1.3, 0.6),
    RiskLevel.MEDIUM: (1.5, 0.4),
    RiskLevel.HIGH: (1.8, 0.2),
}

MIN_VOLATILITY_ADJUSTMENT = 0.5
VOLATILITY_DRAG = 0.3
CONFIDENCE_RANGE = (20.0, 70.0)
HIGH_VOLATILITY = 0.1
DCA_GROWTH = 20.0
CROWDED_PORTFOLIO = 5


def portfolio_volatility(portfolio: Portfolio) -> float:
    """Population std of absolute 24h moves, as fractions."""
    if not portfolio.assets:
        return DEFAULT_VOLATILITY
    moves = np.abs([a.change_24h for a in portfolio.assets]) / 100
    return float(np.std(moves))


def max_drawdown(portfolio: Portfolio) -> float:
    """Twice the allocation-weighted absolute 24h move, capped at one half."""
    weighted = sum(abs(a.change_24h) / 100 * a.allocation / 100 for a in portfolio.assets)
    return min(MAX_DRAWDOWN_CAP, weighted * 2)


def sharpe_ratio(portfolio: Portfolio, volatility: float | None = None) -> float:
    if volatility is None:
        volatility = portfolio_volatility(portfolio)
    if volatility == 0:
        return 0.0
    return (portfolio.total_profit_loss_percentage / 100 - RISK_FREE_RATE) / volatility


def assess_risk(portfolio: Portfolio) -> RiskAssessment:
    volatility = portfolio_volatility(portfolio)
    drawdown = max_drawdown(portfolio)
    sharpe = sharpe_ratio(portfolio, volatility)

    w_vol, w_dd, w_sharpe = RISK_WEIGHTS
    score = volatility * w_vol + drawdown * w_dd + max(0.0, 1 - sharpe) * w_sharpe
    if score < LOW_RISK_SCORE:
        level = RiskLevel.LOW
    elif score < MEDIUM_RISK_SCORE:
        level = RiskLevel.MEDIUM
    else:
        level = RiskLevel.HIGH

    return RiskAssessment(volatility=volatility, max_drawdown=drawdown, sharpe_ratio=sharpe, risk_level=level)


def _has_stable(portfolio: Portfolio, settings: EngineSettings) -> bool:
    return any(settings.is_stable(a.id, a.symbol) for a in portfolio.assets)


def _factors(portfolio: Portfolio, timeframe: Timeframe, volatility: float, has_stable: bool) -> tuple[str, ...]:
    factors = []
    if volatility > HIGH_VOLATILITY:
        factors.append("High market volatility may impact growth")
    if not has_stable:
        factors.append("Missing stablecoin position increases risk")

    if timeframe is Timeframe.ONE_WEEK:
        factors.append("Short-term predictions are less reliable")
    elif timeframe is Timeframe.ONE_YEAR:
        factors.append("Long-term predictions based on historical crypto cycles")

    if portfolio.risk_profile in (RiskProfile.AGGRESSIVE, RiskProfile.DEGEN):
        factors.append("Aggressive portfolio may see higher volatility")
    elif portfolio.risk_profile is RiskProfile.CONSERVATIVE:
        factors.append("Conservative allocation provides stability")

    factors.append("Crypto markets are highly unpredictable")
    factors.append("Past performance does not guarantee future results")
    if timeframe is Timeframe.ONE_YEAR:
        factors.append("Annual predictions are speculative due to crypto market cycles")
    return tuple(factors)


def predict_timeframe(
    portfolio: Portfolio,
    timeframe: Timeframe,
    risk: RiskAssessment,
    now: datetime,
    settings: EngineSettings | None = None,
) -> GrowthPrediction:
    """Project the portfolio value at the end of *timeframe*."""
    settings = settings or EngineSettings()
    days = timeframe.days
    adjustment = max(MIN_VOLATILITY_ADJUSTMENT, 1 - risk.volatility * VOLATILITY_DRAG)
    realistic = BASE_GROWTH_RATES[portfolio.risk_profile][timeframe] * adjustment
    optimistic_mult, pessimistic_mult = SCENARIO_SPREAD[risk.risk_level]

    def scenario(growth: float) -> Scenario:
        return Scenario(value=portfolio.total_value * (1 + growth / 100), growth=growth)

    low, high = CONFIDENCE_RANGE
    confidence = max(low, min(high, 60 - risk.volatility * 80 - days * 0.3))
    expected = scenario(realistic)

    return GrowthPrediction(
        timeframe=timeframe,
        target_date=now + timedelta(days=days),
        predicted_value=expected.value,
        predicted_growth=expected.growth,
        confidence=confidence,
        optimistic=scenario(realistic * optimistic_mult),
        realistic=expected,
        pessimistic=scenario(realistic * pessimistic_mult),
        factors=_factors(portfolio, timeframe, risk.volatility, _has_stable(portfolio, settings)),
    )


def _recommendations(
    portfolio: Portfolio,
    risk: RiskAssessment,
    predictions: tuple[GrowthPrediction, ...],
    has_stable: bool,
) -> tuple[str, ...]:
    recommendations = []
    if risk.risk_level is RiskLevel.HIGH:
        recommendations.append("Consider reducing position sizes to manage risk")
        recommendations.append("Monitor portfolio more frequently during volatile periods")

    one_year = next((p for p in predictions if p.timeframe is Timeframe.ONE_YEAR), None)
    if one_year is not None and one_year.predicted_growth > DCA_GROWTH:
        recommendations.append("Moderate growth potential - consider dollar-cost averaging")
    if not has_stable:
        recommendations.append("Add stablecoin position for risk management")
    if len(portfolio.assets) > CROWDED_PORTFOLIO:
        recommendations.append("Consider rebalancing to maintain target allocations")
    return tuple(recommendations)


def predict_portfolio(
    portfolio: Portfolio,
    now: datetime,
    settings: EngineSettings | None = None,
) -> PortfolioPrediction:
    """Risk assessment plus one projection per timeframe, shortest first."""
    settings = settings or EngineSettings()
    risk = assess_risk(portfolio)
    predictions = tuple(predict_timeframe(portfolio, tf, risk, now, settings) for tf in Timeframe)

    log.info(
        "portfolio_prediction",
        portfolio=portfolio.id,
        risk_level=risk.risk_level.value,
        volatility=round(risk.volatility, 4),
        one_year_growth=round(predictions[-1].predicted_growth, 2),
    )
    return PortfolioPrediction(
        current_value=portfolio.total_value,
        as_of=now,
        predictions=predictions,
        risk_assessment=risk,
        recommendations=_recommendations(portfolio, risk, predictions, _has_stable(portfolio, settings)),
    )
