"""Stop-loss sizing per held position."""

from __future__ import annotations

import structlog

from portfolio_core.config.schema import EngineSettings
from portfolio_core.models.enums import RiskProfile, StopLossRisk, Urgency
from portfolio_core.models.portfolio import Portfolio, PortfolioAsset
from portfolio_core.models.recommendation import (
    StopLossAnalysis,
    StopLossRecommendation,
    StopLossSummary,
)

log = structlog.get_logger("stoploss")

BASE_STOP_PERCENT: dict[RiskProfile, float] = {
    RiskProfile.CONSERVATIVE: 8,
    RiskProfile.BALANCED: 12,
    RiskProfile.AGGRESSIVE: 18,
    RiskProfile.DEGEN: 25,
}

MIN_STOP_PERCENT = 5.0
MAX_STOP_PERCENT = 50.0

SMALL_CAP = 1_000_000_000
MID_CAP = 10_000_000_000
LARGE_CAP = 100_000_000_000

# urgency points -> bucket, highest first
URGENCY_BUCKETS = ((4, Urgency.HIGH), (2, Urgency.MEDIUM))

SUGGESTED_ACTIONS: dict[tuple[Urgency, bool], str] = {
    (Urgency.HIGH, True): "Set stop-loss immediately or consider reducing position size",
    (Urgency.HIGH, False): "Set stop-loss immediately to protect capital",
    (Urgency.MEDIUM, True): "Monitor closely and set stop-loss if trend continues",
    (Urgency.MEDIUM, False): "Set stop-loss within 24-48 hours",
    (Urgency.LOW, True): "Optional stop-loss for risk management",
    (Urgency.LOW, False): "Set stop-loss for peace of mind",
}

PROFILE_ADVICE: dict[RiskProfile, tuple[str, ...]] = {
    RiskProfile.CONSERVATIVE: (
        "Use tight stop-losses (5-10%) to preserve capital",
        "Consider trailing stop-losses for winning positions",
    ),
    RiskProfile.BALANCED: (
        "Balance stop-loss protection with growth potential",
        "Use 10-15% stop-losses for most positions",
    ),
    RiskProfile.AGGRESSIVE: (
        "Allow positions to breathe with 15-20% stop-losses",
        "Focus on trend following over strict stop-losses",
    ),
    RiskProfile.DEGEN: (
        "Use wide stop-losses (20-30%) to let winners run",
        "Focus on momentum over strict risk management",
        "Consider position sizing over stop-losses",
    ),
}

STRATEGIES: dict[RiskProfile, str] = {
    RiskProfile.CONSERVATIVE: (
        "Conservative: Use tight 5-10% stop-losses with trailing stops for winners."
        " Focus on capital preservation."
    ),
    RiskProfile.BALANCED: (
        "Balanced: Use 10-15% stop-losses with periodic reviews."
        " Balance protection with growth potential."
    ),
    RiskProfile.AGGRESSIVE: (
        "Aggressive: Use 15-20% stop-losses and focus on trend following. Let positions breathe."
    ),
    RiskProfile.DEGEN: (
        "Degen: Use wide 20-30% stop-losses and focus on momentum. Position sizing over strict stops."
    ),
}


def stop_loss_percent(asset: PortfolioAsset, profile: RiskProfile) -> float:
    """Stop distance below the current price, in percent, clamped to [5, 50]."""
    volatility = asset.volatility
    percent = BASE_STOP_PERCENT[profile]

    if volatility > 0.10:
        percent *= 1.2
    elif volatility < 0.05:
        percent *= 0.8

    # Smaller caps get wider stops
    if asset.market_cap < SMALL_CAP:
        percent *= 1.3
    elif asset.market_cap < MID_CAP:
        percent *= 1.1
    elif asset.market_cap > LARGE_CAP:
        percent *= 0.9

    # Larger positions get tighter stops
    if asset.allocation > 20:
        percent *= 0.8
    elif asset.allocation < 5:
        percent *= 1.2

    # Recent winners get room, recent losers do not
    if asset.change_24h > 10:
        percent *= 1.2
    elif asset.change_24h < -10:
        percent *= 0.8

    return min(MAX_STOP_PERCENT, max(MIN_STOP_PERCENT, percent))


def urgency_for(asset: PortfolioAsset) -> Urgency:
    volatility = asset.volatility
    points = 0

    if volatility > 0.15:
        points += 2
    elif volatility > 0.10:
        points += 1

    if asset.allocation > 25:
        points += 2
    elif asset.allocation > 15:
        points += 1

    if asset.change_24h < -15:
        points += 2
    elif asset.change_24h < -5:
        points += 1

    if asset.market_cap < SMALL_CAP:
        points += 1

    for minimum, urgency in URGENCY_BUCKETS:
        if points >= minimum:
            return urgency
    return Urgency.LOW


def risk_category(stop_percent: float, volatility: float) -> StopLossRisk:
    score = stop_percent / MAX_STOP_PERCENT + volatility * 2
    if score < 0.4:
        return StopLossRisk.CONSERVATIVE
    if score < 0.7:
        return StopLossRisk.MODERATE
    return StopLossRisk.AGGRESSIVE


def _reason(asset: PortfolioAsset) -> str:
    if asset.change_24h < -10:
        return f"{asset.symbol} has declined {abs(asset.change_24h):.1f}% in 24h"
    if asset.market_cap < SMALL_CAP:
        return f"{asset.symbol} is a small-cap asset with high volatility"
    if asset.allocation > 20:
        return f"{asset.symbol} represents a large position ({asset.allocation:.1f}%)"
    return f"{asset.symbol} requires risk management based on current market conditions"


def stop_loss_for(asset: PortfolioAsset, risk_profile: RiskProfile | str) -> StopLossRecommendation:
    """Stop-loss recommendation for one non-stable position."""
    profile = RiskProfile.parse(risk_profile)
    percent = stop_loss_percent(asset, profile)
    urgency = urgency_for(asset)

    return StopLossRecommendation(
        asset_id=asset.id,
        symbol=asset.symbol,
        current_price=asset.price,
        stop_price=asset.price * (1 - percent / 100),
        stop_loss_percentage=percent,
        urgency=urgency,
        risk_category=risk_category(percent, asset.volatility),
        reason=_reason(asset),
        suggested_action=SUGGESTED_ACTIONS[(urgency, profile is RiskProfile.DEGEN)],
    )


def _summary(recommendations: list[StopLossRecommendation]) -> StopLossSummary:
    counts = {u: 0 for u in Urgency}
    for rec in recommendations:
        counts[rec.urgency] += 1
    average = (
        sum(r.stop_loss_percentage for r in recommendations) / len(recommendations)
        if recommendations
        else 0.0
    )
    return StopLossSummary(
        average_stop_loss=average,
        high_urgency=counts[Urgency.HIGH],
        medium_urgency=counts[Urgency.MEDIUM],
        low_urgency=counts[Urgency.LOW],
    )


def _general_advice(profile: RiskProfile, summary: StopLossSummary) -> tuple[str, ...]:
    advice = list(PROFILE_ADVICE[profile])
    if summary.high_urgency > 0:
        advice.append(f"Address {summary.high_urgency} high-risk position(s) first")
    if summary.average_stop_loss > 20:
        advice.append("Portfolio has wide stop-losses - suitable for volatile markets")
    elif 0 < summary.average_stop_loss < 10:
        advice.append("Portfolio has tight stop-losses - good for capital preservation")
    advice.append("Review stop-losses weekly and adjust based on market conditions")
    advice.append("Consider using trailing stop-losses for profitable positions")
    return tuple(advice)


def analyze_stop_losses(
    portfolio: Portfolio,
    settings: EngineSettings | None = None,
) -> StopLossAnalysis:
    """Stop-loss recommendations for every held position except the stable reserve."""
    settings = settings or EngineSettings()
    profile = RiskProfile.parse(portfolio.risk_profile)

    recommendations = [
        stop_loss_for(asset, profile)
        for asset in portfolio.assets
        if not settings.is_stable(asset.id, asset.symbol)
    ]
    summary = _summary(recommendations)

    log.info(
        "stop_losses_analyzed",
        portfolio=portfolio.id,
        positions=len(recommendations),
        high_urgency=summary.high_urgency,
        average_stop=round(summary.average_stop_loss, 2),
    )

    return StopLossAnalysis(
        risk_profile=profile,
        recommendations=tuple(recommendations),
        summary=summary,
        general_advice=_general_advice(profile, summary),
    )


def stop_loss_strategy(risk_profile: RiskProfile | str) -> str:
    return STRATEGIES[RiskProfile.parse(risk_profile)]
