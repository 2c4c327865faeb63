"""Portfolio drift analysis and rebalancing recommendations."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Sequence

import structlog

from portfolio_core.allocation.engine import base_allocation
from portfolio_core.config.schema import EngineSettings
from portfolio_core.models.enums import (
    RebalanceFrequency,
    RebalanceType,
    RiskProfile,
    TradeAction,
    Urgency,
)
from portfolio_core.models.portfolio import Portfolio, PortfolioAsset
from portfolio_core.models.recommendation import AssetRebalance, RebalancingRecommendation

log = structlog.get_logger("rebalancing")


@dataclass(frozen=True)
class RebalanceSettings:
    frequency: RebalanceFrequency
    threshold: float  # per-asset drift before a trade is suggested


PROFILE_SETTINGS: dict[RiskProfile, RebalanceSettings] = {
    RiskProfile.CONSERVATIVE: RebalanceSettings(RebalanceFrequency.QUARTERLY, 5.0),
    RiskProfile.BALANCED: RebalanceSettings(RebalanceFrequency.QUARTERLY, 7.0),
    RiskProfile.AGGRESSIVE: RebalanceSettings(RebalanceFrequency.MONTHLY, 10.0),
    RiskProfile.DEGEN: RebalanceSettings(RebalanceFrequency.WEEKLY, 15.0),
}


@dataclass(frozen=True)
class DriftBand:
    above: float
    type: RebalanceType
    urgency: Urgency
    reason: str
    actions: tuple[str, ...]


STANDARD_BANDS = (
    DriftBand(
        15, RebalanceType.REBALANCE, Urgency.HIGH,
        "Significant portfolio drift detected. Major rebalancing recommended to maintain risk profile.",
        (
            "Review all asset allocations",
            "Consider selling over-weighted positions",
            "Add to under-weighted positions",
            "Monitor for 1-2 weeks before executing",
        ),
    ),
    DriftBand(
        10, RebalanceType.REBALANCE, Urgency.MEDIUM,
        "Moderate portfolio drift. Rebalancing recommended to optimize allocation.",
        (
            "Focus on largest allocation drifts",
            "Consider dollar-cost averaging",
            "Review within 1 week",
        ),
    ),
    DriftBand(
        5, RebalanceType.PARTIAL_REBALANCE, Urgency.MEDIUM,
        "Minor portfolio drift. Consider selective rebalancing.",
        (
            "Focus on assets with the largest drift",
            "Consider gradual adjustments",
            "Monitor for 2-3 weeks",
        ),
    ),
)

# Degen portfolios drift on purpose; only extreme drift triggers action
DEGEN_BANDS = (
    DriftBand(
        40, RebalanceType.REBALANCE, Urgency.MEDIUM,
        "Extreme drift from degen targets. Rotate out of the most over-weighted positions.",
        (
            "Trim the largest winners back toward target",
            "Rotate proceeds into under-weighted momentum plays",
            "Re-check narratives before adding new positions",
        ),
    ),
    DriftBand(
        25, RebalanceType.PARTIAL_REBALANCE, Urgency.LOW,
        "Noticeable drift from degen targets. Consider trimming outsized positions.",
        (
            "Take partial profits on the largest positions",
            "Keep momentum positions running",
        ),
    ),
    DriftBand(
        15, RebalanceType.HOLD, Urgency.LOW,
        "Drift is within degen tolerance. Let positions run.",
        (
            "Let winners run",
            "Watch for momentum fading",
        ),
    ),
)

HOLD_BAND = DriftBand(
    0, RebalanceType.HOLD, Urgency.LOW,
    "Portfolio is well-balanced. No immediate rebalancing needed.",
    (
        "Continue monitoring monthly",
        "Review quarterly as scheduled",
        "Focus on swing trade opportunities",
    ),
)

MISSING_STABLE_ACTION = "Consider adding a stablecoin reserve for capital preservation"

CUT_LOSS_CHANGE = -15.0
CUT_LOSS_PROFIT_LOSS = -30.0

MIN_VOLATILITY_DAMPING = 0.5

FREQUENCY_TEXT: dict[RiskProfile, str] = {
    RiskProfile.CONSERVATIVE: (
        "Quarterly rebalancing recommended for conservative portfolios to maintain"
        " stability while avoiding excessive trading costs."
    ),
    RiskProfile.BALANCED: (
        "Quarterly rebalancing strikes the right balance between maintaining"
        " allocation targets and minimizing transaction costs."
    ),
    RiskProfile.AGGRESSIVE: (
        "Monthly rebalancing may be appropriate for aggressive portfolios, but monitor"
        " trading costs and consider threshold-based rebalancing."
    ),
    RiskProfile.DEGEN: (
        "Weekly reviews suit degen portfolios. Rebalance only on extreme drift and let"
        " momentum positions run between reviews."
    ),
}

HOLDING_PERIOD_TEXT: dict[RiskProfile, str] = {
    RiskProfile.CONSERVATIVE: (
        'Long-term holding (6+ months) recommended for core positions. Focus on'
        ' "time in the market" over timing.'
    ),
    RiskProfile.BALANCED: (
        "Medium-term holding (3-6 months) with periodic rebalancing. Consider swing"
        " trading with 10-20% of portfolio."
    ),
    RiskProfile.AGGRESSIVE: (
        "Short to medium-term holding (1-3 months) with active swing trading"
        " opportunities. Monitor for major trend changes."
    ),
    RiskProfile.DEGEN: (
        "Short-term holding (days to weeks) driven by momentum. Exit quickly when a"
        " narrative loses steam."
    ),
}


def add_months(moment: datetime, months: int) -> datetime:
    """Calendar month arithmetic, clamping the day to the target month's length."""
    index = moment.month - 1 + months
    year = moment.year + index // 12
    month = index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def next_review_date(frequency: RebalanceFrequency, now: datetime) -> datetime:
    if frequency is RebalanceFrequency.WEEKLY:
        return now + timedelta(weeks=1)
    months = {
        RebalanceFrequency.MONTHLY: 1,
        RebalanceFrequency.QUARTERLY: 3,
        RebalanceFrequency.SEMI_ANNUALLY: 6,
        RebalanceFrequency.ANNUALLY: 12,
    }[frequency]
    return add_months(now, months)


def volatility_damping(change_24h: float) -> float:
    """Target multiplier shrinking with the 24h move, never below one half."""
    return max(MIN_VOLATILITY_DAMPING, 1 - abs(change_24h) / 100)


def target_allocation(
    assets: Sequence[PortfolioAsset],
    profile: RiskProfile,
    settings: EngineSettings,
) -> dict[str, float]:
    """Base allocation for the held set with volatile positions damped.

    Each crypto target is scaled by ``volatility_damping`` and the crypto
    targets are rescaled back to the share they had before damping, so the
    stable reserve keeps its profile share.
    """
    base = base_allocation(assets, profile, settings)
    crypto = [a for a in assets if not settings.is_stable(a.id, a.symbol) and a.id in base]
    damped = {a.id: base[a.id] * volatility_damping(a.change_24h) for a in crypto}

    share = sum(base[a.id] for a in crypto)
    damped_total = sum(damped.values())
    targets = dict(base)
    if damped_total > 0:
        targets.update({k: v / damped_total * share for k, v in damped.items()})
    return targets


def _classify(drift: float, profile: RiskProfile) -> DriftBand:
    bands = DEGEN_BANDS if profile is RiskProfile.DEGEN else STANDARD_BANDS
    for band in bands:
        if drift > band.above:
            return band
    return HOLD_BAND


def _single_asset(asset: PortfolioAsset, profile: RiskProfile, now: datetime) -> RebalancingRecommendation:
    """One crypto position: percentage drift says nothing, judge the position itself."""
    if asset.change_24h <= CUT_LOSS_CHANGE or asset.profit_loss_percentage <= CUT_LOSS_PROFIT_LOSS:
        kind, urgency = RebalanceType.REBALANCE, Urgency.HIGH
        reason = f"{asset.symbol} is under heavy pressure. Consider cutting losses and rotating capital."
        actions = (
            f"Reduce or exit the {asset.symbol} position",
            "Rotate into a stronger setup or a stablecoin reserve",
            "Set a hard stop-loss on anything kept",
        )
    elif asset.change_24h < 0:
        kind, urgency = RebalanceType.HOLD, Urgency.MEDIUM
        reason = f"{asset.symbol} is pulling back. Hold and watch key support levels."
        actions = (
            "Hold the position",
            "Tighten the stop-loss if support breaks",
        )
    else:
        kind, urgency = RebalanceType.HOLD, Urgency.LOW
        reason = f"{asset.symbol} is performing well. Let it run."
        actions = (
            "Let the position run",
            "Consider taking partial profits on further strength",
        )

    return RebalancingRecommendation(
        type=kind,
        urgency=urgency,
        drift_percentage=0.0,
        assets=(),
        next_review_date=next_review_date(PROFILE_SETTINGS[profile].frequency, now),
        reason=reason,
        suggested_actions=actions,
    )


def _asset_row(asset: PortfolioAsset, target: float, threshold: float, total_value: float) -> AssetRebalance:
    drift = abs(asset.allocation - target)
    if drift > threshold:
        action = TradeAction.SELL if asset.allocation > target else TradeAction.BUY
        amount = drift * total_value / 100
    else:
        action, amount = TradeAction.HOLD, 0.0
    return AssetRebalance(
        asset_id=asset.id,
        symbol=asset.symbol,
        current_allocation=asset.allocation,
        target_allocation=target,
        drift=drift,
        action=action,
        amount=amount,
    )


def analyze_rebalancing(
    portfolio: Portfolio,
    now: datetime,
    settings: EngineSettings | None = None,
) -> RebalancingRecommendation:
    """Rebalancing verdict for *portfolio* as of *now*.

    Drift is measured against the base allocation for the assets actually
    held, damped for volatile positions. The overall drift is the mean
    per-asset drift.
    """
    settings = settings or EngineSettings()
    profile = RiskProfile.parse(portfolio.risk_profile)
    profile_settings = PROFILE_SETTINGS[profile]

    crypto = [a for a in portfolio.assets if not settings.is_stable(a.id, a.symbol)]
    has_stable = len(crypto) < len(portfolio.assets)

    if len(crypto) == 1:
        recommendation = _single_asset(crypto[0], profile, now)
        log.info(
            "rebalancing_analyzed",
            portfolio=portfolio.id,
            type=recommendation.type.value,
            urgency=recommendation.urgency.value,
            single_asset=True,
        )
        return recommendation

    targets = target_allocation(portfolio.assets, profile, settings)
    rows = tuple(
        _asset_row(a, targets.get(a.id, 0.0), profile_settings.threshold, portfolio.total_value)
        for a in portfolio.assets
    )
    drift = sum(r.drift for r in rows) / len(rows) if rows else 0.0

    band = _classify(drift, profile)
    urgency = band.urgency
    actions = list(band.actions)
    if not has_stable:
        actions.append(MISSING_STABLE_ACTION)
        if profile is not RiskProfile.DEGEN and urgency is Urgency.LOW:
            urgency = urgency.escalate()

    log.info(
        "rebalancing_analyzed",
        portfolio=portfolio.id,
        type=band.type.value,
        urgency=urgency.value,
        drift=round(drift, 2),
        trades=sum(1 for r in rows if r.action is not TradeAction.HOLD),
    )

    return RebalancingRecommendation(
        type=band.type,
        urgency=urgency,
        drift_percentage=drift,
        assets=rows,
        next_review_date=next_review_date(profile_settings.frequency, now),
        reason=band.reason,
        suggested_actions=tuple(actions),
    )


def frequency_recommendation(risk_profile: RiskProfile | str) -> str:
    return FREQUENCY_TEXT[RiskProfile.parse(risk_profile)]


def holding_period_recommendation(risk_profile: RiskProfile | str) -> str:
    return HOLDING_PERIOD_TEXT[RiskProfile.parse(risk_profile)]
