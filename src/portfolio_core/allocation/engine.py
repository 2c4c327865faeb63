"""Dynamic allocation engine.

The base allocation comes from the lookup tables; market conditions then
adjust it through an ordered chain of pure steps. Each step takes the
current ``AllocationState`` and returns a new one with its changes appended
to the audit trail, so a later step can undo an earlier one and the order
is visible in the output.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Mapping, Sequence

import structlog

from portfolio_core.allocation.tables import STABLE_SHARE, target_weight, tier_for
from portfolio_core.config.schema import EngineSettings
from portfolio_core.models.allocation import AllocationChange, AllocationPlan
from portfolio_core.models.enums import RiskLevel, RiskProfile
from portfolio_core.models.market import AssetSnapshot
from portfolio_core.models.sentiment import MarketSentiment

log = structlog.get_logger("allocation")

SINGLE_ASSET_CAP = 40.0
STABLE_FLOOR = 5.0
NORMALIZE_TOLERANCE = 0.01


@dataclass(frozen=True)
class AssetRoles:
    """Asset ids playing a special part in the adjustment rules."""

    stable: str | None
    btc: str | None
    eth: str | None


@dataclass(frozen=True)
class AllocationState:
    allocation: dict[str, float]
    changes: tuple[AllocationChange, ...] = ()
    recommendations: tuple[str, ...] = ()

    def set(self, step: str, asset: str | None, value: float, reason: str) -> AllocationState:
        """Return a state with *asset* moved to *value*; unchanged if absent or equal."""
        if asset is None or asset not in self.allocation:
            return self
        current = self.allocation[asset]
        if value == current:
            return self
        allocation = dict(self.allocation)
        allocation[asset] = value
        change = AllocationChange(step=step, asset=asset, from_pct=current, to_pct=value, reason=reason)
        log.debug("allocation_adjusted", step=step, asset=asset, from_pct=current, to_pct=value)
        return replace(self, allocation=allocation, changes=self.changes + (change,))

    def recommend(self, text: str) -> AllocationState:
        return replace(self, recommendations=self.recommendations + (text,))

    def get(self, asset: str | None) -> float | None:
        if asset is None:
            return None
        return self.allocation.get(asset)


Step = Callable[[AllocationState, MarketSentiment, AssetRoles], AllocationState]


def _raise(state: AllocationState, step: str, asset: str | None, by: float, cap: float, reason: str,
           below: float | None = None) -> AllocationState:
    """Add *by* to *asset* up to *cap*; only when currently under *below* if given."""
    current = state.get(asset)
    if current is None or (below is not None and current >= below):
        return state
    return state.set(step, asset, min(cap, current + by), reason)


def _lower(state: AllocationState, step: str, asset: str | None, by: float, floor: float, reason: str,
           above: float) -> AllocationState:
    """Subtract *by* from *asset* down to *floor*; only when currently over *above*."""
    current = state.get(asset)
    if current is None or current <= above:
        return state
    return state.set(step, asset, max(floor, current - by), reason)


def sentiment_step(state: AllocationState, sentiment: MarketSentiment, roles: AssetRoles) -> AllocationState:
    signals = sentiment.signals
    step = "sentiment"

    if signals.is_bear_market:
        state = _raise(state, step, roles.stable, 20, 50,
                       "Bear market - increasing stablecoin allocation for capital preservation")
        state = state.recommend("Bear market detected - increasing stablecoin allocation for capital preservation")

    if signals.is_bull_market:
        state = _lower(state, step, roles.stable, 10, STABLE_FLOOR,
                       "Bull market - reducing stablecoins to increase growth exposure", above=5)
        state = state.recommend("Bull market detected - consider reducing stablecoins for growth exposure")

    if signals.is_altcoin_season:
        state = _lower(state, step, roles.btc, 5, 30,
                       "Altcoin season - reducing BTC dominance for altcoin exposure", above=30)
        state = _lower(state, step, roles.eth, 3, 15,
                       "Altcoin season - reducing ETH for altcoin exposure", above=15)
        state = state.recommend("Altcoin season active - consider increasing altcoin exposure")

    if signals.risk_level is RiskLevel.HIGH:
        state = _raise(state, step, roles.stable, 15, 40,
                       "High volatility - increasing stablecoins for risk management")
        state = state.recommend("High market volatility - increasing stablecoin allocation for risk management")

    return state


def risk_management_step(state: AllocationState, sentiment: MarketSentiment, roles: AssetRoles) -> AllocationState:
    step = "risk_management"
    for asset, value in state.allocation.items():
        if value > SINGLE_ASSET_CAP:
            state = state.set(step, asset, SINGLE_ASSET_CAP,
                              "Risk management - limiting single asset exposure to 40%")

    stable = state.get(roles.stable)
    if stable is not None and stable < STABLE_FLOOR:
        state = state.set(step, roles.stable, STABLE_FLOOR,
                          "Capital preservation - maintaining minimum 5% stablecoin allocation")

    return state.recommend(
        "Applied risk management rules - limited single asset exposure"
        " and ensured minimum stablecoin allocation"
    )


def capital_preservation_step(state: AllocationState, sentiment: MarketSentiment, roles: AssetRoles) -> AllocationState:
    step = "capital_preservation"
    indicators = sentiment.indicators

    if indicators.volatility_index > 60:
        state = _raise(state, step, roles.btc, 5, 50,
                       "High volatility - increasing BTC allocation for stability", below=35)
        state = _raise(state, step, roles.eth, 3, 30,
                       "High volatility - increasing ETH allocation for stability", below=20)
        state = state.recommend(
            "High volatility detected - increasing allocation to established assets (BTC/ETH)"
        )

    if indicators.fear_greed_index < 25:
        state = _raise(state, step, roles.stable, 25, 60,
                       "Extreme fear - significant increase in stablecoins for capital preservation")
        state = state.recommend(
            "Extreme fear detected - significantly increasing stablecoin allocation for capital preservation"
        )

    return state


def volatility_step(state: AllocationState, sentiment: MarketSentiment, roles: AssetRoles) -> AllocationState:
    step = "volatility"
    volatility = sentiment.indicators.volatility_index

    if volatility > 70:
        state = state.recommend(
            "High volatility detected - reducing exposure to volatile assets and increasing stablecoins"
        )
        state = _raise(state, step, roles.stable, 15, 60,
                       "High volatility - increasing stablecoins for risk management")
    elif volatility < 30:
        state = state.recommend("Low volatility detected - opportunity to increase exposure to growth assets")
        state = _lower(state, step, roles.stable, 10, STABLE_FLOOR,
                       "Low volatility - reducing stablecoins for growth exposure", above=10)

    return state


def correlation_step(state: AllocationState, sentiment: MarketSentiment, roles: AssetRoles) -> AllocationState:
    step = "correlation"
    if sentiment.indicators.fear_greed_index < 30:
        state = state.recommend(
            "High correlation environment detected - focusing on established assets for stability"
        )
        state = _raise(state, step, roles.btc, 5, 50,
                       "High correlation - increasing BTC for stability", below=45)
        state = _raise(state, step, roles.eth, 3, 30,
                       "High correlation - increasing ETH for stability", below=25)
    return state


ADJUSTMENT_STEPS: tuple[Step, ...] = (
    sentiment_step,
    risk_management_step,
    capital_preservation_step,
    volatility_step,
    correlation_step,
)


def normalize(allocation: Mapping[str, float]) -> dict[str, float]:
    """Rescale so the values sum to 100.

    A map already within 0.01 of 100 is returned unchanged. An all-zero map
    is spread evenly.
    """
    result = dict(allocation)
    if not result:
        return result
    total = sum(result.values())
    if abs(total - 100) <= NORMALIZE_TOLERANCE:
        return result
    if total <= 0:
        share = 100 / len(result)
        return {k: share for k in result}
    return {k: v / total * 100 for k, v in result.items()}


def asset_roles(assets: Sequence[AssetSnapshot], settings: EngineSettings) -> AssetRoles:
    stable = btc = eth = None
    for asset in assets:
        if stable is None and settings.is_stable(asset.id, asset.symbol):
            stable = asset.id
        elif btc is None and asset.symbol.upper() == settings.btc_symbol.upper():
            btc = asset.id
        elif eth is None and asset.symbol.upper() == settings.eth_symbol.upper():
            eth = asset.id
    return AssetRoles(stable=stable, btc=btc, eth=eth)


def base_allocation(
    assets: Sequence[AssetSnapshot],
    risk_profile: RiskProfile | str,
    settings: EngineSettings | None = None,
) -> dict[str, float]:
    """Target allocation for *assets* before any market adjustment.

    Crypto weights come from the profile/tier table and are scaled into
    ``100 - stable share``; the stable reserve, if held, gets the share.
    """
    profile = RiskProfile.parse(risk_profile)
    settings = settings or EngineSettings()

    stable_share = STABLE_SHARE[profile]
    weights: dict[str, float] = {}
    stable_id: str | None = None
    for asset in assets:
        if asset.id in weights or asset.id == stable_id:
            continue
        if settings.is_stable(asset.id, asset.symbol):
            stable_id = stable_id or asset.id
            continue
        tier = tier_for(asset.symbol, asset.market_cap, settings.btc_symbol, settings.eth_symbol)
        weights[asset.id] = target_weight(profile, tier)

    crypto_total = sum(weights.values())
    remaining = 100 - stable_share
    if crypto_total > 0:
        weights = {k: v / crypto_total * remaining for k, v in weights.items()}

    if stable_id is not None:
        weights[stable_id] = stable_share
    return weights


def apply_adjustments(
    allocation: Mapping[str, float],
    sentiment: MarketSentiment,
    roles: AssetRoles,
    steps: Sequence[Step] = ADJUSTMENT_STEPS,
) -> AllocationState:
    state = AllocationState(allocation=dict(allocation))
    for step in steps:
        state = step(state, sentiment, roles)
    return state


def compute_allocation(
    assets: Sequence[AssetSnapshot],
    risk_profile: RiskProfile | str,
    sentiment: MarketSentiment,
    settings: EngineSettings | None = None,
) -> AllocationPlan:
    """Base allocation adjusted for current market sentiment.

    Raises:
        InvalidRiskProfile: *risk_profile* is not one of the four profiles.
    """
    profile = RiskProfile.parse(risk_profile)
    settings = settings or EngineSettings()

    base = base_allocation(assets, profile, settings)
    state = apply_adjustments(base, sentiment, asset_roles(assets, settings))
    adjusted = normalize(state.allocation)

    log.info(
        "allocation_computed",
        risk_profile=profile.value,
        assets=len(adjusted),
        adjustments=len(state.changes),
        sentiment=sentiment.overall.value,
    )

    return AllocationPlan(
        risk_profile=profile,
        base_allocation=base,
        adjusted_allocation=adjusted,
        adjustments=state.changes,
        risk_level=sentiment.signals.risk_level,
        recommendations=state.recommendations,
    )
