"""Indicator outputs — one model per indicator plus the per-asset bundle."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from portfolio_core.models.enums import (
    AgreementConfidence,
    BandPosition,
    Confidence,
    HoldingPeriodBucket,
    MomentumSentiment,
    PricePattern,
)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class MACDResult(_Frozen):
    line: float
    signal: float
    histogram: float

    @property
    def is_bullish(self) -> bool:
        return self.line > self.signal and self.histogram > 0


class BollingerResult(_Frozen):
    upper: float
    middle: float
    lower: float
    percent_b: float
    is_squeeze: bool
    position: BandPosition


class SupportResistance(_Frozen):
    support: float
    resistance: float
    distance_to_support: float
    distance_to_resistance: float
    risk_reward_ratio: float
    support_is_fallback: bool = False
    resistance_is_fallback: bool = False


class RiskMetrics(_Frozen):
    stop_loss: float
    take_profit: float
    risk_per_unit: float
    reward_per_unit: float
    risk_reward_ratio: float
    recommended_units: int
    max_risk_amount: float
    is_good_risk_reward: bool
    degenerate: bool = False


class VolumeAnalysis(_Frozen):
    ratio: float
    change_percent: float
    is_increasing: bool
    is_trending_up: bool

    @property
    def is_healthy(self) -> bool:
        return self.is_increasing and self.is_trending_up


class HoldingPeriod(_Frozen):
    period: HoldingPeriodBucket
    confidence: Confidence
    reasoning: tuple[str, ...] = ()


class MomentumResult(_Frozen):
    """Momentum read over one window of consecutive closes."""

    sentiment: MomentumSentiment
    confidence: Confidence
    score: int
    recent_change: float
    average_change: float
    volatility: float
    pattern: PricePattern
    reasoning: tuple[str, ...] = ()


class ShortTermMomentum(_Frozen):
    four_hour: MomentumResult
    one_day: MomentumResult
    confidence: AgreementConfidence


class IndicatorResult(_Frozen):
    """Everything the indicator library can say about one asset.

    Sub-results that could not be computed are ``None`` and listed in
    ``unavailable`` with the reason; nothing is substituted.
    """

    asset_id: str
    symbol: str
    price: float
    ema_50: float | None = None
    ema_200: float | None = None
    rsi: float | None = None
    macd: MACDResult | None = None
    bollinger: BollingerResult | None = None
    levels: SupportResistance | None = None
    risk: RiskMetrics | None = None
    volume: VolumeAnalysis | None = None
    momentum: ShortTermMomentum | None = None
    ema_strength: float | None = None
    quality_score: float = Field(ge=0, le=100)
    holding_period: HoldingPeriod
    unavailable: dict[str, str] = Field(default_factory=dict)

    @property
    def is_degraded(self) -> bool:
        return bool(self.unavailable)
