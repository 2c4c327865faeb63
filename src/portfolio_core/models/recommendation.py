"""Rebalancing and stop-loss recommendations."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from portfolio_core.models.enums import (
    RebalanceType,
    RiskProfile,
    StopLossRisk,
    TradeAction,
    Urgency,
)


class AssetRebalance(BaseModel):
    model_config = ConfigDict(frozen=True)

    asset_id: str
    symbol: str
    current_allocation: float
    target_allocation: float
    drift: float
    action: TradeAction
    amount: float


class RebalancingRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: RebalanceType
    urgency: Urgency
    drift_percentage: float
    assets: tuple[AssetRebalance, ...] = ()
    next_review_date: datetime
    reason: str
    suggested_actions: tuple[str, ...] = ()

    @property
    def assets_to_rebalance(self) -> tuple[AssetRebalance, ...]:
        return tuple(a for a in self.assets if a.action is not TradeAction.HOLD)


class StopLossRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    asset_id: str
    symbol: str
    current_price: float
    stop_price: float
    stop_loss_percentage: float
    urgency: Urgency
    risk_category: StopLossRisk
    reason: str
    suggested_action: str


class StopLossSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    average_stop_loss: float
    high_urgency: int
    medium_urgency: int
    low_urgency: int


class StopLossAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    risk_profile: RiskProfile
    recommendations: tuple[StopLossRecommendation, ...]
    summary: StopLossSummary
    general_advice: tuple[str, ...]
