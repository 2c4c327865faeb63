"""Portfolio growth projections and risk assessment."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from portfolio_core.models.enums import RiskLevel, Timeframe


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Scenario(_Frozen):
    value: float
    growth: float


class GrowthPrediction(_Frozen):
    """Projected value at the end of one timeframe.

    ``predicted_value`` and ``predicted_growth`` repeat the realistic scenario.
    """

    timeframe: Timeframe
    target_date: datetime
    predicted_value: float
    predicted_growth: float
    confidence: float = Field(ge=0, le=100)
    optimistic: Scenario
    realistic: Scenario
    pessimistic: Scenario
    factors: tuple[str, ...] = ()


class RiskAssessment(_Frozen):
    volatility: float
    max_drawdown: float
    sharpe_ratio: float
    risk_level: RiskLevel


class PortfolioPrediction(_Frozen):
    current_value: float
    as_of: datetime
    predictions: tuple[GrowthPrediction, ...]
    risk_assessment: RiskAssessment
    recommendations: tuple[str, ...] = ()

    def for_timeframe(self, timeframe: Timeframe | str) -> GrowthPrediction:
        wanted = Timeframe(timeframe)
        return next(p for p in self.predictions if p.timeframe is wanted)
