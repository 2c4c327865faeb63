"""Buy candidates surfaced by the opportunity scanner."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from portfolio_core.models.enums import OpportunityCategory, RiskLevel
from portfolio_core.models.market import AssetSnapshot


class Opportunity(BaseModel):
    model_config = ConfigDict(frozen=True)

    asset: AssetSnapshot
    category: OpportunityCategory
    reason: str
    confidence: int = Field(ge=0, le=100)
    suggested_allocation: float = Field(ge=0, le=100)
    expected_return: float
    risk_level: RiskLevel
    market_signal: str
    technical_score: float
    normalized_score: float = Field(ge=0, le=100)
    quality_score: float | None = None
    rsi: float | None = None
