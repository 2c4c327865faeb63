"""Portfolio and position models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from portfolio_core.models.enums import RiskProfile
from portfolio_core.models.market import AssetSnapshot

ALLOCATION_TOLERANCE = 0.01


class PortfolioAsset(AssetSnapshot):
    """A held asset: snapshot data plus position.

    ``allocation`` is derived from value share and is recomputed on every
    revaluation, never edited by hand.
    """

    allocation: float = Field(default=0.0, ge=0, le=100)
    quantity: float = Field(default=0.0, ge=0)
    average_cost: float = Field(default=0.0, ge=0)
    value: float = Field(default=0.0, ge=0)
    profit_loss: float = 0.0
    profit_loss_percentage: float = 0.0

    @property
    def cost_basis(self) -> float:
        return self.quantity * self.average_cost


class Portfolio(BaseModel):
    """A simulated portfolio under one risk profile."""

    id: str
    name: str
    risk_profile: RiskProfile
    assets: list[PortfolioAsset] = Field(default_factory=list)
    starting_capital: float = Field(default=10000.0, ge=0)
    total_value: float = Field(default=0.0, ge=0)
    total_profit_loss: float = 0.0
    total_profit_loss_percentage: float = 0.0
    created_at: datetime
    updated_at: datetime

    @field_validator("risk_profile", mode="before")
    @classmethod
    def _parse_profile(cls, value):
        # InvalidRiskProfile is a ValueError, so it surfaces as the error context
        return RiskProfile.parse(value)

    @model_validator(mode="after")
    def _unique_assets(self) -> Portfolio:
        ids = [a.id for a in self.assets]
        if len(ids) != len(set(ids)):
            dupes = sorted({i for i in ids if ids.count(i) > 1})
            raise ValueError(f"duplicate asset ids in portfolio: {dupes}")
        return self

    @property
    def allocation_total(self) -> float:
        return sum(a.allocation for a in self.assets)

    def is_balanced(self) -> bool:
        """True if allocations sum to 100 within tolerance."""
        return abs(self.allocation_total - 100) <= ALLOCATION_TOLERANCE
