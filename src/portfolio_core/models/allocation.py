"""Allocation plan produced by the allocation engine."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from portfolio_core.models.enums import RiskLevel, RiskProfile


class AllocationChange(BaseModel):
    """One audited change to the working allocation."""

    model_config = ConfigDict(frozen=True)

    step: str
    asset: str
    from_pct: float
    to_pct: float
    reason: str


class AllocationPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    risk_profile: RiskProfile
    base_allocation: dict[str, float]
    adjusted_allocation: dict[str, float]
    adjustments: tuple[AllocationChange, ...] = ()
    risk_level: RiskLevel
    recommendations: tuple[str, ...] = ()

    @property
    def total(self) -> float:
        return sum(self.adjusted_allocation.values())
