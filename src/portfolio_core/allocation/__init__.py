"""Risk-profile allocation with sentiment-driven adjustments."""

from portfolio_core.allocation.engine import (
    ADJUSTMENT_STEPS,
    AllocationState,
    AssetRoles,
    apply_adjustments,
    asset_roles,
    base_allocation,
    compute_allocation,
    normalize,
)
from portfolio_core.allocation.tables import Tier, market_cap_rank, tier_for

__all__ = [
    "ADJUSTMENT_STEPS",
    "AllocationState",
    "AssetRoles",
    "Tier",
    "apply_adjustments",
    "asset_roles",
    "base_allocation",
    "compute_allocation",
    "market_cap_rank",
    "normalize",
    "tier_for",
]
