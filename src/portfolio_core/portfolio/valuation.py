"""Portfolio construction and revaluation.

Position values, allocations and profit/loss are always derived from
quantity, average cost and the latest price; nothing here edits them
independently.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

import structlog

from portfolio_core.models.allocation import AllocationPlan
from portfolio_core.models.market import AssetSnapshot
from portfolio_core.models.portfolio import Portfolio, PortfolioAsset

log = structlog.get_logger("portfolio")

_SNAPSHOT_FIELDS = tuple(AssetSnapshot.model_fields)


def _position(snapshot: AssetSnapshot, quantity: float, average_cost: float) -> PortfolioAsset:
    value = quantity * snapshot.price
    cost = quantity * average_cost
    profit_loss = value - cost
    return PortfolioAsset(
        **snapshot.model_dump(include=set(_SNAPSHOT_FIELDS)),
        quantity=quantity,
        average_cost=average_cost,
        value=value,
        profit_loss=profit_loss,
        profit_loss_percentage=profit_loss / cost * 100 if cost > 0 else 0.0,
    )


def _with_allocations(assets: list[PortfolioAsset]) -> tuple[list[PortfolioAsset], float]:
    total = sum(a.value for a in assets)
    if total <= 0:
        return [a.model_copy(update={"allocation": 0.0}) for a in assets], 0.0
    return [a.model_copy(update={"allocation": a.value / total * 100}) for a in assets], total


def build_portfolio(
    plan: AllocationPlan,
    snapshots: Sequence[AssetSnapshot],
    starting_capital: float,
    now: datetime,
    portfolio_id: str,
    name: str,
) -> Portfolio:
    """Buy into *plan*'s adjusted allocation at current prices.

    Assets with a zero target are left out.
    """
    by_id = {s.id: s for s in snapshots}
    missing = [a for a in plan.adjusted_allocation if a not in by_id]
    if missing:
        raise ValueError(f"no snapshot for planned assets: {sorted(missing)}")

    positions = []
    for asset_id, percent in plan.adjusted_allocation.items():
        if percent <= 0:
            continue
        snapshot = by_id[asset_id]
        quantity = starting_capital * percent / 100 / snapshot.price
        positions.append(_position(snapshot, quantity, snapshot.price))

    assets, total = _with_allocations(positions)
    log.info(
        "portfolio_built",
        portfolio=portfolio_id,
        risk_profile=plan.risk_profile.value,
        positions=len(assets),
        capital=starting_capital,
    )
    return Portfolio(
        id=portfolio_id,
        name=name,
        risk_profile=plan.risk_profile,
        assets=assets,
        starting_capital=starting_capital,
        total_value=total,
        total_profit_loss=total - starting_capital,
        total_profit_loss_percentage=(total - starting_capital) / starting_capital * 100
        if starting_capital > 0
        else 0.0,
        created_at=now,
        updated_at=now,
    )


def revalue_portfolio(
    portfolio: Portfolio,
    snapshots: Sequence[AssetSnapshot],
    now: datetime,
) -> Portfolio:
    """New Portfolio with prices refreshed from *snapshots*.

    Positions without a fresh snapshot keep their last known market data.
    """
    by_id = {s.id: s for s in snapshots}
    refreshed = []
    stale = []
    for asset in portfolio.assets:
        snapshot = by_id.get(asset.id)
        if snapshot is None:
            stale.append(asset.id)
            snapshot = AssetSnapshot(**asset.model_dump(include=set(_SNAPSHOT_FIELDS)))
        refreshed.append(_position(snapshot, asset.quantity, asset.average_cost))

    if stale:
        log.warning("revalue_stale_prices", portfolio=portfolio.id, assets=stale)

    assets, total = _with_allocations(refreshed)
    capital = portfolio.starting_capital
    return portfolio.model_copy(
        update={
            "assets": assets,
            "total_value": total,
            "total_profit_loss": total - capital,
            "total_profit_loss_percentage": (total - capital) / capital * 100 if capital > 0 else 0.0,
            "updated_at": now,
        }
    )
