"""Tests for portfolio construction and revaluation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from structlog.testing import capture_logs

from portfolio_core.models import AllocationPlan, AssetSnapshot, RiskLevel, RiskProfile
from portfolio_core.portfolio import build_portfolio, revalue_portfolio

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
LATER = NOW + timedelta(days=1)


def _snap(asset_id: str, symbol: str, price: float) -> AssetSnapshot:
    return AssetSnapshot(
        id=asset_id,
        symbol=symbol,
        name=symbol,
        price=price,
        change_24h=0.0,
        market_cap=1_000_000_000,
        volume_24h=1_000_000,
    )


SNAPSHOTS = [_snap("bitcoin", "BTC", 50_000), _snap("ethereum", "ETH", 3_000), _snap("usd-coin", "USDC", 1.0)]


def _plan(allocation: dict[str, float]) -> AllocationPlan:
    return AllocationPlan(
        risk_profile=RiskProfile.CONSERVATIVE,
        base_allocation=allocation,
        adjusted_allocation=allocation,
        risk_level=RiskLevel.MEDIUM,
    )


@pytest.fixture
def portfolio():
    plan = _plan({"bitcoin": 40, "ethereum": 30, "usd-coin": 30})
    return build_portfolio(plan, SNAPSHOTS, 10_000, NOW, "p1", "Core")


class TestBuildPortfolio:
    def test_positions(self, portfolio):
        btc, eth, usdc = portfolio.assets
        assert btc.quantity == pytest.approx(0.08)
        assert eth.quantity == pytest.approx(1.0)
        assert usdc.quantity == pytest.approx(3000)
        assert btc.average_cost == 50_000
        assert btc.value == pytest.approx(4000)

    def test_totals(self, portfolio):
        assert portfolio.total_value == pytest.approx(10_000)
        assert portfolio.total_profit_loss == pytest.approx(0)
        assert portfolio.risk_profile is RiskProfile.CONSERVATIVE
        assert portfolio.created_at == portfolio.updated_at == NOW
        assert portfolio.is_balanced()

    def test_allocations_follow_plan(self, portfolio):
        assert [a.allocation for a in portfolio.assets] == pytest.approx([40, 30, 30])

    def test_zero_targets_left_out(self):
        plan = _plan({"bitcoin": 100, "ethereum": 0})
        built = build_portfolio(plan, SNAPSHOTS, 1_000, NOW, "p2", "BTC only")
        assert [a.id for a in built.assets] == ["bitcoin"]

    def test_missing_snapshot(self):
        plan = _plan({"bitcoin": 50, "solana": 50})
        with pytest.raises(ValueError, match="solana"):
            build_portfolio(plan, SNAPSHOTS, 1_000, NOW, "p3", "Broken")

    def test_logs(self):
        with capture_logs() as logs:
            build_portfolio(_plan({"bitcoin": 100}), SNAPSHOTS, 1_000, NOW, "p4", "Logged")
        assert logs[-1]["event"] == "portfolio_built"
        assert logs[-1]["positions"] == 1


class TestRevaluePortfolio:
    def test_price_move(self, portfolio):
        moved = [_snap("bitcoin", "BTC", 100_000), _snap("ethereum", "ETH", 3_000), _snap("usd-coin", "USDC", 1.0)]
        revalued = revalue_portfolio(portfolio, moved, LATER)
        btc = revalued.assets[0]

        assert revalued.total_value == pytest.approx(14_000)
        assert btc.allocation == pytest.approx(8000 / 14_000 * 100)
        assert btc.profit_loss == pytest.approx(4000)
        assert btc.profit_loss_percentage == pytest.approx(100)
        assert revalued.total_profit_loss == pytest.approx(4000)
        assert revalued.total_profit_loss_percentage == pytest.approx(40)
        assert revalued.updated_at == LATER
        assert revalued.created_at == NOW
        assert revalued.is_balanced()

    def test_original_untouched(self, portfolio):
        revalue_portfolio(portfolio, [_snap("bitcoin", "BTC", 1_000)], LATER)
        assert portfolio.total_value == pytest.approx(10_000)
        assert portfolio.updated_at == NOW

    def test_stale_prices_kept(self, portfolio):
        with capture_logs() as logs:
            revalued = revalue_portfolio(portfolio, [_snap("bitcoin", "BTC", 60_000)], LATER)
        eth = revalued.assets[1]
        assert eth.price == 3_000
        assert eth.value == pytest.approx(3_000)
        assert revalued.total_value == pytest.approx(10_800)
        warning = next(e for e in logs if e["event"] == "revalue_stale_prices")
        assert warning["log_level"] == "warning"
        assert warning["assets"] == ["ethereum", "usd-coin"]

    def test_allocations_sum_to_100(self, portfolio):
        moved = [_snap("bitcoin", "BTC", 37_123), _snap("ethereum", "ETH", 4_567), _snap("usd-coin", "USDC", 0.999)]
        revalued = revalue_portfolio(portfolio, moved, LATER)
        assert sum(a.allocation for a in revalued.assets) == pytest.approx(100)
