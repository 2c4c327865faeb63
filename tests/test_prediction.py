"""Tests for portfolio growth projections."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from structlog.testing import capture_logs

from portfolio_core.config import EngineSettings
from portfolio_core.models import (
    Portfolio,
    PortfolioAsset,
    RiskLevel,
    RiskProfile,
    Timeframe,
)
from portfolio_core.prediction import (
    BASE_GROWTH_RATES,
    assess_risk,
    max_drawdown,
    portfolio_volatility,
    predict_portfolio,
    sharpe_ratio,
)

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
IDS = {"BTC": "bitcoin", "ETH": "ethereum", "USDC": "usd-coin"}


def _asset(symbol: str, allocation: float, change: float = 0.0) -> PortfolioAsset:
    return PortfolioAsset(
        id=IDS[symbol],
        symbol=symbol,
        name=symbol,
        price=1.0,
        change_24h=change,
        market_cap=1e10,
        volume_24h=1e6,
        allocation=allocation,
        value=allocation * 100,
    )


def _portfolio(*assets: PortfolioAsset, profile: str = "balanced", pl_pct: float = 0.0) -> Portfolio:
    return Portfolio(
        id="p1",
        name="Test",
        risk_profile=profile,
        assets=list(assets),
        total_value=10_000.0,
        total_profit_loss_percentage=pl_pct,
        created_at=NOW,
        updated_at=NOW,
    )


# No 24h movement: volatility 0, drawdown 0, Sharpe 0 -> medium risk
CALM = (_asset("BTC", 90), _asset("USDC", 10))


class TestRiskMetrics:
    def test_empty_portfolio_volatility(self):
        assert portfolio_volatility(_portfolio()) == 0.05

    def test_volatility_is_dispersion_of_absolute_moves(self):
        assert portfolio_volatility(_portfolio(_asset("BTC", 50, -10), _asset("ETH", 50, 10))) == pytest.approx(0.0)
        assert portfolio_volatility(_portfolio(_asset("BTC", 50, 0), _asset("ETH", 50, 20))) == pytest.approx(0.1)

    def test_drawdown(self):
        assert max_drawdown(_portfolio(_asset("BTC", 50, 0), _asset("ETH", 50, 20))) == pytest.approx(0.2)

    def test_drawdown_capped(self):
        assert max_drawdown(_portfolio(_asset("BTC", 100, -60))) == 0.5

    def test_sharpe(self):
        portfolio = _portfolio(_asset("BTC", 50, 0), _asset("ETH", 50, 20), pl_pct=12.0)
        assert sharpe_ratio(portfolio) == pytest.approx(1.0)

    def test_sharpe_zero_volatility(self):
        assert sharpe_ratio(_portfolio(*CALM, pl_pct=50.0)) == 0.0

    def test_low_risk(self):
        portfolio = _portfolio(_asset("BTC", 50, 0), _asset("ETH", 40, 2), _asset("USDC", 10, 0), pl_pct=10.0)
        assert assess_risk(portfolio).risk_level is RiskLevel.LOW

    def test_medium_risk(self):
        risk = assess_risk(_portfolio(*CALM))
        assert risk.volatility == 0.0
        assert risk.sharpe_ratio == 0.0
        assert risk.risk_level is RiskLevel.MEDIUM

    def test_high_risk(self):
        risk = assess_risk(_portfolio(_asset("BTC", 50, 0), _asset("ETH", 50, 40)))
        # 0.2 * 0.4 + 0.4 * 0.4 + 1.1 * 0.2
        assert risk.volatility == pytest.approx(0.2)
        assert risk.max_drawdown == pytest.approx(0.4)
        assert risk.sharpe_ratio == pytest.approx(-0.1)
        assert risk.risk_level is RiskLevel.HIGH


class TestPredictPortfolio:
    def test_one_prediction_per_timeframe(self):
        result = predict_portfolio(_portfolio(*CALM), NOW)
        assert [p.timeframe for p in result.predictions] == list(Timeframe)
        assert result.current_value == 10_000.0
        assert result.as_of == NOW

    def test_one_year_scenarios(self):
        year = predict_portfolio(_portfolio(*CALM), NOW).for_timeframe("1year")
        assert year.realistic.growth == pytest.approx(18.0)
        assert year.predicted_value == pytest.approx(11_800.0)
        assert year.optimistic.value == pytest.approx(12_700.0)
        assert year.pessimistic.growth == pytest.approx(7.2)
        assert year.target_date == NOW + timedelta(days=365)

    @pytest.mark.parametrize(
        "timeframe, expected",
        [
            (Timeframe.ONE_WEEK, 57.9),
            (Timeframe.ONE_MONTH, 51.0),
            (Timeframe.THREE_MONTHS, 33.0),
            (Timeframe.SIX_MONTHS, 20.0),
            (Timeframe.ONE_YEAR, 20.0),
        ],
    )
    def test_confidence_shrinks_with_horizon(self, timeframe, expected):
        prediction = predict_portfolio(_portfolio(*CALM), NOW).for_timeframe(timeframe)
        assert prediction.confidence == pytest.approx(expected)

    def test_volatility_damps_growth(self):
        portfolio = _portfolio(_asset("BTC", 50, 0), _asset("ETH", 50, 40))
        year = predict_portfolio(portfolio, NOW).for_timeframe(Timeframe.ONE_YEAR)
        assert year.predicted_growth == pytest.approx(18.0 * 0.94)
        # High risk widens the spread
        assert year.optimistic.growth == pytest.approx(year.predicted_growth * 1.8)
        assert year.pessimistic.growth == pytest.approx(year.predicted_growth * 0.2)

    @pytest.mark.parametrize("profile", list(RiskProfile))
    def test_rates_rise_with_horizon(self, profile):
        rates = [BASE_GROWTH_RATES[profile][tf] for tf in Timeframe]
        assert rates == sorted(rates)

    def test_factors(self):
        result = predict_portfolio(_portfolio(*CALM), NOW)
        assert result.for_timeframe(Timeframe.ONE_WEEK).factors == (
            "Short-term predictions are less reliable",
            "Crypto markets are highly unpredictable",
            "Past performance does not guarantee future results",
        )
        year = result.for_timeframe(Timeframe.ONE_YEAR).factors
        assert year[0] == "Long-term predictions based on historical crypto cycles"
        assert year[-1] == "Annual predictions are speculative due to crypto market cycles"

    def test_profile_factor(self):
        result = predict_portfolio(_portfolio(*CALM, profile="conservative"), NOW)
        assert "Conservative allocation provides stability" in result.predictions[0].factors

    def test_calm_portfolio_needs_no_advice(self):
        assert predict_portfolio(_portfolio(*CALM), NOW).recommendations == ()

    def test_high_growth_suggests_dca(self):
        result = predict_portfolio(_portfolio(*CALM, profile="aggressive"), NOW)
        assert result.for_timeframe(Timeframe.ONE_YEAR).predicted_growth == pytest.approx(35.0)
        assert result.recommendations == ("Moderate growth potential - consider dollar-cost averaging",)

    def test_volatile_portfolio_without_stable(self):
        result = predict_portfolio(_portfolio(_asset("BTC", 50, 0), _asset("ETH", 50, 40)), NOW)
        assert result.recommendations == (
            "Consider reducing position sizes to manage risk",
            "Monitor portfolio more frequently during volatile periods",
            "Add stablecoin position for risk management",
        )
        factors = result.predictions[0].factors
        assert "High market volatility may impact growth" in factors
        assert "Missing stablecoin position increases risk" in factors

    def test_stable_identity_from_settings(self):
        settings = EngineSettings(stable_asset_id="tether", stable_symbol="USDT")
        result = predict_portfolio(_portfolio(*CALM), NOW, settings)
        assert "Add stablecoin position for risk management" in result.recommendations

    def test_logs_prediction(self):
        with capture_logs() as logs:
            predict_portfolio(_portfolio(*CALM), NOW)
        event = next(e for e in logs if e["event"] == "portfolio_prediction")
        assert event["log_level"] == "info"
        assert event["risk_level"] == "medium"
        assert event["one_year_growth"] == 18.0
