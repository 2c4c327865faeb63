"""Tests for opportunity screens, the registry and the scanner."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from structlog.testing import capture_logs

from portfolio_core.config import EngineSettings
from portfolio_core.models import (
    AssetSnapshot,
    Confidence,
    HoldingPeriod,
    HoldingPeriodBucket,
    IndicatorResult,
    OpportunityCategory,
    Portfolio,
    PortfolioAsset,
    RiskLevel,
)
from portfolio_core.opportunities import (
    SCREEN_REGISTRY,
    Candidate,
    Screen,
    build_screens,
    register,
    scan_opportunities,
)
from portfolio_core.opportunities.screens import (
    DegenScreen,
    GemScreen,
    OversoldScreen,
    TrendingScreen,
    WaitAndWatchScreen,
)

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


def _snap(asset_id: str, change: float, market_cap: float, volume: float) -> AssetSnapshot:
    return AssetSnapshot(
        id=asset_id,
        symbol=asset_id.upper(),
        name=asset_id,
        price=1.0,
        change_24h=change,
        market_cap=market_cap,
        volume_24h=volume,
    )


def _indicators(snapshot: AssetSnapshot, rsi: float | None, quality: float = 50.0) -> IndicatorResult:
    return IndicatorResult(
        asset_id=snapshot.id,
        symbol=snapshot.symbol,
        price=snapshot.price,
        rsi=rsi,
        quality_score=quality,
        holding_period=HoldingPeriod(period=HoldingPeriodBucket.MEDIUM, confidence=Confidence.MEDIUM),
    )


GEM = _snap("gem", 10, 50_000_000, 10_000_000)
DIP = _snap("dip", -25, 100_000_000, 10_000_000)
TREND = _snap("trend", 15, 500_000_000, 50_000_000)
MICRO = _snap("micro", -30, 5_000_000, 1_000_000)
HOT = _snap("hot", 40, 200_000_000, 20_000_000)
UNIVERSE = [GEM, DIP, TREND, MICRO, HOT]


class TestCandidate:
    def test_volume_to_cap(self):
        assert Candidate(GEM).volume_to_cap == pytest.approx(0.2)
        assert Candidate(_snap("zero", 1, 0, 100)).volume_to_cap == 0

    def test_overbought_prefers_rsi(self):
        assert Candidate(HOT, _indicators(HOT, rsi=50)).is_overbought(25) is False
        assert Candidate(GEM, _indicators(GEM, rsi=75)).is_overbought(25) is True

    def test_overbought_falls_back_to_change(self):
        assert Candidate(HOT).is_overbought(25) is True
        assert Candidate(GEM).is_overbought(25) is False


class TestScreens:
    def test_gem(self):
        opp = GemScreen().evaluate(Candidate(GEM))
        assert opp.category is OpportunityCategory.GEM
        assert opp.confidence == 67
        assert opp.expected_return == pytest.approx(65)
        assert opp.technical_score == pytest.approx(30)
        assert opp.normalized_score == pytest.approx(15)
        assert opp.risk_level is RiskLevel.MEDIUM
        assert opp.suggested_allocation == 3

    def test_gem_overbought(self):
        opp = GemScreen().evaluate(Candidate(GEM, _indicators(GEM, rsi=75)))
        assert opp.confidence == 37
        assert opp.expected_return == pytest.approx(45)
        assert opp.technical_score == pytest.approx(18)
        assert opp.risk_level is RiskLevel.HIGH
        assert opp.suggested_allocation == 2
        assert opp.rsi == 75

    def test_gem_params(self):
        candidate = Candidate(_snap("mid", 10, 200_000_000, 40_000_000))
        assert GemScreen().evaluate(candidate) is None
        assert GemScreen(max_market_cap=1_000_000_000).evaluate(candidate) is not None

    def test_oversold(self):
        opp = OversoldScreen().evaluate(Candidate(DIP))
        assert opp.confidence == 65
        assert opp.expected_return == pytest.approx(50)
        assert opp.technical_score == pytest.approx(27)
        assert opp.risk_level is RiskLevel.MEDIUM

    def test_oversold_needs_rsi_confirmation(self):
        assert OversoldScreen().evaluate(Candidate(DIP, _indicators(DIP, rsi=45))) is None
        opp = OversoldScreen().evaluate(Candidate(DIP, _indicators(DIP, rsi=25)))
        assert opp.confidence == 75

    def test_trending(self):
        opp = TrendingScreen().evaluate(Candidate(TREND))
        assert opp.confidence == 75
        assert opp.expected_return == pytest.approx(52.5)
        assert opp.technical_score == pytest.approx(18)
        assert opp.suggested_allocation == 6

    def test_degen(self):
        opp = DegenScreen().evaluate(Candidate(MICRO))
        assert opp.confidence == 60
        assert opp.expected_return == pytest.approx(250)
        assert opp.technical_score == pytest.approx(70)
        assert opp.risk_level is RiskLevel.HIGH

    def test_wait_and_watch(self):
        opp = WaitAndWatchScreen().evaluate(Candidate(HOT))
        assert opp.confidence == 20
        assert opp.expected_return == pytest.approx(32)
        assert opp.technical_score == pytest.approx(10)
        assert opp.suggested_allocation == 0
        assert opp.market_signal == "Overbought by 40.0% - wait for 20-30% pullback"

    @pytest.mark.parametrize("screen_cls", list(SCREEN_REGISTRY.values()))
    @pytest.mark.parametrize("snapshot", UNIVERSE)
    def test_normalized_score_in_range(self, screen_cls, snapshot):
        opp = screen_cls().evaluate(Candidate(snapshot))
        if opp is not None:
            assert 0 <= opp.normalized_score <= 100
            assert 0 <= opp.confidence <= 100

    def test_best_prefers_earliest_on_tie(self):
        twin = _snap("twin", 10, 50_000_000, 10_000_000)
        opp = GemScreen().best([Candidate(GEM), Candidate(twin)])
        assert opp.asset.id == "gem"


class TestRegistry:
    def test_all_categories_registered(self):
        assert list(SCREEN_REGISTRY) == [
            OpportunityCategory.GEM,
            OpportunityCategory.REPLACEMENT,
            OpportunityCategory.OVERSOLD,
            OpportunityCategory.TRENDING,
            OpportunityCategory.DEGEN,
            OpportunityCategory.WAIT_AND_WATCH,
        ]

    def test_cannot_instantiate_abstract(self):
        with pytest.raises(TypeError):
            Screen()

    def test_duplicate_category_rejected(self):
        class AnotherGem(Screen):
            category = OpportunityCategory.GEM

            def evaluate(self, candidate):
                return None

        with pytest.raises(ValueError, match="Duplicate"):
            register(AnotherGem)
        assert SCREEN_REGISTRY[OpportunityCategory.GEM] is GemScreen

    def test_missing_category_rejected(self):
        class Nameless(Screen):
            def evaluate(self, candidate):
                return None

        with pytest.raises(ValueError, match="category"):
            register(Nameless)

    def test_build_screens_passes_params(self):
        screens = build_screens({"gem": {"max_market_cap": 5}})
        gem = next(s for s in screens if isinstance(s, GemScreen))
        assert gem.max_market_cap == 5
        assert len(screens) == len(SCREEN_REGISTRY)


class TestScanOpportunities:
    def test_ranked_and_limited(self):
        result = scan_opportunities(UNIVERSE)
        assert [o.confidence for o in result] == [75, 67, 65]
        assert [o.asset.id for o in result] == ["trend", "gem", "dip"]

    def test_duplicate_asset_keeps_first_on_tie(self):
        result = scan_opportunities(UNIVERSE)
        assert result[0].category is OpportunityCategory.REPLACEMENT
        assert result[0].risk_level is RiskLevel.LOW

    def test_custom_limit(self):
        result = scan_opportunities(UNIVERSE, settings=EngineSettings(opportunity_limit=10))
        assert [o.asset.id for o in result] == ["trend", "gem", "dip", "micro", "hot"]

    def test_skips_held_assets(self):
        held = PortfolioAsset(**TREND.model_dump(), allocation=100)
        portfolio = Portfolio(
            id="p1", name="Test", risk_profile="balanced", assets=[held], created_at=NOW, updated_at=NOW
        )
        result = scan_opportunities(UNIVERSE, portfolio=portfolio)
        assert "trend" not in [o.asset.id for o in result]
        assert [o.confidence for o in result] == [67, 65, 60]

    def test_skips_stable(self):
        usdc = AssetSnapshot(
            id="usd-coin", symbol="USDC", name="USD Coin", price=1.0,
            change_24h=-20, market_cap=30_000_000_000, volume_24h=9_000_000_000,
        )
        assert scan_opportunities([usdc]) == []

    def test_indicators_flow_through(self):
        result = scan_opportunities([GEM], indicators={"gem": _indicators(GEM, rsi=50, quality=80)})
        assert result[0].quality_score == 80
        assert result[0].rsi == 50

    def test_empty_universe(self):
        assert scan_opportunities([]) == []

    def test_logs_summary(self):
        with capture_logs() as logs:
            scan_opportunities(UNIVERSE)
        event = next(e for e in logs if e["event"] == "opportunities_scanned")
        assert event["found"] == 5
        assert event["returned"] == 3
