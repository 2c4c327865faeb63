"""Pydantic domain models."""

from portfolio_core.models.allocation import AllocationChange, AllocationPlan
from portfolio_core.models.enums import (
    AgreementConfidence,
    BandPosition,
    Confidence,
    HoldingPeriodBucket,
    MomentumSentiment,
    OpportunityCategory,
    PricePattern,
    RebalanceFrequency,
    RebalanceType,
    RiskLevel,
    RiskProfile,
    SentimentClass,
    StopLossRisk,
    Timeframe,
    TradeAction,
    Urgency,
)
from portfolio_core.models.indicators import (
    BollingerResult,
    HoldingPeriod,
    IndicatorResult,
    MACDResult,
    MomentumResult,
    RiskMetrics,
    ShortTermMomentum,
    SupportResistance,
    VolumeAnalysis,
)
from portfolio_core.models.market import AssetSnapshot
from portfolio_core.models.opportunity import Opportunity
from portfolio_core.models.portfolio import Portfolio, PortfolioAsset
from portfolio_core.models.prediction import (
    GrowthPrediction,
    PortfolioPrediction,
    RiskAssessment,
    Scenario,
)
from portfolio_core.models.recommendation import (
    AssetRebalance,
    RebalancingRecommendation,
    StopLossAnalysis,
    StopLossRecommendation,
    StopLossSummary,
)
from portfolio_core.models.sentiment import (
    KeyMetrics,
    MarketSentiment,
    SentimentAnalysis,
    SentimentIndicators,
    SentimentSignals,
)

__all__ = [
    "AgreementConfidence",
    "AllocationChange",
    "AllocationPlan",
    "AssetRebalance",
    "AssetSnapshot",
    "BandPosition",
    "BollingerResult",
    "Confidence",
    "GrowthPrediction",
    "HoldingPeriod",
    "HoldingPeriodBucket",
    "IndicatorResult",
    "KeyMetrics",
    "MACDResult",
    "MarketSentiment",
    "MomentumResult",
    "MomentumSentiment",
    "Opportunity",
    "OpportunityCategory",
    "Portfolio",
    "PortfolioAsset",
    "PortfolioPrediction",
    "PricePattern",
    "RebalanceFrequency",
    "RebalanceType",
    "RebalancingRecommendation",
    "RiskAssessment",
    "RiskLevel",
    "RiskMetrics",
    "RiskProfile",
    "Scenario",
    "SentimentAnalysis",
    "SentimentClass",
    "SentimentIndicators",
    "SentimentSignals",
    "ShortTermMomentum",
    "StopLossAnalysis",
    "StopLossRecommendation",
    "StopLossRisk",
    "StopLossSummary",
    "SupportResistance",
    "Timeframe",
    "TradeAction",
    "Urgency",
]
