"""Market-wide sentiment."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from portfolio_core.models.enums import RiskLevel, SentimentClass


class SentimentIndicators(BaseModel):
    model_config = ConfigDict(frozen=True)

    fear_greed_index: float = Field(ge=0, le=100)
    bitcoin_dominance: float = Field(ge=0, le=100)
    altcoin_season_index: float = Field(ge=0, le=100)
    market_momentum: float = Field(ge=-100, le=100)
    volatility_index: float = Field(ge=0, le=100)


class SentimentSignals(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_altcoin_season: bool
    is_bull_market: bool
    is_bear_market: bool
    should_rebalance: bool
    risk_level: RiskLevel


class KeyMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_market_cap: float
    total_volume_24h: float
    average_change_24h: float
    top_performers: tuple[str, ...]
    worst_performers: tuple[str, ...]


class SentimentAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str
    recommendations: tuple[str, ...]
    key_metrics: KeyMetrics


class MarketSentiment(BaseModel):
    """Output of the sentiment scorer for one snapshot batch."""

    model_config = ConfigDict(frozen=True)

    overall: SentimentClass
    confidence: float = Field(ge=0, le=100)
    score: float = Field(ge=-100, le=100)
    indicators: SentimentIndicators
    signals: SentimentSignals
    analysis: SentimentAnalysis
    as_of: datetime
