"""Market sentiment scorer — composite indices from one snapshot batch."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

import numpy as np
import structlog

from portfolio_core.config.schema import EngineSettings
from portfolio_core.errors import MissingBenchmarkAsset
from portfolio_core.models.enums import RiskLevel, SentimentClass
from portfolio_core.models.market import AssetSnapshot
from portfolio_core.models.sentiment import (
    KeyMetrics,
    MarketSentiment,
    SentimentAnalysis,
    SentimentIndicators,
    SentimentSignals,
)

log = structlog.get_logger("sentiment")

# Fear & greed component weights
FG_WEIGHTS = {
    "volatility": 0.25,
    "momentum": 0.25,
    "social": 0.15,
    "dominance": 0.20,
    "trend": 0.15,
}

# Sentiment score weights over the centred indices
SCORE_WEIGHTS = {
    "fear_greed": 0.25,
    "dominance": 0.20,
    "altcoin_season": 0.25,
    "momentum": 0.20,
    "volatility": 0.10,
}

# (dominance below, points); first match wins
DOMINANCE_BANDS = ((40.0, 40.0), (50.0, 20.0), (60.0, 10.0))

BULLISH_SCORE = 20.0
BEARISH_SCORE = -20.0
REBALANCE_SCORE = 30.0
ALTCOIN_SEASON_INDEX = 60.0
PERFORMER_COUNT = 5


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _find_benchmarks(
    snapshots: Sequence[AssetSnapshot],
    settings: EngineSettings,
) -> tuple[AssetSnapshot, AssetSnapshot]:
    by_symbol = {s.symbol.upper(): s for s in reversed(snapshots)}
    btc = by_symbol.get(settings.btc_symbol.upper())
    eth = by_symbol.get(settings.eth_symbol.upper())
    missing = [
        sym
        for sym, found in ((settings.btc_symbol, btc), (settings.eth_symbol, eth))
        if found is None
    ]
    if missing:
        raise MissingBenchmarkAsset(missing)
    return btc, eth


def bitcoin_dominance(snapshots: Sequence[AssetSnapshot], btc: AssetSnapshot) -> float:
    """BTC market cap share of the batch, in percent."""
    total = sum(s.market_cap for s in snapshots)
    if total <= 0:
        return 0.0
    return btc.market_cap / total * 100


def fear_greed_index(changes: np.ndarray, volumes: np.ndarray, dominance: float) -> float:
    """Composite fear (0) to greed (100) index."""
    mean_abs = float(np.mean(np.abs(changes)))
    mean_change = float(np.mean(changes))
    max_volume = float(np.max(volumes))

    components = {
        "volatility": max(0.0, 100 - mean_abs * 2),
        "momentum": float(np.mean(changes > 0)) * 100,
        "social": float(np.mean(volumes)) / max_volume * 100 if max_volume > 0 else 0.0,
        "dominance": max(0.0, 100 - dominance),
        "trend": _clamp(50 + mean_change, 0, 100),
    }
    index = sum(components[k] * w for k, w in FG_WEIGHTS.items())
    return _clamp(index, 0, 100)


def altcoin_season_index(
    snapshots: Sequence[AssetSnapshot],
    btc: AssetSnapshot,
    dominance: float,
) -> float:
    """How strongly altcoins are outperforming BTC, 0-100."""
    score = 0.0
    for below, points in DOMINANCE_BANDS:
        if dominance < below:
            score += points
            break

    alts = [s for s in snapshots if s.id != btc.id]
    if alts:
        beating = sum(1 for s in alts if s.change_24h > btc.change_24h)
        score += beating / len(alts) * 40

    alt_volume = sum(s.volume_24h for s in alts)
    total_volume = alt_volume + btc.volume_24h
    if total_volume > 0:
        score += alt_volume / total_volume * 20

    return _clamp(score, 0, 100)


def sentiment_score(indicators: SentimentIndicators) -> float:
    """Weighted composite on a -100..100 scale; positive is bullish."""
    centred = {
        "fear_greed": (indicators.fear_greed_index - 50) * 2,
        "dominance": (50 - indicators.bitcoin_dominance) * 2,
        "altcoin_season": (indicators.altcoin_season_index - 50) * 2,
        "momentum": indicators.market_momentum,
        "volatility": (50 - indicators.volatility_index) * 2,
    }
    score = sum(centred[k] * w for k, w in SCORE_WEIGHTS.items())
    return _clamp(score, -100, 100)


def classify(score: float) -> SentimentClass:
    if score > BULLISH_SCORE:
        return SentimentClass.BULLISH
    if score < BEARISH_SCORE:
        return SentimentClass.BEARISH
    return SentimentClass.NEUTRAL


def risk_level(indicators: SentimentIndicators) -> RiskLevel:
    if indicators.volatility_index > 70 or indicators.fear_greed_index > 80:
        return RiskLevel.HIGH
    if indicators.volatility_index < 30 and indicators.fear_greed_index < 30:
        return RiskLevel.LOW
    return RiskLevel.MEDIUM


def _signals(indicators: SentimentIndicators, score: float) -> SentimentSignals:
    return SentimentSignals(
        is_altcoin_season=indicators.altcoin_season_index > ALTCOIN_SEASON_INDEX,
        is_bull_market=score > BULLISH_SCORE,
        is_bear_market=score < BEARISH_SCORE,
        should_rebalance=abs(score) > REBALANCE_SCORE,
        risk_level=risk_level(indicators),
    )


def _analysis(snapshots: Sequence[AssetSnapshot], signals: SentimentSignals) -> SentimentAnalysis:
    ranked = sorted(snapshots, key=lambda s: s.change_24h, reverse=True)
    metrics = KeyMetrics(
        total_market_cap=sum(s.market_cap for s in snapshots),
        total_volume_24h=sum(s.volume_24h for s in snapshots),
        average_change_24h=sum(s.change_24h for s in snapshots) / len(snapshots),
        top_performers=tuple(s.symbol for s in ranked[:PERFORMER_COUNT]),
        worst_performers=tuple(s.symbol for s in ranked[-PERFORMER_COUNT:]),
    )

    if signals.is_bull_market:
        summary = "Market is showing bullish signals with strong momentum and positive sentiment."
        recommendations = [
            "Consider increasing exposure to growth assets",
            "Monitor for potential profit-taking opportunities",
        ]
        if signals.is_altcoin_season:
            recommendations.append("Focus on altcoin diversification for maximum growth")
    elif signals.is_bear_market:
        summary = "Market is showing bearish signals with declining momentum and negative sentiment."
        recommendations = [
            "Consider defensive positioning with stablecoins",
            "Focus on Bitcoin and Ethereum for stability",
            "Avoid aggressive altcoin positions",
        ]
    else:
        summary = "Market is in a neutral state with mixed signals and moderate volatility."
        recommendations = [
            "Maintain balanced portfolio allocation",
            "Monitor for trend confirmation",
        ]

    if signals.is_altcoin_season:
        summary += (
            " Altcoin season appears to be active with strong altcoin"
            " performance relative to Bitcoin."
        )
    if signals.should_rebalance:
        recommendations.append("Portfolio rebalancing recommended due to significant market changes")
    if signals.risk_level is RiskLevel.HIGH:
        recommendations.append("High market volatility - consider reducing position sizes")

    return SentimentAnalysis(
        summary=summary,
        recommendations=tuple(recommendations),
        key_metrics=metrics,
    )


def score_market(
    snapshots: Sequence[AssetSnapshot],
    as_of: datetime,
    settings: EngineSettings | None = None,
) -> MarketSentiment:
    """Score market-wide sentiment from one snapshot batch.

    Raises:
        MissingBenchmarkAsset: BTC or ETH is absent from *snapshots*.
    """
    settings = settings or EngineSettings()
    btc, _eth = _find_benchmarks(snapshots, settings)

    changes = np.asarray([s.change_24h for s in snapshots], dtype=np.float64)
    volumes = np.asarray([s.volume_24h for s in snapshots], dtype=np.float64)
    mean_change = float(np.mean(changes))
    mean_abs = float(np.mean(np.abs(changes)))

    dominance = bitcoin_dominance(snapshots, btc)
    indicators = SentimentIndicators(
        fear_greed_index=fear_greed_index(changes, volumes, dominance),
        bitcoin_dominance=dominance,
        altcoin_season_index=altcoin_season_index(snapshots, btc, dominance),
        market_momentum=_clamp(mean_change * 2, -100, 100),
        volatility_index=min(100.0, mean_abs * 2),
    )

    score = sentiment_score(indicators)
    overall = classify(score)
    signals = _signals(indicators, score)

    log.info(
        "sentiment_scored",
        overall=overall.value,
        score=round(score, 2),
        fear_greed=round(indicators.fear_greed_index, 2),
        risk_level=signals.risk_level.value,
        assets=len(snapshots),
    )

    return MarketSentiment(
        overall=overall,
        confidence=abs(score),
        score=score,
        indicators=indicators,
        signals=signals,
        analysis=_analysis(snapshots, signals),
        as_of=as_of,
    )


def trading_recommendations(sentiment: MarketSentiment) -> list[str]:
    """Regime checklist for the current sentiment, most pressing first."""
    signals = sentiment.signals
    fear_greed = sentiment.indicators.fear_greed_index
    recommendations: list[str] = []

    if signals.is_bear_market:
        recommendations += [
            "Consider defensive positioning - increase stablecoins and reduce altcoin exposure",
            "Set stop-losses on all positions to limit downside",
            "Focus on capital preservation over growth",
        ]
    if signals.is_bull_market:
        recommendations += [
            "Consider increasing exposure to growth assets",
            "Take partial profits on positions that have gained 50-100%",
            "Monitor for trend continuation signals",
        ]
    if signals.is_altcoin_season:
        recommendations += [
            "Focus on altcoin diversification for maximum growth potential",
            "Consider reducing Bitcoin and Ethereum allocations",
            "Monitor altcoin performance relative to Bitcoin",
        ]
    if signals.risk_level is RiskLevel.HIGH:
        recommendations += [
            "High volatility - consider reducing position sizes",
            "Use strict stop-losses and take profits more aggressively",
            "Avoid new high-risk positions",
        ]
    if fear_greed < 30:
        recommendations += [
            "Extreme fear - consider buying opportunities in established assets",
            "Dollar-cost average into positions rather than lump sum",
            "Focus on projects with strong fundamentals",
        ]
    elif fear_greed > 70:
        recommendations += [
            "Extreme greed - consider taking profits and reducing exposure",
            "Be cautious of new investments at market peaks",
            "Increase stablecoin allocation for safety",
        ]
    return recommendations
