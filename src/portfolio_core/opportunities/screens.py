"""Opportunity screens — one per category.

Each screen looks at a single candidate and either rejects it or describes
it as an Opportunity. Confidence and expected-return formulas are linear in
the 24h move and the volume/market-cap ratio, damped when the candidate is
overbought.
"""

from __future__ import annotations

import math
from typing import Any

from portfolio_core.models.enums import OpportunityCategory, RiskLevel
from portfolio_core.models.opportunity import Opportunity
from portfolio_core.opportunities.base import Candidate, Screen
from portfolio_core.opportunities.registry import register


def _round(value: float) -> int:
    """Round half up."""
    return int(math.floor(value + 0.5))


@register
class GemScreen(Screen):
    """Low-cap asset with heavy volume for its size and a healthy, not parabolic, move."""

    category = OpportunityCategory.GEM
    max_technical_score = 200.0

    def __init__(self, **params: Any) -> None:
        super().__init__(**params)
        self.max_market_cap = float(self.params.get("max_market_cap", 100_000_000))
        self.min_volume_ratio = float(self.params.get("min_volume_ratio", 0.1))

    def evaluate(self, candidate: Candidate) -> Opportunity | None:
        snap = candidate.snapshot
        change = snap.change_24h
        if not (0 < snap.market_cap < self.max_market_cap):
            return None
        if candidate.volume_to_cap <= self.min_volume_ratio or not (5 < change <= 20):
            return None

        ratio = candidate.volume_to_cap
        overbought = candidate.is_overbought(25)

        confidence = min(85.0, 50 + change * 1.5 + ratio * 10)
        if overbought:
            confidence = max(25.0, confidence - 30)
            expected = min(100.0, 30 + change * 1.5)
            technical = max(15.0, change * 0.6 + ratio * 60)
            reason = "Low cap gem but overbought - consider waiting for pullback"
            signal = "Strong momentum but overbought - wait for better entry"
        else:
            expected = min(150.0, 40 + change * 2.5)
            technical = change + ratio * 100
            reason = "Low market cap gem with strong volume and momentum"
            signal = "Strong volume and momentum in low cap"

        return Opportunity(
            asset=snap,
            category=self.category,
            reason=reason,
            confidence=_round(confidence),
            suggested_allocation=2.0 if overbought else 3.0,
            expected_return=expected,
            risk_level=RiskLevel.HIGH if overbought or snap.market_cap < 50_000_000 else RiskLevel.MEDIUM,
            market_signal=signal,
            technical_score=technical,
            normalized_score=self.normalize(technical),
            quality_score=candidate.quality_score,
            rsi=candidate.rsi,
        )


@register
class ReplacementScreen(Screen):
    """Established, liquid asset trending up steadily: a candidate to swap into."""

    category = OpportunityCategory.REPLACEMENT
    max_technical_score = 150.0

    def evaluate(self, candidate: Candidate) -> Opportunity | None:
        snap = candidate.snapshot
        change = snap.change_24h
        if not (8 < change <= 20) or snap.volume_24h <= 10_000_000 or snap.market_cap <= 50_000_000:
            return None

        ratio = candidate.volume_to_cap
        overbought = candidate.is_overbought(25)

        confidence = min(80.0, 60 + change)
        if overbought:
            confidence = max(35.0, confidence - 25)
            expected = min(60.0, 20 + change * 1.2)
            technical = max(25.0, change * 0.7 + ratio * 35)
            reason = "Good alternative but overbought - consider waiting for pullback"
            signal = "Strong fundamentals but overbought - wait for better entry"
        else:
            expected = min(80.0, 25 + change * 1.8)
            technical = change + ratio * 50
            reason = "Strong trending alternative to current holdings"
            signal = "High momentum with strong fundamentals"

        low_risk = not overbought and snap.market_cap >= 100_000_000
        return Opportunity(
            asset=snap,
            category=self.category,
            reason=reason,
            confidence=_round(confidence),
            suggested_allocation=3.0 if overbought else 5.0,
            expected_return=expected,
            risk_level=RiskLevel.LOW if low_risk else RiskLevel.MEDIUM,
            market_signal=signal,
            technical_score=technical,
            normalized_score=self.normalize(technical),
            quality_score=candidate.quality_score,
            rsi=candidate.rsi,
        )


@register
class OversoldScreen(Screen):
    """Sharp drop that still trades with volume: a bounce candidate.

    When RSI is known it must confirm the drop (below 40); below 30 adds
    confidence.
    """

    category = OpportunityCategory.OVERSOLD
    max_technical_score = 120.0

    def evaluate(self, candidate: Candidate) -> Opportunity | None:
        snap = candidate.snapshot
        change = snap.change_24h
        if change >= -15 or snap.volume_24h <= 5_000_000 or snap.market_cap <= 10_000_000:
            return None

        rsi = candidate.rsi
        if rsi is not None and rsi >= 40:
            return None

        drop = abs(change)
        confidence = 40 + drop
        if rsi is not None and rsi < 30:
            confidence += 10
        technical = drop + candidate.volume_to_cap * 20

        return Opportunity(
            asset=snap,
            category=self.category,
            reason="Significantly oversold with potential bounce",
            confidence=_round(min(75.0, confidence)),
            suggested_allocation=4.0,
            expected_return=min(80.0, drop * 2),
            risk_level=RiskLevel.HIGH if snap.market_cap < 50_000_000 else RiskLevel.MEDIUM,
            market_signal="Oversold conditions with volume support",
            technical_score=technical,
            normalized_score=self.normalize(technical),
            quality_score=candidate.quality_score,
            rsi=rsi,
        )


@register
class TrendingScreen(Screen):
    """Larger cap with strong momentum and deep liquidity."""

    category = OpportunityCategory.TRENDING
    max_technical_score = 180.0

    def evaluate(self, candidate: Candidate) -> Opportunity | None:
        snap = candidate.snapshot
        change = snap.change_24h
        if not (10 < change <= 25) or snap.volume_24h <= 20_000_000 or snap.market_cap <= 100_000_000:
            return None

        ratio = candidate.volume_to_cap
        overbought = candidate.is_overbought(30)

        confidence = min(85.0, 60 + change)
        if overbought:
            confidence = max(30.0, confidence - 40)
            expected = min(50.0, 20 + change * 0.5)
            technical = max(20.0, change * 0.5 + ratio * 15)
            reason = "Trending but overbought - consider waiting for pullback"
            signal = "High momentum but overbought - wait for pullback"
        else:
            expected = min(100.0, 30 + change * 1.5)
            technical = change + ratio * 30
            reason = "Strong momentum and trending upward"
            signal = "Strong momentum with good fundamentals"

        return Opportunity(
            asset=snap,
            category=self.category,
            reason=reason,
            confidence=_round(confidence),
            suggested_allocation=3.0 if overbought else 6.0,
            expected_return=expected,
            risk_level=RiskLevel.HIGH if overbought else RiskLevel.MEDIUM,
            market_signal=signal,
            technical_score=technical,
            normalized_score=self.normalize(technical),
            quality_score=candidate.quality_score,
            rsi=candidate.rsi,
        )


@register
class DegenScreen(Screen):
    """Micro cap swinging hard in either direction."""

    category = OpportunityCategory.DEGEN
    max_technical_score = 500.0

    def evaluate(self, candidate: Candidate) -> Opportunity | None:
        snap = candidate.snapshot
        move = abs(snap.change_24h)
        if not (0 < snap.market_cap < 10_000_000) or snap.volume_24h <= 100_000 or move <= 20:
            return None

        technical = move + candidate.volume_to_cap * 200
        return Opportunity(
            asset=snap,
            category=self.category,
            reason="Ultra low cap with high volatility - degen play",
            confidence=_round(min(60.0, 30 + move)),
            suggested_allocation=2.0,
            expected_return=min(500.0, 100 + move * 5),
            risk_level=RiskLevel.HIGH,
            market_signal="Ultra low cap with high volatility",
            technical_score=technical,
            normalized_score=self.normalize(technical),
            quality_score=candidate.quality_score,
            rsi=candidate.rsi,
        )


@register
class WaitAndWatchScreen(Screen):
    """Overextended but fundamentally interesting: watch for a pullback, allocate nothing yet."""

    category = OpportunityCategory.WAIT_AND_WATCH

    def evaluate(self, candidate: Candidate) -> Opportunity | None:
        snap = candidate.snapshot
        change = snap.change_24h
        if change <= 30 or not (10_000_000 < snap.market_cap < 1_000_000_000):
            return None
        if snap.volume_24h <= snap.market_cap * 0.05:
            return None

        technical = max(10.0, 50 - change)
        return Opportunity(
            asset=snap,
            category=self.category,
            reason="Overbought but strong fundamentals - wait for pullback",
            confidence=_round(max(20.0, 50 - change)),
            suggested_allocation=0.0,
            expected_return=min(80.0, abs(change) * 0.8),
            risk_level=RiskLevel.HIGH,
            market_signal=f"Overbought by {change:.1f}% - wait for 20-30% pullback",
            technical_score=technical,
            normalized_score=self.normalize(technical),
            quality_score=candidate.quality_score,
            rsi=candidate.rsi,
        )
