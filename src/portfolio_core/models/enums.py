"""Closed vocabularies shared across the engine."""

from __future__ import annotations

from enum import Enum

from portfolio_core.errors import InvalidRiskProfile


class RiskProfile(str, Enum):
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"
    DEGEN = "degen"

    @classmethod
    def parse(cls, value: RiskProfile | str) -> RiskProfile:
        """Coerce *value* to a profile or raise ``InvalidRiskProfile``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidRiskProfile(value) from None


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def escalate(self) -> Urgency:
        """One notch up, saturating at HIGH."""
        if self is Urgency.LOW:
            return Urgency.MEDIUM
        return Urgency.HIGH


class SentimentClass(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class RebalanceType(str, Enum):
    REBALANCE = "rebalance"
    PARTIAL_REBALANCE = "partial-rebalance"
    HOLD = "hold"


class TradeAction(str, Enum):
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class RebalanceFrequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUALLY = "semi-annually"
    ANNUALLY = "annually"


class StopLossRisk(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class HoldingPeriodBucket(str, Enum):
    SHORT = "1-3 days"
    MEDIUM = "3-7 days"
    EXTENDED = "7-14 days"


class BandPosition(str, Enum):
    ABOVE = "above"
    BELOW = "below"
    INSIDE = "inside"


class OpportunityCategory(str, Enum):
    GEM = "gem"
    REPLACEMENT = "replacement"
    OVERSOLD = "oversold"
    TRENDING = "trending"
    DEGEN = "degen"
    WAIT_AND_WATCH = "wait-and-watch"


class Timeframe(str, Enum):
    ONE_WEEK = "1week"
    ONE_MONTH = "1month"
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"
    ONE_YEAR = "1year"

    @property
    def days(self) -> int:
        return _TIMEFRAME_DAYS[self]


_TIMEFRAME_DAYS = {
    Timeframe.ONE_WEEK: 7,
    Timeframe.ONE_MONTH: 30,
    Timeframe.THREE_MONTHS: 90,
    Timeframe.SIX_MONTHS: 180,
    Timeframe.ONE_YEAR: 365,
}


class MomentumSentiment(str, Enum):
    BULLISH = "bullish"
    SLIGHTLY_BULLISH = "slightly_bullish"
    NEUTRAL = "neutral"
    SLIGHTLY_BEARISH = "slightly_bearish"
    BEARISH = "bearish"


class PricePattern(str, Enum):
    UPTREND = "uptrend"
    DOWNTREND = "downtrend"
    CONSOLIDATION = "consolidation"
    MIXED = "mixed"
    NEUTRAL = "neutral"


class AgreementConfidence(str, Enum):
    """How far two momentum windows agree."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"
