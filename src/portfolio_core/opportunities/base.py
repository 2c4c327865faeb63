"""Opportunity screen abstract base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from portfolio_core.models.enums import OpportunityCategory
from portfolio_core.models.indicators import IndicatorResult
from portfolio_core.models.market import AssetSnapshot
from portfolio_core.models.opportunity import Opportunity

RSI_OVERBOUGHT = 70.0


@dataclass(frozen=True)
class Candidate:
    """A snapshot under consideration, with its indicator result if one was computed."""

    snapshot: AssetSnapshot
    indicators: IndicatorResult | None = None

    @property
    def rsi(self) -> float | None:
        return self.indicators.rsi if self.indicators is not None else None

    @property
    def quality_score(self) -> float | None:
        return self.indicators.quality_score if self.indicators is not None else None

    @property
    def volume_to_cap(self) -> float:
        cap = self.snapshot.market_cap
        return self.snapshot.volume_24h / cap if cap > 0 else 0.0

    def is_overbought(self, change_threshold: float) -> bool:
        """RSI above 70 when known, otherwise a 24h move above *change_threshold*."""
        if self.rsi is not None:
            return self.rsi > RSI_OVERBOUGHT
        return self.snapshot.change_24h > change_threshold


class Screen(ABC):
    """Base class for opportunity screens.

    Subclasses set ``category`` and ``max_technical_score`` and implement
    ``evaluate()``. Keyword params override a screen's thresholds.
    """

    category: OpportunityCategory
    max_technical_score: float = 200.0

    def __init__(self, **params: Any) -> None:
        self.params = params

    @abstractmethod
    def evaluate(self, candidate: Candidate) -> Opportunity | None:
        """Return an Opportunity if the candidate passes the screen, else None."""
        ...

    def normalize(self, technical_score: float) -> float:
        """Technical score on a 0-100 scale relative to this category's maximum."""
        return min(100.0, max(0.0, technical_score / self.max_technical_score * 100))

    def best(self, candidates: list[Candidate]) -> Opportunity | None:
        """Highest-confidence match; the earliest candidate wins ties."""
        best: Opportunity | None = None
        for candidate in candidates:
            opportunity = self.evaluate(candidate)
            if opportunity is None:
                continue
            if best is None or opportunity.confidence > best.confidence:
                best = opportunity
        return best
