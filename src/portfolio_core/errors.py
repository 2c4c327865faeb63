"""Engine error taxonomy.

Fatal conditions are exceptions. Recoverable ones are values: indicator
functions return ``InsufficientData`` instead of raising, and degenerate
risk/reward ratios are flagged on the result.
"""

from __future__ import annotations

from dataclasses import dataclass


class PortfolioEngineError(Exception):
    """Base class for all engine errors."""


class MissingBenchmarkAsset(PortfolioEngineError):
    """Sentiment scoring was asked to run without BTC and ETH in the batch."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            f"Benchmark assets required for sentiment analysis: {', '.join(missing)}"
        )


class InvalidRiskProfile(PortfolioEngineError, ValueError):
    """A risk profile outside the closed set was supplied."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Unknown risk profile: {value!r}")


@dataclass(frozen=True)
class InsufficientData:
    """Series too short for an indicator's minimum window."""

    indicator: str
    required: int
    available: int

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"{self.indicator} needs {self.required} points, got {self.available}"
