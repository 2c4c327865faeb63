"""Market data models — normalized asset snapshots."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, PositiveFloat


class AssetSnapshot(BaseModel):
    """Point-in-time market data for one tradable asset.

    Produced by a market-data adapter and never mutated; a refresh yields a
    new snapshot. ``prices_7d`` and ``volumes_7d`` are chronological.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    symbol: str
    name: str
    price: float = Field(gt=0)
    change_24h: float
    change_7d: float | None = None
    market_cap: float = Field(ge=0)
    volume_24h: float = Field(ge=0)
    prices_7d: tuple[PositiveFloat, ...] | None = None
    volumes_7d: tuple[NonNegativeFloat, ...] | None = None

    @property
    def volatility(self) -> float:
        """24h volatility proxy: |24h change| as a fraction."""
        return abs(self.change_24h) / 100
