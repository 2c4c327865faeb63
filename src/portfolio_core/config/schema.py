"""Configuration schema — Pydantic models for config.yaml."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"


class EngineSettings(BaseModel):
    """Tunable inputs shared by every engine component.

    Thresholds that define the rule tables live next to the tables
    themselves; only identities and caller-facing knobs belong here.
    """

    # Stable reserve identity
    stable_asset_id: str = "usd-coin"
    stable_symbol: str = "USDC"
    # Benchmarks are located by symbol
    btc_symbol: str = "BTC"
    eth_symbol: str = "ETH"
    # Position sizing
    account_size: float = Field(default=10000.0, gt=0)
    max_risk_percent: float = Field(default=2.0, gt=0, le=100)
    max_recommended_units: int = Field(default=1000, ge=0)
    # Indicator windows
    support_resistance_lookback: int = Field(default=100, ge=5)
    # Opportunity scanner
    opportunity_limit: int = Field(default=3, ge=1)

    def is_stable(self, asset_id: str, symbol: str) -> bool:
        """True if the asset is the designated stable reserve."""
        return asset_id == self.stable_asset_id or symbol.upper() == self.stable_symbol.upper()


class AppConfig(BaseModel):
    engine: EngineSettings = Field(default_factory=EngineSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
