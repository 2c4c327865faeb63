"""Configuration system."""

from portfolio_core.config.loader import load_config
from portfolio_core.config.schema import AppConfig, EngineSettings, LoggingConfig

__all__ = ["AppConfig", "EngineSettings", "LoggingConfig", "load_config"]
