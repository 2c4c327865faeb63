"""Config loader — reads YAML, applies PORTFOLIO_* env var overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from portfolio_core.config.schema import AppConfig

_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "PORTFOLIO_LOG_LEVEL": ("logging", "level"),
    "PORTFOLIO_LOG_FORMAT": ("logging", "format"),
    "PORTFOLIO_STABLE_ASSET_ID": ("engine", "stable_asset_id"),
    "PORTFOLIO_ACCOUNT_SIZE": ("engine", "account_size"),
}


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from a YAML file, then apply env var overrides.

    If *path* is None or the file doesn't exist, returns defaults.

    Environment variable overrides:
        PORTFOLIO_LOG_LEVEL        -> logging.level
        PORTFOLIO_LOG_FORMAT       -> logging.format
        PORTFOLIO_STABLE_ASSET_ID  -> engine.stable_asset_id
        PORTFOLIO_ACCOUNT_SIZE     -> engine.account_size
    """
    data: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}

    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            data.setdefault(section, {})[key] = value

    return AppConfig.model_validate(data)
