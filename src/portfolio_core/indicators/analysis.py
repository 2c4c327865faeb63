"""Run the whole indicator library over one snapshot."""

from __future__ import annotations

import structlog

from portfolio_core.config.schema import EngineSettings
from portfolio_core.errors import InsufficientData
from portfolio_core.indicators.core import bollinger_bands, ema, macd, rsi
from portfolio_core.indicators.levels import risk_metrics, support_resistance
from portfolio_core.indicators.momentum import short_term_momentum
from portfolio_core.indicators.scoring import (
    ema_strength,
    holding_period,
    quality_score,
    volume_analysis,
)
from portfolio_core.models.indicators import IndicatorResult
from portfolio_core.models.market import AssetSnapshot

log = structlog.get_logger("indicators")


def analyze_asset(
    snapshot: AssetSnapshot,
    settings: EngineSettings | None = None,
) -> IndicatorResult:
    """Compute every indicator the snapshot's history allows.

    Indicators whose window the series cannot fill are left as ``None`` and
    named in ``unavailable``.
    """
    settings = settings or EngineSettings()
    closes = list(snapshot.prices_7d or ())
    unavailable: dict[str, str] = {}

    def keep(name, value):
        if isinstance(value, InsufficientData):
            unavailable[name] = str(value)
            log.debug("indicator_unavailable", asset=snapshot.id, indicator=name, reason=str(value))
            return None
        return value

    ema_50 = keep("ema_50", ema(closes, 50))
    ema_200 = keep("ema_200", ema(closes, 200))
    rsi_value = keep("rsi", rsi(closes))
    macd_value = keep("macd", macd(closes))
    bands = keep("bollinger", bollinger_bands(closes))
    levels = keep("levels", support_resistance(closes, settings.support_resistance_lookback))
    volume = keep("volume", volume_analysis(snapshot.volume_24h, snapshot.volumes_7d))
    momentum = keep("momentum", short_term_momentum(closes))

    risk = None
    if levels is not None:
        risk = risk_metrics(
            closes[-1],
            levels.support,
            levels.resistance,
            account_size=settings.account_size,
            max_risk_percent=settings.max_risk_percent,
            max_units=settings.max_recommended_units,
        )
    else:
        unavailable["risk"] = "requires support/resistance levels"

    strength = ema_strength(ema_50, ema_200)
    score = quality_score(
        strength,
        rsi_value,
        volume_healthy=volume.is_healthy if volume is not None else False,
        market_cap=snapshot.market_cap,
        change_24h=snapshot.change_24h,
    )

    return IndicatorResult(
        asset_id=snapshot.id,
        symbol=snapshot.symbol,
        price=snapshot.price,
        ema_50=ema_50,
        ema_200=ema_200,
        rsi=rsi_value,
        macd=macd_value,
        bollinger=bands,
        levels=levels,
        risk=risk,
        volume=volume,
        momentum=momentum,
        ema_strength=strength,
        quality_score=score,
        holding_period=holding_period(strength, snapshot.change_24h, snapshot.market_cap),
        unavailable=unavailable,
    )
