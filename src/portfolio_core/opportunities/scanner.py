"""Run every registered screen over a candidate universe."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

import structlog

import portfolio_core.opportunities.screens  # noqa: F401  trigger @register decorators
from portfolio_core.config.schema import EngineSettings
from portfolio_core.models.indicators import IndicatorResult
from portfolio_core.models.market import AssetSnapshot
from portfolio_core.models.opportunity import Opportunity
from portfolio_core.models.portfolio import Portfolio
from portfolio_core.opportunities.base import Candidate, Screen
from portfolio_core.opportunities.registry import SCREEN_REGISTRY

log = structlog.get_logger("opportunities")


def build_screens(params: Mapping[str, Mapping[str, Any]] | None = None) -> list[Screen]:
    """Instantiate every registered screen, passing per-category params."""
    params = params or {}
    return [cls(**params.get(category.value, {})) for category, cls in SCREEN_REGISTRY.items()]


def scan_opportunities(
    universe: Sequence[AssetSnapshot],
    portfolio: Portfolio | None = None,
    indicators: Mapping[str, IndicatorResult] | None = None,
    settings: EngineSettings | None = None,
    screens: Sequence[Screen] | None = None,
) -> list[Opportunity]:
    """Best buy candidates from *universe*, skipping assets already held.

    Each screen contributes at most one opportunity. An asset flagged by
    several screens keeps its highest-confidence entry. Results are sorted
    by confidence and truncated to ``settings.opportunity_limit``.
    """
    settings = settings or EngineSettings()
    indicators = indicators or {}
    screens = list(screens) if screens is not None else build_screens()
    held = {a.id for a in portfolio.assets} if portfolio is not None else set()

    candidates = [
        Candidate(snapshot=s, indicators=indicators.get(s.id))
        for s in universe
        if s.id not in held and not settings.is_stable(s.id, s.symbol)
    ]

    by_asset: dict[str, Opportunity] = {}
    for screen in screens:
        found = screen.best(candidates)
        if found is None:
            continue
        log.debug(
            "opportunity_found",
            category=found.category.value,
            asset=found.asset.id,
            confidence=found.confidence,
        )
        existing = by_asset.get(found.asset.id)
        if existing is None or found.confidence > existing.confidence:
            by_asset[found.asset.id] = found

    ranked = sorted(by_asset.values(), key=lambda o: o.confidence, reverse=True)
    result = ranked[: settings.opportunity_limit]

    log.info(
        "opportunities_scanned",
        universe=len(universe),
        candidates=len(candidates),
        found=len(by_asset),
        returned=len(result),
    )
    return result
