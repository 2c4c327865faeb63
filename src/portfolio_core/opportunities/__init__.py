"""Opportunity scanning — registered screens over a candidate universe."""

from portfolio_core.opportunities.base import Candidate, Screen
from portfolio_core.opportunities.registry import SCREEN_REGISTRY, register
from portfolio_core.opportunities.scanner import build_screens, scan_opportunities

__all__ = [
    "SCREEN_REGISTRY",
    "Candidate",
    "Screen",
    "build_screens",
    "register",
    "scan_opportunities",
]
