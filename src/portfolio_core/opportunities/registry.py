"""Screen registry — decorated classes are auto-registered."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from portfolio_core.models.enums import OpportunityCategory
    from portfolio_core.opportunities.base import Screen

SCREEN_REGISTRY: dict[OpportunityCategory, type[Screen]] = {}


def register(cls: type[Screen]) -> type[Screen]:
    """Class decorator that adds a screen to the global registry."""
    if not getattr(cls, "category", None):
        raise ValueError(f"Screen class {cls.__name__} must define a 'category' attribute")
    if cls.category in SCREEN_REGISTRY:
        raise ValueError(f"Duplicate screen category: {cls.category.value!r}")
    SCREEN_REGISTRY[cls.category] = cls
    return cls
