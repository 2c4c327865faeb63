"""Stop-loss analysis."""

from portfolio_core.stoploss.analyzer import (
    analyze_stop_losses,
    stop_loss_for,
    stop_loss_strategy,
)

__all__ = ["analyze_stop_losses", "stop_loss_for", "stop_loss_strategy"]
