"""Quantitative decision engine for simulated crypto portfolios."""

__version__ = "0.1.0"
