"""Cashflow projection engine for real-estate development deals."""

__version__ = "0.1.0"
