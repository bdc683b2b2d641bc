"""Tick-driven party combat simulator with drop and profit estimation."""

__version__ = "1.0.0"
