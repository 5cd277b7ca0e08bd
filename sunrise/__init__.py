"""Sunrise alarm: wake up a fixed time before or after the next sunrise."""

__version__ = "1.0.0"
