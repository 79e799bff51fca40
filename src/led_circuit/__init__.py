"""Replay recorded car positions on a fixed LED circuit board."""

__version__ = "0.1.0"
