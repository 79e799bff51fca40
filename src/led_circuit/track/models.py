"""Track layout data structures."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PhysicalPosition:
    """A single LED on the physical circuit board.

    Coordinates share the units of the telemetry source (OpenF1 location
    data is in decimetres relative to an arbitrary circuit origin).
    """

    id: int
    """LED number. Not necessarily contiguous or 1-based."""

    x: float
    """X coordinate."""

    y: float
    """Y coordinate."""
