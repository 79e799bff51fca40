"""Nearest-LED lookup for raw track coordinates."""

from __future__ import annotations

import math
from collections.abc import Sequence

from led_circuit.frames.models import ResolvedAssignment
from led_circuit.telemetry.models import Sample
from led_circuit.track.layout import InputDataError
from led_circuit.track.models import PhysicalPosition


class SpatialResolver:
    """Maps continuous (x, y) coordinates onto the fixed LED set.

    A linear scan is used; the layout holds at most a few hundred LEDs.
    When two LEDs are exactly equidistant the one that appears first in
    *positions* wins, so results never depend on hashing or set order.

    Args:
        positions: The session's position set in canonical order.

    Raises:
        InputDataError: If *positions* is empty.
    """

    def __init__(self, positions: Sequence[PhysicalPosition]) -> None:
        if not positions:
            raise InputDataError("Position set is empty")
        self._positions = tuple(positions)

    @property
    def positions(self) -> tuple[PhysicalPosition, ...]:
        return self._positions

    def nearest(self, x: float, y: float) -> PhysicalPosition:
        """Return the position with minimum Euclidean distance to ``(x, y)``."""
        best = self._positions[0]
        best_dist = math.hypot(x - best.x, y - best.y)
        for pos in self._positions[1:]:
            dist = math.hypot(x - pos.x, y - pos.y)
            # strict comparison keeps the earliest position on ties
            if dist < best_dist:
                best = pos
                best_dist = dist
        return best

    def resolve(self, x: float, y: float) -> int:
        """Return the id of the nearest position."""
        return self.nearest(x, y).id

    def resolve_sample(self, sample: Sample) -> ResolvedAssignment:
        """Convert a validated sample into an entity → LED assignment."""
        return ResolvedAssignment(
            entity_id=sample.entity_id,
            position_id=self.resolve(sample.x, sample.y),
        )
