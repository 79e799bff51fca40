"""FrameBuilder — batches resolved assignments into fixed-capacity frames."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from led_circuit.frames.models import Frame, ResolvedAssignment

if TYPE_CHECKING:
    from led_circuit.telemetry.models import Sample
    from led_circuit.track.resolver import SpatialResolver

DEFAULT_CAPACITY = 20


class FrameBuilder:
    """Groups a time-ordered assignment stream into sealed :class:`Frame` objects.

    Algorithm:
    1. Keep one open frame of *capacity* slots.
    2. Place each assignment into the first empty slot.
    3. When the frame is full, seal it and open a fresh one.
    4. At end of input, seal the open frame if it holds anything.

    Nothing is ever dropped or de-duplicated: a burst of more than *capacity*
    cars at one timestamp spills into the following frame, and the same car
    may appear twice in one frame.

    Args:
        capacity: Number of slots per frame (maximum cars shown at once).
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._open: list[ResolvedAssignment] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def pending(self) -> int:
        """Number of assignments in the open frame."""
        return len(self._open)

    def add(self, assignment: ResolvedAssignment) -> Frame | None:
        """Place *assignment*; return the sealed frame if this filled it."""
        self._open.append(assignment)
        if len(self._open) == self.capacity:
            return self._seal()
        return None

    def flush(self) -> Frame | None:
        """Seal the open frame; None if it is empty."""
        if not self._open:
            return None
        return self._seal()

    def build(self, assignments: Iterable[ResolvedAssignment]) -> list[Frame]:
        """Convert a whole assignment sequence into sealed frames."""
        frames: list[Frame] = []
        for assignment in assignments:
            sealed = self.add(assignment)
            if sealed is not None:
                frames.append(sealed)
        last = self.flush()
        if last is not None:
            frames.append(last)
        return frames

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _seal(self) -> Frame:
        empty = self.capacity - len(self._open)
        frame = Frame(slots=tuple(self._open) + (None,) * empty)
        self._open = []
        return frame


def frames_from_samples(
    samples: Iterable[Sample],
    resolver: SpatialResolver,
    capacity: int = DEFAULT_CAPACITY,
) -> list[Frame]:
    """Resolve time-ordered *samples* onto LEDs and batch them into frames."""
    builder = FrameBuilder(capacity)
    return builder.build(resolver.resolve_sample(s) for s in samples)
