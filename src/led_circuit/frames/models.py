"""Frame data structures."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ResolvedAssignment:
    """A car placed on an LED."""

    entity_id: int
    position_id: int


@dataclass(frozen=True)
class Frame:
    """A sealed, immutable batch of up to ``capacity`` assignments.

    Slot order follows insertion order; it has no meaning for rendering.
    Unused slots hold None.
    """

    slots: tuple[ResolvedAssignment | None, ...]

    @property
    def capacity(self) -> int:
        return len(self.slots)

    @property
    def assignments(self) -> list[ResolvedAssignment]:
        """Occupied slots, in slot order."""
        return [a for a in self.slots if a is not None]

    def __len__(self) -> int:
        return sum(1 for a in self.slots if a is not None)

    @property
    def is_full(self) -> bool:
        return all(a is not None for a in self.slots)
