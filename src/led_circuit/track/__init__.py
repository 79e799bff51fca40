"""LED board layout and spatial resolution.

Public API
----------
PhysicalPosition - one fixed LED location
SpatialResolver  - nearest-LED lookup for raw coordinates
InputDataError   - raised on malformed start-up data
default_positions / load_positions - position set loaders
"""

from led_circuit.track.layout import InputDataError, default_positions, load_positions
from led_circuit.track.models import PhysicalPosition
from led_circuit.track.resolver import SpatialResolver

__all__ = [
    "InputDataError",
    "PhysicalPosition",
    "SpatialResolver",
    "default_positions",
    "load_positions",
]
