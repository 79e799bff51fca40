"""Time-synchronised frame playback.

Public API
----------
PlaybackClock   - scaled wall clock → frame index
PlaybackState   - immutable clock snapshot
PlaybackTicker  - fixed-rate tick thread
RenderSnapshot  - per-tick render output
led_colors      - frame + roster → LED colour mapping
"""

from led_circuit.playback.clock import PlaybackClock, PlaybackState, PlaybackStatus
from led_circuit.playback.render import (
    RenderSnapshot,
    format_race_time,
    led_colors,
    render_snapshot,
)
from led_circuit.playback.ticker import PlaybackTicker

__all__ = [
    "PlaybackClock",
    "PlaybackState",
    "PlaybackStatus",
    "PlaybackTicker",
    "RenderSnapshot",
    "format_race_time",
    "led_colors",
    "render_snapshot",
]
