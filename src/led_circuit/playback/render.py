"""Render output — derives LED colours from the active frame.

Everything here is a pure function of its inputs; colours are recomputed
from scratch every tick rather than patched incrementally.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from led_circuit.frames.models import Frame
from led_circuit.frames.store import FrameSequence
from led_circuit.playback.clock import PlaybackState
from led_circuit.telemetry.models import EntityInfo
from led_circuit.telemetry.roster import color_for


@dataclass(frozen=True)
class RenderSnapshot:
    """Everything the display needs for one tick."""

    running: bool
    elapsed_race_time: float
    race_time_label: str
    speed: int
    current_index: int
    frame_count: int
    leds: dict[int, str] = field(default_factory=dict)
    """LED id → ``#RRGGBB`` for every lit LED."""


def led_colors(frame: Frame | None, roster: Mapping[int, EntityInfo]) -> dict[int, str]:
    """Return ``{position_id: colour}`` for *frame*.

    When two cars share an LED the later slot wins.  Cars missing from
    *roster* are shown white.
    """
    if frame is None:
        return {}
    return {a.position_id: color_for(roster, a.entity_id) for a in frame.assignments}


def format_race_time(seconds: float) -> str:
    """Format race time as ``HH:MM:SS.ss``.

    Examples
    --------
    >>> format_race_time(3725.5)
    '01:02:05.50'
    """
    seconds = max(seconds, 0.0)
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    return f"{hours:02d}:{minutes:02d}:{seconds % 60:05.2f}"


def active_frame(state: PlaybackState, frames: FrameSequence) -> Frame | None:
    """Return the frame under the cursor, or None when stopped or empty."""
    if not state.started:
        return None
    return frames.get(state.current_index)


def render_snapshot(
    state: PlaybackState,
    frames: FrameSequence,
    roster: Mapping[int, EntityInfo],
) -> RenderSnapshot:
    return RenderSnapshot(
        running=state.started,
        elapsed_race_time=state.elapsed_race_time,
        race_time_label=format_race_time(state.elapsed_race_time),
        speed=state.speed,
        current_index=state.current_index,
        frame_count=len(frames),
        leds=led_colors(active_frame(state, frames), roster),
    )
