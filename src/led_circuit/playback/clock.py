"""PlaybackClock — maps scaled wall-clock time onto a frame index."""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable, Sized
from dataclasses import dataclass
from enum import Enum

# absorbs float error at exact frame boundaries (0.3 / 0.1 == 2.9999999999999996)
_INDEX_EPSILON = 1e-9


class PlaybackStatus(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass(frozen=True)
class PlaybackState:
    """Immutable snapshot published by every tick."""

    started: bool
    start_wall_time: float | None
    """Monotonic reference instant captured by :meth:`PlaybackClock.start`."""
    elapsed_race_time: float
    """Replayed race time in seconds (wall time scaled by speed)."""
    speed: int
    current_index: int

    @property
    def status(self) -> PlaybackStatus:
        return PlaybackStatus.RUNNING if self.started else PlaybackStatus.STOPPED


class PlaybackClock:
    """Two-state playback cursor (``STOPPED`` / ``RUNNING``).

    While running, each :meth:`tick` computes::

        elapsed_race_time = (now - reference) * speed
        target            = floor(elapsed_race_time / frame_duration)
        current_index     = min(target, frame_count - 1)

    ``reference`` is the instant captured by :meth:`start`; a speed change
    applies to the whole interval from the next tick.  The index never moves
    backwards while running, even if slowing down would make the raw target
    smaller.

    All methods are thread-safe; ``stop()`` and ``tick()`` share one lock so a
    tick following a stop always observes ``STOPPED``.

    Args:
        frames: Anything with ``len()``, normally the session's
            :class:`~led_circuit.frames.store.FrameSequence`.  Read on every
            tick, so the sequence may grow during playback.
        frame_duration: Seconds of race time represented by one frame.
        min_speed, max_speed: Accepted speed multiplier range.
        clock: Monotonic time source, injected in tests.
    """

    def __init__(
        self,
        frames: Sized,
        frame_duration: float = 0.1,
        min_speed: int = 1,
        max_speed: int = 5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if frame_duration <= 0:
            raise ValueError("frame_duration must be > 0")
        if not 1 <= min_speed <= max_speed:
            raise ValueError("speed bounds must satisfy 1 <= min_speed <= max_speed")
        self._frames = frames
        self._frame_duration = frame_duration
        self._min_speed = min_speed
        self._max_speed = max_speed
        self._clock = clock
        self._lock = threading.Lock()

        self._started = False
        self._start_wall_time: float | None = None
        self._elapsed = 0.0
        self._speed = min_speed
        self._index = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def frame_duration(self) -> float:
        return self._frame_duration

    @property
    def speed_bounds(self) -> tuple[int, int]:
        return self._min_speed, self._max_speed

    @property
    def state(self) -> PlaybackState:
        with self._lock:
            return self._snapshot()

    def start(self) -> PlaybackState:
        """Begin playback from frame 0.  Restarts if already running."""
        with self._lock:
            now = self._clock()
            self._started = True
            self._start_wall_time = now
            self._elapsed = 0.0
            self._index = 0
            return self._snapshot()

    def stop(self) -> PlaybackState:
        """Stop playback and clear index and elapsed time."""
        with self._lock:
            self._started = False
            self._start_wall_time = None
            self._elapsed = 0.0
            self._index = 0
            return self._snapshot()

    def set_speed(self, speed: int) -> PlaybackState:
        """Change the playback multiplier; applies from the next tick.

        Raises
        ------
        ValueError
            If *speed* is outside the configured bounds.
        """
        if not self._min_speed <= speed <= self._max_speed:
            raise ValueError(
                f"speed must be between {self._min_speed} and {self._max_speed}, got {speed}"
            )
        with self._lock:
            self._speed = speed
            return self._snapshot()

    def tick(self) -> PlaybackState:
        """Advance the cursor to the current wall-clock instant."""
        with self._lock:
            if not self._started:
                return self._snapshot()

            wall = max(self._clock() - self._start_wall_time, 0.0)
            self._elapsed = wall * self._speed
            target = math.floor(self._elapsed / self._frame_duration + _INDEX_EPSILON)
            count = len(self._frames)
            index = min(target, count - 1) if count > 0 else 0
            self._index = max(self._index, index)
            return self._snapshot()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _snapshot(self) -> PlaybackState:
        return PlaybackState(
            started=self._started,
            start_wall_time=self._start_wall_time,
            elapsed_race_time=self._elapsed,
            speed=self._speed,
            current_index=self._index,
        )
