"""PlaybackTicker — fixed-rate render tick on a background thread."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping

from led_circuit.frames.store import FrameSequence
from led_circuit.playback.clock import PlaybackClock
from led_circuit.playback.render import RenderSnapshot, render_snapshot
from led_circuit.telemetry.models import EntityInfo

_logger = logging.getLogger(__name__)


class PlaybackTicker:
    """Ticks a :class:`PlaybackClock` at *target_hz* and publishes snapshots.

    Parameters
    ----------
    clock:
        The playback clock to advance.
    frames:
        Frame store read on every tick.
    roster:
        Entity id → :class:`EntityInfo` lookup for LED colours.
    on_render:
        Optional callback receiving each :class:`RenderSnapshot`.  Exceptions
        raised by the callback are logged and do not stop the ticker.
    target_hz:
        Tick frequency in Hz.
    join_timeout:
        Seconds :meth:`stop` waits for the thread to exit.
    """

    def __init__(
        self,
        clock: PlaybackClock,
        frames: FrameSequence,
        roster: Mapping[int, EntityInfo],
        on_render: Callable[[RenderSnapshot], None] | None = None,
        target_hz: float = 30.0,
        join_timeout: float = 2.0,
    ) -> None:
        if target_hz <= 0:
            raise ValueError("target_hz must be > 0")
        self._clock = clock
        self._frames = frames
        self._roster = roster
        self._on_render = on_render
        self._interval = 1.0 / target_hz
        self._join_timeout = join_timeout
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._latest: RenderSnapshot | None = None
        self.ticks = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def latest(self) -> RenderSnapshot | None:
        """Most recently published snapshot."""
        return self._latest

    @property
    def running(self) -> bool:
        return self._thread is not None

    def start(self) -> None:
        """Start the background tick thread."""
        if self._thread is not None:
            return
        # one event per run; a thread outliving stop() still sees its own flag set
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop_event,), daemon=True, name="PlaybackTicker"
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the tick thread to stop and join it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=self._join_timeout)
            if self._thread.is_alive():
                _logger.warning("Tick thread did not exit within %.1fs", self._join_timeout)
            self._thread = None

    def tick(self) -> RenderSnapshot:
        """Advance the clock once and publish the resulting snapshot."""
        snapshot = render_snapshot(self._clock.tick(), self._frames, self._roster)
        self._latest = snapshot
        self.ticks += 1
        if self._on_render is not None:
            try:
                self._on_render(snapshot)
            except Exception:
                _logger.exception("Render callback failed")
        return snapshot

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            t0 = time.monotonic()
            self.tick()
            wait = self._interval - (time.monotonic() - t0)
            if wait > 0:
                stop_event.wait(wait)
