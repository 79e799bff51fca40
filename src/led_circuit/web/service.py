"""ReplaySession — owns one replay: data, acquisition, frames and playback."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from led_circuit.config import ReplayConfig
from led_circuit.frames.builder import frames_from_samples
from led_circuit.frames.models import Frame
from led_circuit.frames.store import FrameSequence
from led_circuit.playback.clock import PlaybackClock
from led_circuit.playback.render import RenderSnapshot, render_snapshot
from led_circuit.telemetry.acquisition import (
    AcquisitionPipeline,
    AcquisitionReport,
    TelemetrySource,
)
from led_circuit.telemetry.models import EntityInfo
from led_circuit.telemetry.openf1 import OpenF1LocationSource
from led_circuit.telemetry.roster import load_roster, roster_by_id
from led_circuit.track.layout import load_positions
from led_circuit.track.models import PhysicalPosition
from led_circuit.track.resolver import SpatialResolver

_logger = logging.getLogger(__name__)


class AcquisitionBusyError(RuntimeError):
    """Raised when an acquisition is started while another is running."""


@dataclass(frozen=True)
class AcquisitionStatus:
    running: bool
    frame_count: int
    report: AcquisitionReport | None
    error: str | None


def openf1_source(config: ReplayConfig) -> TelemetrySource:
    return OpenF1LocationSource(
        session_key=config.session_key,
        base_url=config.base_url,
        timeout=config.request_timeout_s,
    )


class ReplaySession:
    """Glue between acquisition, the frame store and the playback clock.

    Acquisition runs on a background thread with its own event loop, so
    control and render calls never wait on the network.  Frames are
    published to the store in one batch once acquisition completes.

    Parameters
    ----------
    config:
        Runtime settings.
    source_factory:
        Builds the telemetry source for each acquisition run.  Defaults to
        the OpenF1 client.
    positions, roster:
        Pre-loaded start-up data; loaded from *config* when omitted.
    clock:
        Monotonic time source for playback.
    sleep:
        Backoff sleep coroutine for acquisition.
    """

    def __init__(
        self,
        config: ReplayConfig,
        source_factory: Callable[[ReplayConfig], TelemetrySource] = openf1_source,
        positions: Sequence[PhysicalPosition] | None = None,
        roster: Sequence[EntityInfo] | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self.positions = list(positions) if positions is not None else load_positions(config.positions_path)
        self.roster = list(roster) if roster is not None else load_roster(config.roster_path)
        self._roster_map = roster_by_id(self.roster)
        self.resolver = SpatialResolver(self.positions)
        self.frames = FrameSequence()
        self.clock = PlaybackClock(
            self.frames,
            frame_duration=config.frame_duration_s,
            min_speed=config.min_speed,
            max_speed=config.max_speed,
            clock=clock,
        )
        self._source_factory = source_factory
        self._sleep = sleep

        self._lock = threading.Lock()
        self._generation = 0
        self._thread: threading.Thread | None = None
        self._busy = False
        self._pipeline: AcquisitionPipeline | None = None
        self._report: AcquisitionReport | None = None
        self._error: str | None = None

    # ------------------------------------------------------------------
    # Acquisition
    # ------------------------------------------------------------------

    @property
    def entity_ids(self) -> list[int]:
        if self.config.drivers:
            return list(self.config.drivers)
        return [info.entity_id for info in self.roster]

    @property
    def acquiring(self) -> bool:
        return self._busy

    def build_pipeline(self) -> AcquisitionPipeline:
        cfg = self.config
        return AcquisitionPipeline(
            source=self._source_factory(cfg),
            entity_ids=self.entity_ids,
            start=cfg.start,
            end=cfg.end,
            window=cfg.window,
            max_concurrency=cfg.max_concurrency,
            policy=cfg.backoff_policy(),
            stop_on_empty_window=cfg.stop_on_empty_window,
            sleep=self._sleep,
        )

    def acquire(self) -> AcquisitionReport:
        """Fetch samples, build frames and publish them (blocking).

        Raises
        ------
        AcquisitionBusyError
            If an acquisition is already running.
        """
        generation = self._claim()
        try:
            return self._acquire(generation)
        finally:
            self._release()

    def _acquire(self, generation: int) -> AcquisitionReport:
        pipeline = self.build_pipeline()
        with self._lock:
            if generation != self._generation:
                pipeline.cancel()
            else:
                self._error = None
            self._pipeline = pipeline

        report = pipeline.run_sync()
        frames = frames_from_samples(report.samples, self.resolver, self.config.frame_capacity)

        with self._lock:
            if generation != self._generation or report.cancelled:
                if self._pipeline is pipeline:
                    self._pipeline = None
                _logger.info("Acquisition superseded; discarding %d frames", len(frames))
                return report
            self._report = report
            self._pipeline = None
            total = self.frames.extend(frames)
        _logger.info("Published %d frames (%d total)", len(frames), total)
        return report

    def start_acquisition(self) -> None:
        """Run :meth:`acquire` on a background thread.

        Raises
        ------
        AcquisitionBusyError
            If an acquisition is already running.
        """
        generation = self._claim()
        with self._lock:
            self._thread = threading.Thread(
                target=self._acquire_worker,
                args=(generation,),
                daemon=True,
                name="Acquisition",
            )
            self._thread.start()

    def wait_acquisition(self, timeout: float | None = None) -> bool:
        """Join the acquisition thread; True if it has finished."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def acquisition_status(self) -> AcquisitionStatus:
        with self._lock:
            return AcquisitionStatus(
                running=self.acquiring,
                frame_count=len(self.frames),
                report=self._report,
                error=self._error,
            )

    def publish(self, frames: Sequence[Frame]) -> int:
        """Publish pre-built frames (e.g. from a frame file)."""
        with self._lock:
            return self.frames.extend(frames)

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def start(self) -> RenderSnapshot:
        return render_snapshot(self.clock.start(), self.frames, self._roster_map)

    def stop(self) -> RenderSnapshot:
        return render_snapshot(self.clock.stop(), self.frames, self._roster_map)

    def set_speed(self, speed: int) -> RenderSnapshot:
        return render_snapshot(self.clock.set_speed(speed), self.frames, self._roster_map)

    def snapshot(self) -> RenderSnapshot:
        """Run one render tick and return the LED state."""
        return render_snapshot(self.clock.tick(), self.frames, self._roster_map)

    def reset(self) -> None:
        """Stop playback, abandon any acquisition and drop every frame."""
        self.clock.stop()
        with self._lock:
            self._generation += 1
            if self._pipeline is not None:
                self._pipeline.cancel()
                self._pipeline = None
            self._report = None
            self._error = None
            self.frames.clear()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _claim(self) -> int:
        with self._lock:
            if self._busy:
                raise AcquisitionBusyError("acquisition already running")
            self._busy = True
            return self._generation

    def _release(self) -> None:
        with self._lock:
            self._busy = False

    def _acquire_worker(self, generation: int) -> None:
        try:
            self._acquire(generation)
        except Exception as exc:
            _logger.exception("Acquisition failed")
            with self._lock:
                # a reset since spawn owns the session state now
                if generation == self._generation:
                    self._error = str(exc)
                    self._pipeline = None
        finally:
            self._release()
