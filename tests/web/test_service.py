"""Tests for ReplaySession — acquisition, publication, control and reset."""

from __future__ import annotations

import asyncio
import threading

import pytest

from led_circuit.config import ReplayConfig
from led_circuit.frames.models import Frame, ResolvedAssignment
from led_circuit.telemetry.models import QueryResult
from led_circuit.web.service import AcquisitionBusyError, ReplaySession


def test_entity_ids_default_to_roster(session):
    assert session.entity_ids == [1, 44]


def test_entity_ids_follow_configured_drivers(session):
    custom = ReplaySession(
        ReplayConfig(drivers=(44,)),
        positions=session.positions,
        roster=session.roster,
    )
    assert custom.entity_ids == [44]


def test_acquire_builds_and_publishes_frames(session):
    report = session.acquire()
    assert len(report.samples) == 8  # 2 cars x 4 s at 1 Hz
    assert report.windows_requested == 4
    assert len(session.frames) == 4  # 2 slots per frame
    total = sum(len(f) for f in session.frames.snapshot())
    assert total == 8


def test_frames_are_time_ordered(session):
    session.acquire()
    first = session.frames.get(0)
    assert {a.entity_id for a in first.assignments} == {1, 44}


def test_background_acquisition(session):
    session.start_acquisition()
    assert session.wait_acquisition(timeout=5.0)
    status = session.acquisition_status()
    assert not status.running
    assert status.frame_count == 4
    assert status.error is None
    assert status.report is not None and status.report.complete


class GatedSource:
    """Blocks every query until *gate* is set."""

    def __init__(self, gate: threading.Event) -> None:
        self._gate = gate

    async def query(self, entity_id, start, end):
        await asyncio.to_thread(self._gate.wait, 5.0)
        return QueryResult.success([])


def _session_with(source_factory, template: ReplaySession) -> ReplaySession:
    return ReplaySession(
        template.config,
        source_factory=source_factory,
        positions=template.positions,
        roster=template.roster,
    )


def test_second_acquisition_while_running_is_rejected(session):
    gate = threading.Event()
    gated = _session_with(lambda cfg: GatedSource(gate), session)
    gated.start_acquisition()
    try:
        assert gated.acquiring
        with pytest.raises(AcquisitionBusyError):
            gated.start_acquisition()
    finally:
        gate.set()
        assert gated.wait_acquisition(timeout=5.0)


def test_reset_during_acquisition_discards_results(session):
    gate = threading.Event()
    gated = _session_with(lambda cfg: GatedSource(gate), session)
    gated.start_acquisition()
    gated.reset()
    gate.set()
    assert gated.wait_acquisition(timeout=5.0)
    status = gated.acquisition_status()
    assert status.frame_count == 0
    assert status.report is None


def test_worker_error_is_recorded(session):
    def broken(cfg):
        raise RuntimeError("no network stack")

    failing = _session_with(broken, session)
    failing.start_acquisition()
    assert failing.wait_acquisition(timeout=5.0)
    assert failing.acquisition_status().error == "no network stack"


class GatedFailingSource(GatedSource):
    async def query(self, entity_id, start, end):
        await super().query(entity_id, start, end)
        raise RuntimeError("connection reset")


def test_error_from_run_abandoned_by_reset_is_not_recorded(session):
    gate = threading.Event()
    failing = _session_with(lambda cfg: GatedFailingSource(gate), session)
    failing.start_acquisition()
    failing.reset()
    gate.set()
    assert failing.wait_acquisition(timeout=5.0)
    assert failing.acquisition_status().error is None


def test_blocking_acquire_while_background_running_is_rejected(session):
    gate = threading.Event()
    gated = _session_with(lambda cfg: GatedSource(gate), session)
    gated.start_acquisition()
    try:
        with pytest.raises(AcquisitionBusyError):
            gated.acquire()
    finally:
        gate.set()
        assert gated.wait_acquisition(timeout=5.0)
    assert not gated.acquiring
    assert gated.acquisition_status().frame_count == 0


def test_blocking_acquire_releases_busy_flag(session):
    session.acquire()
    assert not session.acquiring
    session.start_acquisition()
    assert session.wait_acquisition(timeout=5.0)
    assert len(session.frames) == 8


def test_playback_snapshot_reports_lit_leds(session, fake_clock):
    session.acquire()
    session.start()
    fake_clock.now += 0.15
    snap = session.snapshot()
    assert snap.running
    assert snap.current_index == 1
    assert set(snap.leds.values()) <= {"#3671C6", "#6CD3BF"}
    assert snap.leds


def test_stop_clears_display(session, fake_clock):
    session.acquire()
    session.start()
    fake_clock.now += 0.25
    session.snapshot()
    snap = session.stop()
    assert not snap.running
    assert snap.current_index == 0
    assert snap.leds == {}


def test_reset_drops_frames_and_report(session):
    session.acquire()
    session.start()
    session.reset()
    status = session.acquisition_status()
    assert status.frame_count == 0
    assert status.report is None
    assert not session.clock.state.started


def test_publish_external_frames(session):
    frames = [Frame(slots=(ResolvedAssignment(1, 2), None))]
    assert session.publish(frames) == 1
    assert session.frames.get(0) == frames[0]
