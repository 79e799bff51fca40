"""Tests for FrameBuilder — fixed-capacity batching with overflow."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from led_circuit.frames.builder import FrameBuilder, frames_from_samples
from led_circuit.frames.models import ResolvedAssignment
from led_circuit.telemetry.models import Sample
from led_circuit.track.models import PhysicalPosition
from led_circuit.track.resolver import SpatialResolver


def _assignments(n: int, entity_base: int = 1) -> list[ResolvedAssignment]:
    return [ResolvedAssignment(entity_id=entity_base + i, position_id=i) for i in range(n)]


def test_two_at_same_time_then_one_later_with_capacity_two():
    a1 = ResolvedAssignment(1, 10)
    a2 = ResolvedAssignment(2, 11)
    a3 = ResolvedAssignment(3, 12)
    frames = FrameBuilder(capacity=2).build([a1, a2, a3])

    assert len(frames) == 2
    assert frames[0].slots == (a1, a2)
    assert frames[1].slots == (a3, None)


def test_empty_input_yields_no_frames():
    assert FrameBuilder().build([]) == []


def test_exact_multiple_has_no_trailing_empty_frame():
    frames = FrameBuilder(capacity=5).build(_assignments(10))
    assert len(frames) == 2
    assert all(f.is_full for f in frames)


def test_burst_larger_than_capacity_spills_not_drops():
    frames = FrameBuilder(capacity=20).build(_assignments(45))
    assert [len(f) for f in frames] == [20, 20, 5]
    assert all(f.capacity == 20 for f in frames)


def test_duplicate_entity_in_one_frame_retained():
    a = ResolvedAssignment(44, 3)
    b = ResolvedAssignment(44, 4)
    frames = FrameBuilder(capacity=4).build([a, b])
    assert frames[0].assignments == [a, b]


def test_no_assignment_dropped_and_capacity_respected():
    rng = random.Random(7)
    for _ in range(25):
        capacity = rng.randint(1, 8)
        items = _assignments(rng.randint(0, 60))
        frames = FrameBuilder(capacity).build(items)
        assert all(len(f) <= capacity for f in frames)
        assert [a for f in frames for a in f.assignments] == items


def test_incremental_add_and_flush():
    builder = FrameBuilder(capacity=3)
    assert builder.add(ResolvedAssignment(1, 1)) is None
    assert builder.add(ResolvedAssignment(2, 2)) is None
    sealed = builder.add(ResolvedAssignment(3, 3))
    assert sealed is not None and sealed.is_full
    assert builder.pending == 0
    assert builder.flush() is None


def test_flush_partial_frame_pads_with_none():
    builder = FrameBuilder(capacity=3)
    builder.add(ResolvedAssignment(1, 1))
    frame = builder.flush()
    assert frame is not None
    assert frame.slots == (ResolvedAssignment(1, 1), None, None)


def test_invalid_capacity_rejected():
    with pytest.raises(ValueError):
        FrameBuilder(capacity=0)


def test_frames_from_samples_resolves_and_batches_in_time_order():
    resolver = SpatialResolver([PhysicalPosition(1, 0.0, 0.0), PhysicalPosition(2, 10.0, 0.0)])
    t0 = datetime(2023, 8, 27, 13, 0, tzinfo=timezone.utc)
    samples = [
        Sample(1, 1.0, 0.0, t0),
        Sample(44, 9.0, 0.0, t0),
        Sample(1, 8.0, 0.0, t0 + timedelta(seconds=1)),
    ]
    frames = frames_from_samples(samples, resolver, capacity=2)
    assert [f.assignments for f in frames] == [
        [ResolvedAssignment(1, 1), ResolvedAssignment(44, 2)],
        [ResolvedAssignment(1, 2)],
    ]
