"""Tests for FrameSequence — the shared append-only frame store."""

from __future__ import annotations

import threading

from led_circuit.frames.models import Frame, ResolvedAssignment
from led_circuit.frames.store import FrameSequence


def _frame(tag: int, capacity: int = 4) -> Frame:
    return Frame(slots=(ResolvedAssignment(tag, tag),) + (None,) * (capacity - 1))


def test_append_returns_index_and_get_reads_it():
    store = FrameSequence()
    assert store.append(_frame(1)) == 0
    assert store.append(_frame(2)) == 1
    assert store.get(1) == _frame(2)
    assert len(store) == 2


def test_get_out_of_range_returns_none():
    store = FrameSequence([_frame(1)])
    assert store.get(1) is None
    assert store.get(-1) is None


def test_extend_publishes_batch():
    store = FrameSequence()
    assert store.extend([_frame(1), _frame(2), _frame(3)]) == 3
    assert [f.slots[0].entity_id for f in store.snapshot()] == [1, 2, 3]


def test_snapshot_is_not_affected_by_later_appends():
    store = FrameSequence([_frame(1)])
    snap = store.snapshot()
    store.append(_frame(2))
    assert len(snap) == 1
    assert len(store) == 2


def test_clear_empties_store():
    store = FrameSequence([_frame(1), _frame(2)])
    store.clear()
    assert len(store) == 0
    assert store.get(0) is None


def test_reader_never_sees_partial_batch():
    store = FrameSequence()
    batch_size = 10
    batches = 200
    seen_lengths: list[int] = []
    incomplete: list[Frame] = []
    done = threading.Event()

    def writer():
        for b in range(batches):
            store.extend(_frame(b) for _ in range(batch_size))
        done.set()

    def reader():
        while not done.is_set():
            snap = store.snapshot()
            seen_lengths.append(len(snap))
            incomplete.extend(f for f in snap if f.capacity != 4)

    threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert len(store) == batch_size * batches
    assert incomplete == []
    assert all(n % batch_size == 0 for n in seen_lengths)
