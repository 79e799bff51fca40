"""FrameSequence — append-only frame arena shared by writer and readers."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from led_circuit.frames.models import Frame


class FrameSequence:
    """Thread-safe, append-only list of sealed frames.

    Writers append under a lock; readers get immutable tuple snapshots, so a
    reader can never see a batch that is only partly published.  Frames are
    frozen dataclasses and are shared, not copied.
    """

    def __init__(self, frames: Iterable[Frame] = ()) -> None:
        self._lock = threading.Lock()
        self._frames: tuple[Frame, ...] = tuple(frames)

    def __len__(self) -> int:
        return len(self._frames)

    def append(self, frame: Frame) -> int:
        """Append one sealed frame; return its index."""
        with self._lock:
            self._frames = self._frames + (frame,)
            return len(self._frames) - 1

    def extend(self, frames: Iterable[Frame]) -> int:
        """Publish a batch of frames atomically; return the new length."""
        batch = tuple(frames)
        with self._lock:
            self._frames = self._frames + batch
            return len(self._frames)

    def get(self, index: int) -> Frame | None:
        """Return frame *index*, or None if it has not been appended yet."""
        frames = self._frames
        if 0 <= index < len(frames):
            return frames[index]
        return None

    def snapshot(self) -> tuple[Frame, ...]:
        """Point-in-time view of every published frame."""
        return self._frames

    def clear(self) -> None:
        """Drop every frame.  Only used on session reset."""
        with self._lock:
            self._frames = ()
