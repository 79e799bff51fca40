"""Frame synthesis and storage.

Public API
----------
ResolvedAssignment  - entity placed on an LED
Frame               - sealed, fixed-capacity batch of assignments
FrameBuilder        - batches assignments into frames
FrameSequence       - thread-safe append-only frame store
frames_from_samples - resolver + builder in one call
save_frames / load_frames - frame file export/import
"""

from led_circuit.frames.builder import FrameBuilder, frames_from_samples
from led_circuit.frames.export import load_frames, save_frames
from led_circuit.frames.models import Frame, ResolvedAssignment
from led_circuit.frames.store import FrameSequence

__all__ = [
    "Frame",
    "FrameBuilder",
    "FrameSequence",
    "ResolvedAssignment",
    "frames_from_samples",
    "load_frames",
    "save_frames",
]
