"""Frame file export/import.

A frame file stores one acquired frame sequence together with its update
rate so it can be replayed later without contacting the telemetry source::

    {
      "update_rate_ms": 100,
      "frames": [
        {"drivers": [{"driver_number": 1, "led_num": 12}, null, ...]},
        ...
      ]
    }
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from led_circuit.frames.models import Frame, ResolvedAssignment
from led_circuit.track.layout import InputDataError


class DriverSlot(BaseModel):
    driver_number: int
    led_num: int


class UpdateFrame(BaseModel):
    drivers: list[DriverSlot | None] = Field(min_length=1)

    @field_validator("drivers")
    @classmethod
    def _not_empty(cls, v: list[DriverSlot | None]) -> list[DriverSlot | None]:
        if all(slot is None for slot in v):
            raise ValueError("frame has no occupied slots")
        return v


class VisualizationData(BaseModel):
    update_rate_ms: int = Field(gt=0)
    frames: list[UpdateFrame]

    @model_validator(mode="after")
    def _uniform_capacity(self) -> VisualizationData:
        sizes = {len(uf.drivers) for uf in self.frames}
        if len(sizes) > 1:
            raise ValueError(f"frames have differing slot counts: {sorted(sizes)}")
        return self


def to_visualization(frames: Sequence[Frame], update_rate_ms: int) -> VisualizationData:
    return VisualizationData(
        update_rate_ms=update_rate_ms,
        frames=[
            UpdateFrame(
                drivers=[
                    None if slot is None else DriverSlot(driver_number=slot.entity_id, led_num=slot.position_id)
                    for slot in frame.slots
                ]
            )
            for frame in frames
        ],
    )


def from_visualization(data: VisualizationData) -> list[Frame]:
    return [
        Frame(
            slots=tuple(
                None if slot is None else ResolvedAssignment(slot.driver_number, slot.led_num)
                for slot in uf.drivers
            )
        )
        for uf in data.frames
    ]


def save_frames(path: str | Path, frames: Sequence[Frame], update_rate_ms: int) -> None:
    """Write *frames* to a JSON frame file."""
    payload = to_visualization(frames, update_rate_ms).model_dump_json()
    Path(path).write_text(payload, encoding="utf-8")


def load_frames(path: str | Path, capacity: int | None = None) -> tuple[list[Frame], int]:
    """Read a frame file; return ``(frames, update_rate_ms)``.

    Every frame must hold at least one assignment, and all frames must have
    the same slot count (*capacity*, when given).

    Raises
    ------
    InputDataError
        If the file is missing or malformed.
    """
    try:
        data = VisualizationData.model_validate_json(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        raise InputDataError(f"Cannot read frame file {path}: {exc}") from exc
    if capacity is not None and data.frames and len(data.frames[0].drivers) != capacity:
        raise InputDataError(
            f"Frame file {path} has {len(data.frames[0].drivers)} slots per frame, expected {capacity}"
        )
    return from_visualization(data), data.update_rate_ms
