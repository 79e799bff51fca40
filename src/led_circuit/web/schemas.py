"""Pydantic request/response schemas for the Web API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str
    version: str


class PositionOut(BaseModel):
    id: int
    x: float
    y: float


class EntityOut(BaseModel):
    entity_id: int
    display_name: str
    group_name: str
    color: str


class AbandonedWindowOut(BaseModel):
    entity_id: int
    start: datetime
    end: datetime
    attempts: int
    reason: str


class AcquisitionResponse(BaseModel):
    running: bool
    frame_count: int
    samples: int = 0
    windows_requested: int = 0
    windows_succeeded: int = 0
    invalid_dropped: int = 0
    cancelled: bool = False
    abandoned: list[AbandonedWindowOut] = []
    error: str | None = None


class SpeedRequest(BaseModel):
    speed: int = Field(ge=1)


class PlaybackResponse(BaseModel):
    running: bool
    elapsed_race_time: float
    race_time_label: str
    speed: int
    current_index: int
    frame_count: int
    leds: dict[int, str]
