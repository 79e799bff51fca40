"""Shared fixtures for web tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from led_circuit.config import ReplayConfig
from led_circuit.telemetry.models import EntityInfo, QueryResult, Sample
from led_circuit.track.models import PhysicalPosition
from led_circuit.web.app import app, get_session
from led_circuit.web.service import ReplaySession

T0 = datetime(2023, 8, 27, 13, 0, tzinfo=timezone.utc)

POSITIONS = [
    PhysicalPosition(1, 0.0, 0.0),
    PhysicalPosition(2, 100.0, 0.0),
    PhysicalPosition(3, 200.0, 0.0),
]

ROSTER = [
    EntityInfo(1, "Max Verstappen", "Red Bull Racing", "#3671C6"),
    EntityInfo(44, "Lewis Hamilton", "Mercedes", "#6CD3BF"),
]


class FakeClock:
    def __init__(self) -> None:
        self.now = 500.0

    def __call__(self) -> float:
        return self.now


class FakeSource:
    """Each entity drives along the x axis, one sample per second."""

    def __init__(self) -> None:
        self.calls = 0

    async def query(self, entity_id, start, end):
        self.calls += 1
        samples = []
        t = start
        while t < end:
            offset = (t - T0).total_seconds()
            samples.append(Sample(entity_id, offset * 50.0 % 250.0, 1.0, t))
            t += timedelta(seconds=1)
        return QueryResult.success(samples)


async def _no_sleep(delay: float) -> None:
    return None


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session(fake_clock) -> ReplaySession:
    """Replay session over 4 s of fake telemetry for two cars (2-slot frames)."""
    config = ReplayConfig(
        start=T0,
        end=T0 + timedelta(seconds=4),
        window_s=2.0,
        frame_capacity=2,
        update_rate_ms=100,
    )
    return ReplaySession(
        config,
        source_factory=lambda cfg: FakeSource(),
        positions=POSITIONS,
        roster=ROSTER,
        clock=fake_clock,
        sleep=_no_sleep,
    )


@pytest.fixture
def client(session):
    """FastAPI test client bound to the fake session."""
    app.dependency_overrides[get_session] = lambda: session
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
