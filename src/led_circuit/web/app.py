"""FastAPI control surface and render feed for an external LED display.

Run with any ASGI server, e.g. ``uvicorn led_circuit.web.app:app``.
"""

from __future__ import annotations

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException

from led_circuit.config import ReplayConfig
from led_circuit.playback.render import RenderSnapshot
from led_circuit.web.schemas import (
    AbandonedWindowOut,
    AcquisitionResponse,
    EntityOut,
    HealthResponse,
    PlaybackResponse,
    PositionOut,
    SpeedRequest,
)
from led_circuit.web.service import AcquisitionBusyError, ReplaySession

load_dotenv()  # loads .env from project root; must run before env vars are consumed

VERSION = "0.1.0"

app = FastAPI(title="LED Circuit Replay", version=VERSION)

_session: ReplaySession | None = None


def get_session() -> ReplaySession:
    """Return the process-wide session, creating it on first use."""
    global _session
    if _session is None:
        _session = ReplaySession(ReplayConfig.from_env())
    return _session


def _playback(snapshot: RenderSnapshot) -> PlaybackResponse:
    return PlaybackResponse(
        running=snapshot.running,
        elapsed_race_time=snapshot.elapsed_race_time,
        race_time_label=snapshot.race_time_label,
        speed=snapshot.speed,
        current_index=snapshot.current_index,
        frame_count=snapshot.frame_count,
        leds=snapshot.leds,
    )


def _acquisition(session: ReplaySession) -> AcquisitionResponse:
    status = session.acquisition_status()
    resp = AcquisitionResponse(
        running=status.running,
        frame_count=status.frame_count,
        error=status.error,
    )
    report = status.report
    if report is not None:
        resp.samples = len(report.samples)
        resp.windows_requested = report.windows_requested
        resp.windows_succeeded = report.windows_succeeded
        resp.invalid_dropped = report.invalid_dropped
        resp.cancelled = report.cancelled
        resp.abandoned = [
            AbandonedWindowOut(
                entity_id=w.entity_id,
                start=w.start,
                end=w.end,
                attempts=w.attempts,
                reason=w.reason,
            )
            for w in report.abandoned
        ]
    return resp


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=VERSION)


@app.get("/api/positions", response_model=list[PositionOut])
def positions(session: ReplaySession = Depends(get_session)) -> list[PositionOut]:
    """Return the LED layout in board order."""
    return [PositionOut(id=p.id, x=p.x, y=p.y) for p in session.positions]


@app.get("/api/roster", response_model=list[EntityOut])
def roster(session: ReplaySession = Depends(get_session)) -> list[EntityOut]:
    """Return the legend entries in roster order."""
    return [
        EntityOut(
            entity_id=e.entity_id,
            display_name=e.display_name,
            group_name=e.group_name,
            color=e.color,
        )
        for e in session.roster
    ]


@app.post("/api/acquisition", response_model=AcquisitionResponse, status_code=202)
def start_acquisition(session: ReplaySession = Depends(get_session)) -> AcquisitionResponse:
    """Start downloading telemetry in the background."""
    try:
        session.start_acquisition()
    except AcquisitionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _acquisition(session)


@app.get("/api/acquisition", response_model=AcquisitionResponse)
def acquisition_status(session: ReplaySession = Depends(get_session)) -> AcquisitionResponse:
    return _acquisition(session)


@app.get("/api/playback", response_model=PlaybackResponse)
def playback(session: ReplaySession = Depends(get_session)) -> PlaybackResponse:
    """Render tick: advance the clock and return the lit LEDs."""
    return _playback(session.snapshot())


@app.post("/api/playback/start", response_model=PlaybackResponse)
def playback_start(session: ReplaySession = Depends(get_session)) -> PlaybackResponse:
    return _playback(session.start())


@app.post("/api/playback/stop", response_model=PlaybackResponse)
def playback_stop(session: ReplaySession = Depends(get_session)) -> PlaybackResponse:
    return _playback(session.stop())


@app.put("/api/playback/speed", response_model=PlaybackResponse)
def playback_speed(req: SpeedRequest, session: ReplaySession = Depends(get_session)) -> PlaybackResponse:
    try:
        snapshot = session.set_speed(req.speed)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _playback(snapshot)


@app.post("/api/session/reset", response_model=PlaybackResponse)
def session_reset(session: ReplaySession = Depends(get_session)) -> PlaybackResponse:
    """Stop playback, cancel acquisition and drop all frames."""
    session.reset()
    return _playback(session.snapshot())
