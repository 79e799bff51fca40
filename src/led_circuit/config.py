"""ReplayConfig — runtime settings read from ``LED_CIRCUIT_*`` environment variables.

Entry points call ``dotenv.load_dotenv()`` first so a local ``.env`` file is
honoured.  Defaults reproduce the 2023 Dutch Grand Prix replay.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta

from led_circuit.telemetry.backoff import BackoffPolicy
from led_circuit.telemetry.openf1 import DEFAULT_BASE_URL

_ENV_PREFIX = "LED_CIRCUIT_"


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp; a trailing ``Z`` means UTC."""
    ts = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if ts.tzinfo is None:
        raise ValueError(f"timestamp {value!r} has no timezone")
    return ts


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _parse_ids(value: str) -> tuple[int, ...]:
    return tuple(int(part) for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class ReplayConfig:
    """Acquisition, frame and playback settings."""

    session_key: str = "9149"
    start: datetime = field(default_factory=lambda: parse_timestamp("2023-08-27T12:58:56.200Z"))
    end: datetime = field(default_factory=lambda: parse_timestamp("2023-08-27T13:20:54.300Z"))
    drivers: tuple[int, ...] = ()
    """Entity ids to fetch; empty means every roster entry."""

    base_url: str = DEFAULT_BASE_URL
    request_timeout_s: float = 30.0
    window_s: float = 180.0
    max_concurrency: int = 10
    backoff_base_s: float = 1.0
    backoff_max_s: float = 16.0
    max_attempts: int = 6
    stop_on_empty_window: bool = False

    frame_capacity: int = 20
    update_rate_ms: int = 100
    min_speed: int = 1
    max_speed: int = 5

    positions_path: str | None = None
    roster_path: str | None = None

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("end must not be before start")
        if self.window_s <= 0:
            raise ValueError("window_s must be > 0")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        if self.frame_capacity < 1:
            raise ValueError("frame_capacity must be >= 1")
        if self.update_rate_ms <= 0:
            raise ValueError("update_rate_ms must be > 0")
        if not 1 <= self.min_speed <= self.max_speed:
            raise ValueError("speed bounds must satisfy 1 <= min_speed <= max_speed")
        # validated here so a bad env var fails at start-up
        self.backoff_policy()

    @property
    def window(self) -> timedelta:
        return timedelta(seconds=self.window_s)

    @property
    def frame_duration_s(self) -> float:
        return self.update_rate_ms / 1000.0

    def backoff_policy(self) -> BackoffPolicy:
        return BackoffPolicy(
            base_delay=self.backoff_base_s,
            max_delay=self.backoff_max_s,
            max_attempts=self.max_attempts,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ReplayConfig:
        """Build a config from ``LED_CIRCUIT_*`` variables (``os.environ`` by default).

        Unset variables keep their defaults.

        Raises
        ------
        ValueError
            If a variable cannot be parsed or the result is inconsistent.
        """
        env = os.environ if environ is None else environ
        converters = {
            "start": parse_timestamp,
            "end": parse_timestamp,
            "drivers": _parse_ids,
            "request_timeout_s": float,
            "window_s": float,
            "max_concurrency": int,
            "backoff_base_s": float,
            "backoff_max_s": float,
            "max_attempts": int,
            "stop_on_empty_window": _parse_bool,
            "frame_capacity": int,
            "update_rate_ms": int,
            "min_speed": int,
            "max_speed": int,
        }
        aliases = {
            "request_timeout_s": "REQUEST_TIMEOUT",
            "positions_path": "POSITIONS",
            "roster_path": "ROSTER",
        }

        kwargs: dict[str, object] = {}
        for f in fields(cls):
            name = _ENV_PREFIX + aliases.get(f.name, f.name.upper())
            raw = env.get(name)
            if raw is None or raw == "":
                continue
            convert = converters.get(f.name, str)
            try:
                kwargs[f.name] = convert(raw)
            except ValueError as exc:
                raise ValueError(f"invalid {name}={raw!r}: {exc}") from exc
        return cls(**kwargs)
