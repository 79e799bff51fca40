"""Tests for ReplayConfig defaults and environment parsing."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from led_circuit.config import ReplayConfig, parse_timestamp


def test_defaults_match_dutch_gp_replay():
    cfg = ReplayConfig()
    assert cfg.session_key == "9149"
    assert cfg.start == datetime(2023, 8, 27, 12, 58, 56, 200000, tzinfo=timezone.utc)
    assert cfg.window == timedelta(minutes=3)
    assert cfg.max_concurrency == 10
    assert cfg.frame_capacity == 20
    assert cfg.frame_duration_s == pytest.approx(0.1)
    assert cfg.stop_on_empty_window is False


def test_from_env_empty_uses_defaults():
    assert ReplayConfig.from_env({}) == ReplayConfig()


def test_from_env_overrides():
    cfg = ReplayConfig.from_env({
        "LED_CIRCUIT_SESSION_KEY": "9158",
        "LED_CIRCUIT_START": "2023-09-03T13:00:00Z",
        "LED_CIRCUIT_END": "2023-09-03T14:00:00Z",
        "LED_CIRCUIT_DRIVERS": "1, 44,16",
        "LED_CIRCUIT_WINDOW_S": "60",
        "LED_CIRCUIT_MAX_CONCURRENCY": "4",
        "LED_CIRCUIT_BACKOFF_BASE_S": "0.5",
        "LED_CIRCUIT_MAX_ATTEMPTS": "3",
        "LED_CIRCUIT_STOP_ON_EMPTY_WINDOW": "yes",
        "LED_CIRCUIT_REQUEST_TIMEOUT": "5",
        "LED_CIRCUIT_ROSTER": "/data/roster.json",
    })
    assert cfg.session_key == "9158"
    assert cfg.end - cfg.start == timedelta(hours=1)
    assert cfg.drivers == (1, 44, 16)
    assert cfg.window == timedelta(seconds=60)
    assert cfg.max_concurrency == 4
    assert cfg.stop_on_empty_window is True
    assert cfg.request_timeout_s == 5.0
    assert cfg.roster_path == "/data/roster.json"
    policy = cfg.backoff_policy()
    assert (policy.base_delay, policy.max_attempts) == (0.5, 3)


@pytest.mark.parametrize(
    "env",
    [
        {"LED_CIRCUIT_MAX_CONCURRENCY": "many"},
        {"LED_CIRCUIT_STOP_ON_EMPTY_WINDOW": "maybe"},
        {"LED_CIRCUIT_START": "2023-08-27T14:00:00Z", "LED_CIRCUIT_END": "2023-08-27T13:00:00Z"},
        {"LED_CIRCUIT_BACKOFF_BASE_S": "20", "LED_CIRCUIT_BACKOFF_MAX_S": "10"},
        {"LED_CIRCUIT_MIN_SPEED": "4", "LED_CIRCUIT_MAX_SPEED": "2"},
        {"LED_CIRCUIT_FRAME_CAPACITY": "0"},
    ],
)
def test_from_env_invalid_values_raise(env):
    with pytest.raises(ValueError):
        ReplayConfig.from_env(env)


def test_parse_timestamp_requires_timezone():
    with pytest.raises(ValueError):
        parse_timestamp("2023-08-27T13:00:00")
