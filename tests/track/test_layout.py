"""Tests for the built-in LED layout and position file loading."""

from __future__ import annotations

import json

import pytest

from led_circuit.track.layout import InputDataError, default_positions, load_positions, parse_positions


def test_default_layout_has_96_unique_leds():
    positions = default_positions()
    assert len(positions) == 96
    assert len({p.id for p in positions}) == 96


def test_default_layout_board_order():
    positions = default_positions()
    assert positions[0].id == 1
    assert (positions[0].x, positions[0].y) == (6413.0, 33.0)
    assert positions[-1].id == 96


def test_load_positions_none_returns_default():
    assert load_positions(None) == default_positions()


def test_load_positions_from_file(tmp_path):
    path = tmp_path / "leds.json"
    path.write_text(json.dumps([{"id": 5, "x": 1.5, "y": -2}, {"id": 2, "x": 0, "y": 0}]))
    positions = load_positions(path)
    assert [p.id for p in positions] == [5, 2]
    assert positions[0].y == -2.0


def test_missing_file_raises_input_error(tmp_path):
    with pytest.raises(InputDataError):
        load_positions(tmp_path / "nope.json")


def test_invalid_json_raises_input_error(tmp_path):
    path = tmp_path / "leds.json"
    path.write_text("[{")
    with pytest.raises(InputDataError):
        load_positions(path)


@pytest.mark.parametrize(
    "raw",
    [
        [],
        {"id": 1, "x": 0, "y": 0},
        [{"id": 1, "x": 0}],
        [{"id": "one", "x": 0, "y": 0}],
        [{"id": 1, "x": 0, "y": 0}, {"id": 1, "x": 5, "y": 5}],
    ],
)
def test_parse_positions_rejects_malformed(raw):
    with pytest.raises(InputDataError):
        parse_positions(raw)
