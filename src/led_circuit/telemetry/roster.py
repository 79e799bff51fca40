"""Built-in driver roster and loaders for roster files.

Roster files are JSON lists of
``{"entity_id": int, "display_name": str, "group_name": str, "color": "#RRGGBB"}``.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from led_circuit.telemetry.models import EntityInfo
from led_circuit.track.layout import InputDataError

DEFAULT_COLOR = "#FFFFFF"
"""Colour used for cars missing from the roster."""


class EntityRecord(BaseModel):
    entity_id: int
    display_name: str = Field(min_length=1)
    group_name: str
    color: str = Field(pattern=r"^#[0-9A-Fa-f]{6}$")


# 2023 grid: (number, name, team, colour)
_GRID_2023: tuple[tuple[int, str, str, str], ...] = (
    (1, "Max Verstappen", "Red Bull Racing", "#3671C6"),
    (11, "Sergio Perez", "Red Bull Racing", "#3671C6"),
    (44, "Lewis Hamilton", "Mercedes", "#6CD3BF"),
    (63, "George Russell", "Mercedes", "#6CD3BF"),
    (16, "Charles Leclerc", "Ferrari", "#F91536"),
    (55, "Carlos Sainz", "Ferrari", "#F91536"),
    (4, "Lando Norris", "McLaren", "#F58020"),
    (81, "Oscar Piastri", "McLaren", "#F58020"),
    (14, "Fernando Alonso", "Aston Martin", "#358C75"),
    (18, "Lance Stroll", "Aston Martin", "#358C75"),
    (10, "Pierre Gasly", "Alpine", "#2293D1"),
    (31, "Esteban Ocon", "Alpine", "#2293D1"),
    (23, "Alexander Albon", "Williams", "#37BEDD"),
    (2, "Logan Sargeant", "Williams", "#37BEDD"),
    (77, "Valtteri Bottas", "Alfa Romeo", "#C92D4B"),
    (24, "Zhou Guanyu", "Alfa Romeo", "#C92D4B"),
    (20, "Kevin Magnussen", "Haas F1 Team", "#B6BABD"),
    (27, "Nico Hulkenberg", "Haas F1 Team", "#B6BABD"),
    (22, "Yuki Tsunoda", "AlphaTauri", "#5E8FAA"),
    (40, "Liam Lawson", "AlphaTauri", "#5E8FAA"),
)


def default_roster() -> list[EntityInfo]:
    """Return the built-in 2023 roster in legend order."""
    return [
        EntityInfo(entity_id=n, display_name=name, group_name=team, color=color)
        for n, name, team, color in _GRID_2023
    ]


def parse_roster(raw: object) -> list[EntityInfo]:
    """Validate decoded JSON and build the ordered roster.

    Raises
    ------
    InputDataError
        If the payload is not a non-empty list of valid records or contains
        duplicate entity ids.
    """
    if not isinstance(raw, list) or not raw:
        raise InputDataError("Roster must be a non-empty list")
    try:
        records = [EntityRecord.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise InputDataError(f"Invalid roster record: {exc}") from exc

    roster: list[EntityInfo] = []
    seen: set[int] = set()
    for rec in records:
        if rec.entity_id in seen:
            raise InputDataError(f"Duplicate entity id {rec.entity_id}")
        seen.add(rec.entity_id)
        roster.append(EntityInfo(**rec.model_dump()))
    return roster


def load_roster(path: str | Path | None = None) -> list[EntityInfo]:
    """Load the roster from *path*, or the built-in grid if None."""
    if path is None:
        return default_roster()
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InputDataError(f"Cannot read roster file {path}: {exc}") from exc
    return parse_roster(raw)


def roster_by_id(roster: Iterable[EntityInfo]) -> dict[int, EntityInfo]:
    return {info.entity_id: info for info in roster}


def color_for(roster: Mapping[int, EntityInfo], entity_id: int) -> str:
    """Return the display colour for *entity_id*, white if unknown."""
    info = roster.get(entity_id)
    return info.color if info is not None else DEFAULT_COLOR
