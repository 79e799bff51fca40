"""Built-in LED layout and loaders for position files.

The default layout is the 96-LED Zandvoort board.  Alternative layouts can be
supplied as a JSON list of ``{"id": int, "x": float, "y": float}`` objects.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ValidationError

from led_circuit.track.models import PhysicalPosition


class InputDataError(ValueError):
    """Raised when start-up data (positions, roster, frame files) is malformed."""


class PositionRecord(BaseModel):
    id: int
    x: float
    y: float


# (led_number, x, y) in board order
_ZANDVOORT_LEDS: tuple[tuple[int, float, float], ...] = (
    (1, 6413.0, 33.0),
    (2, 6007.0, 197.0),
    (3, 5652.0, 444.0),
    (4, 5431.0, 822.0),
    (5, 5727.0, 1143.0),
    (6, 6141.0, 1268.0),
    (7, 6567.0, 1355.0),
    (8, 6975.0, 1482.0),
    (9, 7328.0, 1738.0),
    (10, 7369.0, 2173.0),
    (11, 7024.0, 2448.0),
    (12, 6592.0, 2505.0),
    (13, 6159.0, 2530.0),
    (14, 5725.0, 2525.0),
    (15, 5288.0, 2489.0),
    (16, 4857.0, 2434.0),
    (17, 4429.0, 2356.0),
    (18, 4004.0, 2249.0),
    (19, 3592.0, 2122.0),
    (20, 3181.0, 1977.0),
    (21, 2779.0, 1812.0),
    (22, 2387.0, 1624.0),
    (23, 1988.0, 1453.0),
    (24, 1703.0, 1779.0),
    (25, 1271.0, 1738.0),
    (26, 1189.0, 1314.0),
    (27, 1257.0, 884.0),
    (28, 1333.0, 454.0),
    (29, 1409.0, 25.0),
    (30, 1485.0, -405.0),
    (31, 1558.0, -835.0),
    (32, 1537.0, -1267.0),
    (33, 1208.0, -1555.0),
    (34, 779.0, -1606.0),
    (35, 344.0, -1604.0),
    (36, -88.0, -1539.0),
    (37, -482.0, -1346.0),
    (38, -785.0, -1038.0),
    (39, -966.0, -644.0),
    (40, -1015.0, -206.0),
    (41, -923.0, 231.0),
    (42, -762.0, 650.0),
    (43, -591.0, 1078.0),
    (44, -423.0, 1497.0),
    (45, -254.0, 1915.0),
    (46, -86.0, 2329.0),
    (47, 83.0, 2744.0),
    (48, 251.0, 3158.0),
    (49, 416.0, 3574.0),
    (50, 588.0, 3990.0),
    (51, 755.0, 4396.0),
    (52, 920.0, 4804.0),
    (53, 1086.0, 5212.0),
    (54, 1250.0, 5615.0),
    (55, 1418.0, 6017.0),
    (56, 1583.0, 6419.0),
    (57, 1909.0, 6702.0),
    (58, 2306.0, 6512.0),
    (59, 2319.0, 6071.0),
    (60, 2152.0, 5660.0),
    (61, 1988.0, 5255.0),
    (62, 1853.0, 4836.0),
    (63, 1784.0, 4407.0),
    (64, 1779.0, 3971.0),
    (65, 1605.0, 3569.0),
    (66, 1211.0, 3375.0),
    (67, 811.0, 3188.0),
    (68, 710.0, 2755.0),
    (69, 1116.0, 2595.0),
    (70, 1529.0, 2717.0),
    (71, 1947.0, 2848.0),
    (72, 2371.0, 2946.0),
    (73, 2806.0, 2989.0),
    (74, 3239.0, 2946.0),
    (75, 3665.0, 2864.0),
    (76, 4092.0, 2791.0),
    (77, 4523.0, 2772.0),
    (78, 4945.0, 2886.0),
    (79, 5331.0, 3087.0),
    (80, 5703.0, 3315.0),
    (81, 6105.0, 3484.0),
    (82, 6538.0, 3545.0),
    (83, 6969.0, 3536.0),
    (84, 7402.0, 3511.0),
    (85, 7831.0, 3476.0),
    (86, 8241.0, 3335.0),
    (87, 8549.0, 3025.0),
    (88, 8703.0, 2612.0),
    (89, 8662.0, 2173.0),
    (90, 8451.0, 1785.0),
    (91, 8203.0, 1426.0),
    (92, 7973.0, 1053.0),
    (93, 7777.0, 664.0),
    (94, 7581.0, 275.0),
    (95, 7274.0, -35.0),
    (96, 6839.0, -46.0),
)


def default_positions() -> list[PhysicalPosition]:
    """Return the built-in 96-LED layout in canonical board order."""
    return [PhysicalPosition(id=n, x=x, y=y) for n, x, y in _ZANDVOORT_LEDS]


def parse_positions(raw: object) -> list[PhysicalPosition]:
    """Validate decoded JSON and build the ordered position set.

    Raises
    ------
    InputDataError
        If the payload is not a non-empty list of valid records or contains
        duplicate ids.
    """
    if not isinstance(raw, list) or not raw:
        raise InputDataError("Position set must be a non-empty list")
    try:
        records = [PositionRecord.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise InputDataError(f"Invalid position record: {exc}") from exc

    seen: set[int] = set()
    positions: list[PhysicalPosition] = []
    for rec in records:
        if rec.id in seen:
            raise InputDataError(f"Duplicate position id {rec.id}")
        seen.add(rec.id)
        positions.append(PhysicalPosition(id=rec.id, x=rec.x, y=rec.y))
    return positions


def load_positions(path: str | Path | None = None) -> list[PhysicalPosition]:
    """Load the position set from *path*, or the built-in layout if None."""
    if path is None:
        return default_positions()
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InputDataError(f"Cannot read position file {path}: {exc}") from exc
    return parse_positions(raw)
