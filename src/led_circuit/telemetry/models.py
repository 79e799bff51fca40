"""Telemetry data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class Sample:
    """A single raw car position sample from the telemetry source."""

    entity_id: int
    """Car (driver) number."""

    x: float
    y: float

    timestamp: datetime
    """UTC instant the position was recorded."""

    def is_valid(self) -> bool:
        """Return False for samples sitting on the sentinel origin ``(0, 0)``.

        The source reports ``(0, 0)`` when a car has no fix (garage, pit
        entry, timing loss).
        """
        return not (self.x == 0.0 and self.y == 0.0)


@dataclass(frozen=True)
class EntityInfo:
    """Static roster metadata for one car."""

    entity_id: int
    display_name: str
    group_name: str
    """Team name."""
    color: str
    """Display colour as ``#RRGGBB``."""


class QueryStatus(Enum):
    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"


@dataclass
class QueryResult:
    """Classified outcome of a single window query."""

    status: QueryStatus
    samples: list[Sample] = field(default_factory=list)
    detail: str = ""

    @classmethod
    def success(cls, samples: list[Sample]) -> QueryResult:
        return cls(QueryStatus.SUCCESS, samples)

    @classmethod
    def rate_limited(cls, detail: str = "") -> QueryResult:
        return cls(QueryStatus.RATE_LIMITED, detail=detail)

    @classmethod
    def failed(cls, detail: str = "") -> QueryResult:
        return cls(QueryStatus.FAILED, detail=detail)
