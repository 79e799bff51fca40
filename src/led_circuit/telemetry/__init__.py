"""Position telemetry acquisition.

Public API
----------
Sample               - single raw car position sample
EntityInfo           - roster entry (name, team, colour)
QueryResult          - classified outcome of one window query
BackoffPolicy        - capped exponential backoff settings
WindowFetch          - per-window retry state machine
AcquisitionPipeline  - windowed, concurrent sample download
OpenF1LocationSource - OpenF1 ``/location`` client
default_roster / load_roster - roster loaders
"""

from led_circuit.telemetry.acquisition import (
    AbandonedWindow,
    AcquisitionPipeline,
    AcquisitionReport,
)
from led_circuit.telemetry.backoff import BackoffPolicy, WindowFetch, WindowState
from led_circuit.telemetry.models import EntityInfo, QueryResult, QueryStatus, Sample
from led_circuit.telemetry.openf1 import OpenF1LocationSource
from led_circuit.telemetry.roster import default_roster, load_roster

__all__ = [
    "AbandonedWindow",
    "AcquisitionPipeline",
    "AcquisitionReport",
    "BackoffPolicy",
    "EntityInfo",
    "OpenF1LocationSource",
    "QueryResult",
    "QueryStatus",
    "Sample",
    "WindowFetch",
    "WindowState",
    "default_roster",
    "load_roster",
]
