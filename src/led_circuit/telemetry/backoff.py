"""Per-window retry state machine with capped exponential backoff.

A :class:`WindowFetch` tracks one ``(entity, window)`` query through

::

    PENDING ──success──▶ SUCCEEDED
       │
       ├──rate limited──▶ RETRYING(1) ──rate limited──▶ RETRYING(2) ... ──▶ ABANDONED
       │                      │
       │                      └──success──▶ SUCCEEDED
       └──failure──▶ ABANDONED

It performs no I/O and never sleeps: :meth:`WindowFetch.record` returns the
delay the driver should wait before the next attempt, so the retry logic can
be exercised without an event loop.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from led_circuit.telemetry.models import QueryResult, QueryStatus, Sample


@dataclass(frozen=True)
class BackoffPolicy:
    """Capped exponential backoff.

    Args:
        base_delay: Delay before the first retry, in seconds.
        max_delay: Upper bound for any single delay.
        max_attempts: Maximum number of requests issued for one window
            (the first request included).
    """

    base_delay: float = 1.0
    max_delay: float = 16.0
    max_attempts: int = 6

    def __post_init__(self) -> None:
        if self.base_delay <= 0:
            raise ValueError("base_delay must be > 0")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def delay(self, retry: int) -> float:
        """Return the delay before retry number *retry* (1-based)."""
        if retry < 1:
            raise ValueError("retry must be >= 1")
        # cap the exponent as well so huge retry counts don't overflow
        exponent = min(retry - 1, 62)
        return min(self.base_delay * (2**exponent), self.max_delay)

    def delays(self) -> Iterator[float]:
        """Yield every delay a fully exhausted window would wait through."""
        for retry in range(1, self.max_attempts):
            yield self.delay(retry)


@dataclass(frozen=True)
class Window:
    """Half-open query range ``[start, end)`` for one entity."""

    entity_id: int
    start: datetime
    end: datetime


def iter_windows(
    entity_id: int, start: datetime, end: datetime, size: timedelta
) -> Iterator[Window]:
    """Partition ``[start, end)`` into consecutive windows of at most *size*."""
    if size <= timedelta(0):
        raise ValueError("window size must be positive")
    current = start
    while current < end:
        window_end = min(current + size, end)
        yield Window(entity_id, current, window_end)
        current = window_end


class WindowState(Enum):
    PENDING = "pending"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    ABANDONED = "abandoned"


@dataclass
class WindowFetch:
    """Retry bookkeeping for a single window."""

    window: Window
    policy: BackoffPolicy
    state: WindowState = WindowState.PENDING
    attempts: int = 0
    samples: list[Sample] = field(default_factory=list)
    reason: str = ""

    @property
    def done(self) -> bool:
        return self.state in (WindowState.SUCCEEDED, WindowState.ABANDONED)

    @property
    def retry(self) -> int:
        """Current retry number; 0 before the first retry."""
        return self.attempts if self.state is WindowState.RETRYING else 0

    def record(self, result: QueryResult) -> float | None:
        """Feed the outcome of one request.

        Returns
        -------
        float | None
            Seconds to wait before re-issuing the same window, or None when
            the fetch reached a terminal state.
        """
        if self.done:
            raise RuntimeError(f"window already {self.state.value}")

        self.attempts += 1

        if result.status is QueryStatus.SUCCESS:
            self.state = WindowState.SUCCEEDED
            self.samples = list(result.samples)
            return None

        if result.status is QueryStatus.FAILED:
            self.state = WindowState.ABANDONED
            self.reason = f"request failed: {result.detail}" if result.detail else "request failed"
            return None

        if self.attempts >= self.policy.max_attempts:
            self.state = WindowState.ABANDONED
            self.reason = f"rate limited after {self.attempts} attempts"
            return None

        self.state = WindowState.RETRYING
        return self.policy.delay(self.attempts)
