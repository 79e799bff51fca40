"""AcquisitionPipeline — windowed, rate-limit aware sample download.

For every entity the global range ``[start, end)`` is walked window by
window.  Up to *max_concurrency* entities are in flight at once; windows of
one entity are always fetched in order.  The result is a single list of
valid samples sorted by timestamp.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Protocol

from led_circuit.telemetry.backoff import (
    BackoffPolicy,
    Window,
    WindowFetch,
    WindowState,
    iter_windows,
)
from led_circuit.telemetry.models import QueryResult, Sample

_logger = logging.getLogger(__name__)


class TelemetrySource(Protocol):
    """Anything that can answer a window query.

    Sources may additionally be async context managers; the pipeline enters
    them for the duration of :meth:`AcquisitionPipeline.run`.
    """

    async def query(self, entity_id: int, start: datetime, end: datetime) -> QueryResult: ...


@dataclass(frozen=True)
class AbandonedWindow:
    """A window whose data was lost."""

    entity_id: int
    start: datetime
    end: datetime
    attempts: int
    reason: str


@dataclass
class AcquisitionReport:
    """Outcome of one pipeline run."""

    samples: list[Sample] = field(default_factory=list)
    windows_requested: int = 0
    windows_succeeded: int = 0
    invalid_dropped: int = 0
    abandoned: list[AbandonedWindow] = field(default_factory=list)
    cancelled: bool = False

    @property
    def complete(self) -> bool:
        """True when no window was lost and the run was not cancelled."""
        return not self.abandoned and not self.cancelled


@dataclass
class _EntityResult:
    samples: list[Sample] = field(default_factory=list)
    windows_requested: int = 0
    windows_succeeded: int = 0
    invalid_dropped: int = 0
    abandoned: list[AbandonedWindow] = field(default_factory=list)


class AcquisitionPipeline:
    """Downloads and orders raw samples for a fixed set of entities.

    Parameters
    ----------
    source:
        A :class:`TelemetrySource`.
    entity_ids:
        Entities to fetch, in roster order.  This order also decides how
        samples with identical timestamps are ordered in the output.
    start, end:
        Global half-open time range.
    window:
        Size of one query window.
    max_concurrency:
        Maximum number of entities fetched concurrently.
    policy:
        Retry/backoff policy for rate-limited windows.
    stop_on_empty_window:
        When True an empty window ends the remaining windows of that entity.
    sleep:
        Coroutine function used for backoff delays; injected in tests.
    """

    def __init__(
        self,
        source: TelemetrySource,
        entity_ids: Sequence[int],
        start: datetime,
        end: datetime,
        window: timedelta = timedelta(minutes=3),
        max_concurrency: int = 10,
        policy: BackoffPolicy | None = None,
        stop_on_empty_window: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        if end < start:
            raise ValueError("end must not be before start")
        if window <= timedelta(0):
            raise ValueError("window must be positive")
        self._source = source
        self._entity_ids = list(entity_ids)
        self._start = start
        self._end = end
        self._window = window
        self._max_concurrency = max_concurrency
        self._policy = policy or BackoffPolicy()
        self._stop_on_empty = stop_on_empty_window
        self._sleep = sleep
        self._cancel = threading.Event()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def cancel(self) -> None:
        """Stop issuing new windows and retries.  Safe to call from any thread."""
        self._cancel.set()

    async def run(self) -> AcquisitionReport:
        """Fetch every entity and return the time-ordered report."""
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def limited(entity_id: int) -> _EntityResult:
            async with semaphore:
                return await self._fetch_entity(entity_id)

        async with contextlib.AsyncExitStack() as stack:
            if isinstance(self._source, contextlib.AbstractAsyncContextManager):
                await stack.enter_async_context(self._source)
            results = await asyncio.gather(*(limited(e) for e in self._entity_ids))

        report = AcquisitionReport(cancelled=self.cancelled)
        # gather preserves input order, so ties keep roster → window → response order
        for res in results:
            report.samples.extend(res.samples)
            report.windows_requested += res.windows_requested
            report.windows_succeeded += res.windows_succeeded
            report.invalid_dropped += res.invalid_dropped
            report.abandoned.extend(res.abandoned)
        report.samples.sort(key=lambda s: s.timestamp)

        _logger.info(
            "Acquisition finished: %d samples, %d/%d windows ok, %d abandoned, %d invalid dropped%s",
            len(report.samples),
            report.windows_succeeded,
            report.windows_requested,
            len(report.abandoned),
            report.invalid_dropped,
            " (cancelled)" if report.cancelled else "",
        )
        return report

    def run_sync(self) -> AcquisitionReport:
        """Run the pipeline on a fresh event loop (blocking)."""
        return asyncio.run(self.run())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _fetch_entity(self, entity_id: int) -> _EntityResult:
        result = _EntityResult()
        for window in iter_windows(entity_id, self._start, self._end, self._window):
            if self.cancelled:
                break
            fetch = await self._fetch_window(window)
            result.windows_requested += 1

            if fetch.state is WindowState.ABANDONED:
                _logger.warning(
                    "Abandoned window %s..%s for entity %d: %s",
                    window.start.isoformat(),
                    window.end.isoformat(),
                    entity_id,
                    fetch.reason,
                )
                result.abandoned.append(
                    AbandonedWindow(entity_id, window.start, window.end, fetch.attempts, fetch.reason)
                )
                continue

            if fetch.state is not WindowState.SUCCEEDED:
                # cancelled while waiting to retry
                break

            result.windows_succeeded += 1
            valid = [s for s in fetch.samples if s.is_valid()]
            result.invalid_dropped += len(fetch.samples) - len(valid)
            result.samples.extend(valid)

            if not fetch.samples and self._stop_on_empty:
                _logger.info(
                    "Entity %d: empty window at %s, skipping remaining windows",
                    entity_id,
                    window.start.isoformat(),
                )
                break

        _logger.info("Fetched %d samples for entity %d", len(result.samples), entity_id)
        return result

    async def _fetch_window(self, window: Window) -> WindowFetch:
        fetch = WindowFetch(window, self._policy)
        while not fetch.done:
            res = await self._source.query(window.entity_id, window.start, window.end)
            delay = fetch.record(res)
            if delay is None:
                break
            _logger.debug(
                "Entity %d rate limited, retry %d in %.2fs", window.entity_id, fetch.retry, delay
            )
            await self._sleep(delay)
            if self.cancelled:
                break
        return fetch
