"""OpenF1 ``/location`` client.

Each query returns every position sample for one driver inside a time
window.  The API throttles aggressive clients with HTTP 429; that status is
reported as :attr:`QueryStatus.RATE_LIMITED` so the acquisition pipeline can
back off.  An empty window is answered with HTTP 404 ("No results found"),
which is reported as a successful query with no samples.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import httpx
from pydantic import BaseModel, ValidationError

from led_circuit.telemetry.models import QueryResult, Sample

_logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openf1.org/v1"


class LocationRecord(BaseModel):
    """One row of the OpenF1 location endpoint."""

    driver_number: int
    date: datetime
    x: float
    y: float

    def to_sample(self) -> Sample:
        ts = self.date if self.date.tzinfo else self.date.replace(tzinfo=timezone.utc)
        return Sample(entity_id=self.driver_number, x=self.x, y=self.y, timestamp=ts)


def _iso(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class OpenF1LocationSource:
    """Async telemetry source backed by the OpenF1 REST API.

    Use as an async context manager; the HTTP client lives for the duration
    of one acquisition run.

    Args:
        session_key: OpenF1 session identifier.
        base_url: API root.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport, injected in tests.
    """

    def __init__(
        self,
        session_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._session_key = session_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> OpenF1LocationSource:
        self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def build_url(self, entity_id: int, start: datetime, end: datetime) -> str:
        # OpenF1 filter syntax puts the comparison operator in the query string
        return (
            f"{self._base_url}/location?session_key={self._session_key}"
            f"&driver_number={entity_id}&date>={_iso(start)}&date<{_iso(end)}"
        )

    async def query(self, entity_id: int, start: datetime, end: datetime) -> QueryResult:
        """Fetch samples for *entity_id* in ``[start, end)`` and classify the response."""
        if self._client is None:
            raise RuntimeError("OpenF1LocationSource must be used inside 'async with'")

        url = self.build_url(entity_id, start, end)
        try:
            resp = await self._client.get(url)
        except httpx.HTTPError as exc:
            return QueryResult.failed(f"{type(exc).__name__}: {exc}")

        if resp.status_code == 429:
            return QueryResult.rate_limited(resp.headers.get("retry-after", ""))
        if resp.status_code == 404:
            return QueryResult.success([])
        if not resp.is_success:
            return QueryResult.failed(f"HTTP {resp.status_code}")

        try:
            rows = resp.json()
            if not isinstance(rows, list):
                return QueryResult.failed("unexpected response body")
            samples = [LocationRecord.model_validate(row).to_sample() for row in rows]
        except (ValueError, ValidationError) as exc:
            _logger.debug("Undecodable response for driver %d: %s", entity_id, exc)
            return QueryResult.failed("undecodable response body")

        return QueryResult.success(samples)
