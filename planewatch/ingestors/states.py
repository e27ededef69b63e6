"""State-vector ingestor for nearby air traffic using the OpenSky REST API."""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

import httpx

from planewatch.config import OPENSKY_STATES_URL
from planewatch.domain.geo import BoundingBox
from planewatch.models.aircraft import AircraftState

from .credentials import ANONYMOUS, RequestCredentials

logger = logging.getLogger("planewatch.ingestors.states")

RETRY_AFTER_HEADER = "x-rate-limit-retry-after-seconds"
DEFAULT_RETRY_AFTER_SECONDS = 900
MAX_RETRY_AFTER_SECONDS = 86400

# Column positions in an OpenSky state vector
_ICAO24 = 0
_CALLSIGN = 1
_LONGITUDE = 5
_LATITUDE = 6
_BARO_ALTITUDE = 7
_VELOCITY = 9
_MIN_COLUMNS = 10


class StatesFetchError(RuntimeError):
    """The state-vector request failed or returned an unusable body."""


class RateLimitedError(StatesFetchError):
    """OpenSky answered 429; ``retry_after`` is the clamped delay in seconds."""

    def __init__(self, retry_after: int):
        super().__init__(f"rate limited, retry after {retry_after}s")
        self.retry_after = retry_after


def parse_retry_after(raw: Optional[str]) -> int:
    """Clamp an integer retry-after header to [0, 86400]; default 900."""

    if raw is None:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        seconds = int(raw.strip())
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS
    return max(0, min(seconds, MAX_RETRY_AFTER_SECONDS))


def as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def as_float(value: Any) -> Optional[float]:
    """Numeric cells as float; integers are widened, booleans are not numbers."""

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def decode_row(row: Any) -> Optional[AircraftState]:
    """Decode one state vector, or None if it lacks identity or position."""

    if not isinstance(row, (list, tuple)) or len(row) < _MIN_COLUMNS:
        return None

    icao24 = as_str(row[_ICAO24])
    lon = as_float(row[_LONGITUDE])
    lat = as_float(row[_LATITUDE])
    if icao24 is None or lon is None or lat is None:
        return None
    if math.isnan(lon) or math.isnan(lat):
        return None

    callsign = (as_str(row[_CALLSIGN]) or "").strip()
    altitude = as_float(row[_BARO_ALTITUDE])
    velocity = as_float(row[_VELOCITY])

    return AircraftState(
        icao24=icao24,
        callsign=callsign,
        longitude=lon,
        latitude=lat,
        altitude=altitude if altitude is not None else 0.0,
        velocity=velocity if velocity is not None else 0.0,
    )


def decode_states(payload: Any) -> list[AircraftState]:
    """Decode an ``/api/states/all`` body, silently dropping malformed rows."""

    if not isinstance(payload, dict):
        raise StatesFetchError("state-vector response is not a JSON object")

    raw_states = payload.get("states") or []
    if not isinstance(raw_states, list):
        raise StatesFetchError("state-vector 'states' is not a list")

    states: list[AircraftState] = []
    for entry in raw_states:
        state = decode_row(entry)
        if state is None:
            logger.debug("Dropping malformed state vector: %r", entry)
            continue
        states.append(state)
    return states


class StateVectorIngestor:
    """Fetch state vectors inside a bounding box."""

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        base_url: str | None = None,
    ) -> None:
        self.http_client = http_client
        self.base_url = base_url or OPENSKY_STATES_URL

    async def fetch_states(
        self, box: BoundingBox, credentials: RequestCredentials = ANONYMOUS
    ) -> list[AircraftState]:
        try:
            response = await self.http_client.get(
                self.base_url,
                params=box.as_params(),
                headers=credentials.headers(),
                auth=credentials.auth(),
            )
        except httpx.TimeoutException as exc:
            logger.warning("State-vector request timed out: %s", exc)
            raise StatesFetchError("state-vector request timed out") from exc
        except httpx.RequestError as exc:
            logger.warning("State-vector request failed: %s", exc)
            raise StatesFetchError("state-vector request failed") from exc

        if response.status_code == 429:
            retry_after = parse_retry_after(response.headers.get(RETRY_AFTER_HEADER))
            logger.warning(
                "OpenSky rate limit encountered; retrying in %ss", retry_after
            )
            raise RateLimitedError(retry_after)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "OpenSky returned HTTP %s: %s", exc.response.status_code, exc
            )
            raise StatesFetchError(f"HTTP {exc.response.status_code}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Failed to parse state-vector JSON response: %s", exc)
            raise StatesFetchError("state-vector response is not JSON") from exc

        states = decode_states(payload)
        logger.debug("Decoded %s state vectors", len(states))
        return states


__all__ = [
    "DEFAULT_RETRY_AFTER_SECONDS",
    "MAX_RETRY_AFTER_SECONDS",
    "RETRY_AFTER_HEADER",
    "RateLimitedError",
    "StateVectorIngestor",
    "StatesFetchError",
    "as_float",
    "as_str",
    "decode_row",
    "decode_states",
    "parse_retry_after",
]
