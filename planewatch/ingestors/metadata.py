"""Lazy, process-lifetime cache of OpenSky aircraft metadata."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

import httpx
from pydantic import ValidationError

from planewatch.config import OPENSKY_METADATA_URL
from planewatch.models.aircraft import AircraftMetadata

from .credentials import ANONYMOUS, RequestCredentials

logger = logging.getLogger("planewatch.ingestors.metadata")


def describe_type(metadata: Optional[AircraftMetadata]) -> Optional[str]:
    """Human-readable aircraft type built from whichever metadata fields exist.

    Year, manufacturer, model and operator are joined when any of them is
    present; otherwise the ICAO type code is used on its own.
    """

    if metadata is None:
        return None

    parts: list[str] = []
    if metadata.build_year:
        parts.append(metadata.build_year)
    for value in (metadata.manufacturer_name, metadata.model, metadata.operator_name):
        if value and value.strip():
            parts.append(value.strip().upper())

    if parts:
        return " ".join(parts)
    if metadata.typecode and metadata.typecode.strip():
        return metadata.typecode.strip().upper()
    return None


class MetadataCache:
    """icao24 -> metadata, filled at most once per key and never invalidated.

    ``resolve`` starts a background lookup unless the key is cached or already
    being fetched. Failed lookups leave no trace, so the next sighting of the
    same aircraft tries again.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        base_url: str | None = None,
    ) -> None:
        self.http_client = http_client
        self.base_url = (base_url or OPENSKY_METADATA_URL).rstrip("/")
        self._entries: dict[str, AircraftMetadata] = {}
        self._in_flight: set[str] = set()
        self._tasks: set[asyncio.Task] = set()
        self._subscribers: list[Callable[[str], None]] = []

    def __contains__(self, icao24: str) -> bool:
        return icao24 in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, icao24: str) -> Optional[AircraftMetadata]:
        return self._entries.get(icao24)

    def describe_type(self, icao24: str) -> Optional[str]:
        return describe_type(self._entries.get(icao24))

    def subscribe(self, callback: Callable[[str], None]) -> None:
        """Register ``callback(icao24)`` to run whenever a new entry is cached."""

        self._subscribers.append(callback)

    def resolve(
        self, icao24: str, credentials: RequestCredentials = ANONYMOUS
    ) -> Optional[asyncio.Task]:
        if icao24 in self._entries or icao24 in self._in_flight:
            return None

        self._in_flight.add(icao24)
        task = asyncio.create_task(self._fetch(icao24, credentials))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every lookup currently in flight."""

        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _fetch(self, icao24: str, credentials: RequestCredentials) -> None:
        try:
            metadata = await self._request(icao24, credentials)
        finally:
            self._in_flight.discard(icao24)

        if metadata is None:
            return

        self._entries[icao24] = metadata
        logger.debug("Cached metadata for %s", icao24)
        for callback in list(self._subscribers):
            try:
                callback(icao24)
            except Exception:  # pragma: no cover - subscriber bugs must not break the cache
                logger.exception("Metadata subscriber failed for %s", icao24)

    async def _request(
        self, icao24: str, credentials: RequestCredentials
    ) -> Optional[AircraftMetadata]:
        url = f"{self.base_url}/{icao24}"
        try:
            response = await self.http_client.get(
                url, headers=credentials.headers(), auth=credentials.auth()
            )
        except httpx.RequestError as exc:
            logger.debug("Metadata request for %s failed: %s", icao24, exc)
            return None

        if not response.is_success:
            logger.debug("Metadata lookup for %s returned HTTP %s", icao24, response.status_code)
            return None

        try:
            return AircraftMetadata.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.debug("Failed to decode metadata for %s: %s", icao24, exc)
            return None


__all__ = ["MetadataCache", "describe_type"]
