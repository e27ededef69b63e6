"""Nearby aircraft, manual refresh and location endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from planewatch.config import TRACKING_URL
from planewatch.models import (
    Aircraft,
    AircraftView,
    DisplaySettings,
    LocationUpdate,
    PollerStatus,
    RefreshResponse,
)
from planewatch.services.poller import Poller

from .dependencies import get_poller

router = APIRouter(prefix="/api/v1", tags=["aircraft"])

logger = logging.getLogger("planewatch.api.aircraft")

DETAIL_SEPARATOR = " • "


def format_details(
    aircraft: Aircraft, aircraft_type: Optional[str], display: DisplaySettings
) -> str:
    """Compose the one-line summary shown under a callsign."""

    parts: list[str] = []
    if display.show_aircraft_type and aircraft_type:
        parts.append(aircraft_type)
    if display.show_altitude:
        parts.append(f"{int(aircraft.altitude * 3.28084)} ft")
    if display.show_speed and aircraft.speed is not None:
        parts.append(f"{int(aircraft.speed * 3.6)} km/h")
    if display.show_distance:
        parts.append(f"{aircraft.distance_km:.1f} km")
    return DETAIL_SEPARATOR.join(parts)


def to_view(poller: Poller, aircraft: Aircraft) -> AircraftView:
    aircraft_type = poller.metadata.describe_type(aircraft.icao24)
    return AircraftView(
        **aircraft.model_dump(),
        aircraft_type=aircraft_type,
        details=format_details(aircraft, aircraft_type, poller.display_settings),
        tracking_url=TRACKING_URL.format(icao24=aircraft.icao24),
    )


def _status(poller: Poller) -> PollerStatus:
    return PollerStatus(
        state=poller.state.value,
        is_loading=poller.is_loading,
        seconds_until_next_poll=poller.seconds_until_next_poll,
        interval_seconds=poller.interval_seconds,
        place_name=poller.place_name,
        latitude=poller.reference.latitude,
        longitude=poller.reference.longitude,
        last_updated=poller.last_updated,
    )


@router.get("/aircraft", response_model=list[AircraftView], summary="Nearby aircraft")
async def list_aircraft(poller: Poller = Depends(get_poller)) -> list[AircraftView]:
    """Return aircraft within the search radius, nearest first."""

    return [to_view(poller, aircraft) for aircraft in poller.aircraft]


@router.get("/status", response_model=PollerStatus, summary="Poller status")
async def get_status(poller: Poller = Depends(get_poller)) -> PollerStatus:
    return _status(poller)


@router.post("/refresh", response_model=RefreshResponse, summary="Fetch now")
async def refresh(poller: Poller = Depends(get_poller)) -> RefreshResponse:
    """Run a fetch cycle immediately and restart the countdown."""

    outcome = await poller.refresh()
    logger.info("Manual refresh: %s", outcome.value if outcome else "skipped")
    return RefreshResponse(
        outcome=outcome.value if outcome else None,
        aircraft_count=len(poller.aircraft),
        seconds_until_next_poll=poller.seconds_until_next_poll,
    )


@router.put("/location", response_model=PollerStatus, summary="Update reference location")
async def update_location(
    update: LocationUpdate, poller: Poller = Depends(get_poller)
) -> PollerStatus:
    """Accept a location fix from the host and fetch for the new position."""

    poller.set_location(update.coordinates(), update.place_name)
    await poller.refresh()
    return _status(poller)
