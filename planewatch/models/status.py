"""API response models for the poller's published state."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AircraftView(BaseModel):
    """A nearby aircraft enriched for display."""

    icao24: str
    callsign: str
    altitude: float = Field(..., description="Altitude in meters")
    latitude: float
    longitude: float
    distance_km: float
    speed: Optional[float] = Field(default=None, description="Ground speed in m/s")
    route: Optional[str] = None
    aircraft_type: Optional[str] = Field(
        default=None, description="Resolved from metadata; absent until it arrives"
    )
    details: str = Field(..., description="Display line honouring the display settings")
    tracking_url: str


class PollerStatus(BaseModel):
    """Scheduler state for the countdown and loading indicator."""

    state: str
    is_loading: bool
    seconds_until_next_poll: int
    interval_seconds: int
    place_name: str
    latitude: float
    longitude: float
    last_updated: Optional[datetime] = None


class RefreshResponse(BaseModel):
    outcome: Optional[str] = Field(
        default=None, description="Cycle outcome, or null when a cycle was already in flight"
    )
    aircraft_count: int
    seconds_until_next_poll: int


__all__ = ["AircraftView", "PollerStatus", "RefreshResponse"]
