"""Pydantic models for the PlaneWatch service."""

from .aircraft import Aircraft, AircraftMetadata, AircraftState
from .geo import Coordinates, LocationUpdate
from .settings import DisplaySettings, DisplaySettingsUpdate, DisplaySettingsView
from .stats import DailyStats, SightingHistoryEntry, StatsResponse
from .status import AircraftView, PollerStatus, RefreshResponse

__all__ = [
    "Aircraft",
    "AircraftMetadata",
    "AircraftState",
    "AircraftView",
    "Coordinates",
    "DailyStats",
    "DisplaySettings",
    "DisplaySettingsUpdate",
    "DisplaySettingsView",
    "LocationUpdate",
    "PollerStatus",
    "RefreshResponse",
    "SightingHistoryEntry",
    "StatsResponse",
]
