"""Daily counters and sighting history models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, computed_field, model_validator


class DailyStats(BaseModel):
    """Distinct aircraft seen during one local calendar day."""

    date: str = Field(..., description="Local calendar day, YYYY-MM-DD")
    seen: set[str] = Field(default_factory=set, description="icao24s counted today")
    count: int = Field(default=0, ge=0, description="Distinct aircraft seen today")

    @model_validator(mode="after")
    def _count_matches_seen(self) -> "DailyStats":
        if self.count != len(self.seen):
            self.count = len(self.seen)
        return self

    def add(self, icao24: str) -> bool:
        """Count ``icao24`` once per day. Returns True if it was new."""

        if icao24 in self.seen:
            return False
        self.seen.add(icao24)
        self.count += 1
        return True


class SightingHistoryEntry(BaseModel):
    """A snapshot of an aircraft taken when it first came into range."""

    icao24: str
    callsign: str
    route: Optional[str] = None
    aircraft_type: Optional[str] = None
    timestamp: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def id(self) -> str:
        return f"{self.icao24}_{self.timestamp.timestamp()}"


class StatsResponse(BaseModel):
    date: str
    count: int


__all__ = ["DailyStats", "SightingHistoryEntry", "StatsResponse"]
