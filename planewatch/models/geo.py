"""Reference location models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Coordinates(BaseModel):
    """A WGS84 point in decimal degrees. NaN values are rejected."""

    latitude: float = Field(..., allow_inf_nan=False, description="Latitude in decimal degrees")
    longitude: float = Field(..., allow_inf_nan=False, description="Longitude in decimal degrees")

    model_config = ConfigDict(frozen=True)


class LocationUpdate(BaseModel):
    """A location fix pushed by the host's location service."""

    latitude: float = Field(..., allow_inf_nan=False, description="Latitude in decimal degrees")
    longitude: float = Field(..., allow_inf_nan=False, description="Longitude in decimal degrees")
    place_name: Optional[str] = Field(
        default=None, description="Reverse-geocoded place name, if known"
    )

    def coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


__all__ = ["Coordinates", "LocationUpdate"]
