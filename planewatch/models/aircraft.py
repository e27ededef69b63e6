"""Models for aircraft sightings and OpenSky aircraft metadata."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .geo import Coordinates


class AircraftState(BaseModel):
    """One decoded OpenSky state-vector row."""

    icao24: str = Field(..., description="ICAO 24-bit transponder address")
    callsign: str = Field(default="", description="Trimmed callsign, may be blank")
    longitude: float = Field(..., description="Longitude in decimal degrees")
    latitude: float = Field(..., description="Latitude in decimal degrees")
    altitude: float = Field(default=0.0, description="Barometric altitude in meters")
    velocity: float = Field(default=0.0, description="Ground velocity in m/s")

    @property
    def position(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class Aircraft(BaseModel):
    """A nearby aircraft for one sighting cycle.

    The aircraft type is not stored here; it is looked up from the metadata
    cache by ``icao24`` whenever it is displayed.
    """

    icao24: str = Field(..., description="ICAO 24-bit transponder address")
    callsign: str = Field(..., description="Callsign, or 'Unknown' when blank")
    altitude: float = Field(default=0.0, description="Altitude in meters")
    latitude: float = Field(..., description="Latitude in decimal degrees")
    longitude: float = Field(..., description="Longitude in decimal degrees")
    distance_km: float = Field(..., description="Distance from the reference point")
    speed: Optional[float] = Field(
        default=None, description="Ground speed in m/s when reported as non-zero"
    )
    route: Optional[str] = Field(default=None, description="Airline and flight number")

    @property
    def position(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class AircraftMetadata(BaseModel):
    """Static aircraft details from ``/api/metadata/aircraft/icao``."""

    registration: Optional[str] = None
    manufacturer_name: Optional[str] = Field(default=None, alias="manufacturerName")
    manufacturer_icao: Optional[str] = Field(default=None, alias="manufacturerIcao")
    model: Optional[str] = None
    typecode: Optional[str] = None
    operator_name: Optional[str] = Field(default=None, alias="operator")
    operator_callsign: Optional[str] = Field(default=None, alias="operatorCallsign")
    operator_icao: Optional[str] = Field(default=None, alias="operatorIcao")
    country: Optional[str] = None
    icao24: Optional[str] = None
    built: Optional[str] = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True, protected_namespaces=())

    @field_validator("built", mode="before")
    @classmethod
    def _stringify_built(cls, value: Any) -> Any:
        # OpenSky has served this both as a date string and as a bare year
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        return value

    @property
    def build_year(self) -> Optional[str]:
        if not self.built or not self.built.strip():
            return None
        built = self.built.strip()
        if len(built) >= 4 and built[:4].isdigit():
            return built[:4]
        return built


__all__ = ["Aircraft", "AircraftMetadata", "AircraftState"]
