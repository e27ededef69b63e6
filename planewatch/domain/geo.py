"""Great-circle distance and bounding-box helpers."""

from __future__ import annotations

from dataclasses import dataclass
import math

from planewatch.models.geo import Coordinates

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.0


@dataclass(frozen=True)
class BoundingBox:
    """Rectangular lat/lon prefilter region used for the upstream query."""

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    def contains(self, point: Coordinates) -> bool:
        return (
            self.min_lat <= point.latitude <= self.max_lat
            and self.min_lon <= point.longitude <= self.max_lon
        )

    def as_params(self) -> dict[str, float]:
        return {
            "lamin": self.min_lat,
            "lomin": self.min_lon,
            "lamax": self.max_lat,
            "lomax": self.max_lon,
        }


def bounding_box(center: Coordinates, radius_km: float) -> BoundingBox:
    """Flat-earth box around ``center``.

    Only valid for small radii. Near the poles the longitude span grows without
    bound; that is accepted rather than clamped.
    """

    lat_delta = radius_km / KM_PER_DEGREE
    lon_delta = radius_km / (KM_PER_DEGREE * math.cos(math.radians(center.latitude)))
    return BoundingBox(
        min_lat=center.latitude - lat_delta,
        min_lon=center.longitude - lon_delta,
        max_lat=center.latitude + lat_delta,
        max_lon=center.longitude + lon_delta,
    )


def haversine_km(p1: Coordinates, p2: Coordinates) -> float:
    """Great-circle distance between two points in kilometers."""

    d_lat = math.radians(p2.latitude - p1.latitude)
    d_lon = math.radians(p2.longitude - p1.longitude)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(p1.latitude))
        * math.cos(math.radians(p2.latitude))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


__all__ = ["BoundingBox", "EARTH_RADIUS_KM", "bounding_box", "haversine_km"]
