"""Pure domain helpers: geometry and route labels."""

from .geo import BoundingBox, bounding_box, haversine_km
from .routes import AIRLINE_NAMES, resolve_route

__all__ = [
    "AIRLINE_NAMES",
    "BoundingBox",
    "bounding_box",
    "haversine_km",
    "resolve_route",
]
