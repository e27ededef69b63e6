"""Reference-location collaborators."""

from __future__ import annotations

from typing import Optional, Protocol

from planewatch.models.geo import Coordinates


class LocationProvider(Protocol):
    """Supplies the observer's position and, optionally, a place name."""

    def current_coordinates(self) -> Optional[Coordinates]: ...

    def current_place_name(self) -> Optional[str]: ...


class StaticLocationProvider:
    """A fixed location, e.g. from configuration."""

    def __init__(
        self, coordinates: Optional[Coordinates] = None, place_name: Optional[str] = None
    ) -> None:
        self._coordinates = coordinates
        self._place_name = place_name

    def current_coordinates(self) -> Optional[Coordinates]:
        return self._coordinates

    def current_place_name(self) -> Optional[str]:
        return self._place_name


__all__ = ["LocationProvider", "StaticLocationProvider"]
