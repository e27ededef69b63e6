"""PlaneWatch: nearby aircraft from the OpenSky Network."""

__version__ = "0.1.0"
