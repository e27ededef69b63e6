"""Configuration settings for the PlaneWatch service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger("planewatch.config")

# Upstream hosts are fixed; components accept overrides for tests only.
OPENSKY_STATES_URL = "https://opensky-network.org/api/states/all"
OPENSKY_METADATA_URL = "https://opensky-network.org/api/metadata/aircraft/icao"
OPENSKY_TOKEN_URL = (
    "https://auth.opensky-network.org/auth/realms/opensky-network"
    "/protocol/openid-connect/token"
)
TRACKING_URL = "https://globe.adsbexchange.com/?icao={icao24}"

SEARCH_RADIUS_KM = 3.0
AUTHENTICATED_INTERVAL_SECONDS = 10
ANONYMOUS_INTERVAL_SECONDS = 60


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


def _get_float(env_var: str, default: float) -> float:
    value = os.getenv(env_var)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", env_var, value)
        return default


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    planewatch_env: str = os.getenv("PLANEWATCH_ENV", "local")
    log_level: str = os.getenv("PLANEWATCH_LOG_LEVEL", "INFO")
    http_timeout: float = _get_float("PLANEWATCH_HTTP_TIMEOUT", 10.0)

    # Poller
    enable_poller: bool = _get_bool("PLANEWATCH_ENABLE_POLLER", default=True)
    radius_km: float = SEARCH_RADIUS_KM
    min_loading_seconds: float = _get_float("PLANEWATCH_MIN_LOADING_SECONDS", 0.0)

    # Fallback reference point when no location fix is available
    default_lat: float = _get_float("PLANEWATCH_DEFAULT_LAT", 40.417)
    default_lon: float = _get_float("PLANEWATCH_DEFAULT_LON", -3.704)
    default_place_name: str = os.getenv("PLANEWATCH_DEFAULT_PLACE", "Madrid")

    # Key-value state store
    state_file: str = os.getenv(
        "PLANEWATCH_STATE_FILE",
        os.path.join(os.path.expanduser("~"), ".planewatch", "state.json"),
    )

    # First-run OpenSky credentials; persisted display settings take over afterwards
    opensky_username: str = os.getenv("OPENSKY_USERNAME", "")
    opensky_password: str = os.getenv("OPENSKY_PASSWORD", "")
    opensky_client_id: str = os.getenv("OPENSKY_CLIENT_ID", "")
    opensky_client_secret: str = os.getenv("OPENSKY_CLIENT_SECRET", "")


settings = Settings()

__all__ = [
    "ANONYMOUS_INTERVAL_SECONDS",
    "AUTHENTICATED_INTERVAL_SECONDS",
    "OPENSKY_METADATA_URL",
    "OPENSKY_STATES_URL",
    "OPENSKY_TOKEN_URL",
    "SEARCH_RADIUS_KM",
    "Settings",
    "TRACKING_URL",
    "settings",
]
