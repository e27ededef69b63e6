from __future__ import annotations

import contextlib
import logging
import time

import httpx
from fastapi import FastAPI, Request

from planewatch.api import api_router
from planewatch.config import settings
from planewatch.models import Coordinates, DisplaySettings
from planewatch.services import JsonFileStore, PersistenceAdapter, Poller, StaticLocationProvider

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("planewatch")


def _initial_settings() -> DisplaySettings:
    """Seed credentials from the environment on first run."""

    return DisplaySettings(
        opensky_username=settings.opensky_username,
        opensky_password=settings.opensky_password,
        client_id=settings.opensky_client_id,
        client_secret=settings.opensky_client_secret,
        use_basic_auth=bool(settings.opensky_username and settings.opensky_password),
        use_bearer_token=bool(settings.opensky_client_id and settings.opensky_client_secret),
    )


def build_poller(http_client: httpx.AsyncClient) -> Poller:
    default_location = Coordinates(latitude=settings.default_lat, longitude=settings.default_lon)
    persistence = PersistenceAdapter(JsonFileStore(settings.state_file))
    return Poller(
        http_client=http_client,
        persistence=persistence,
        location=StaticLocationProvider(default_location, settings.default_place_name),
        initial_settings=_initial_settings(),
        default_location=default_location,
        default_place_name=settings.default_place_name,
        radius_km=settings.radius_km,
        min_loading_seconds=settings.min_loading_seconds,
    )


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown lifecycle."""

    app.state.http_client = httpx.AsyncClient(timeout=settings.http_timeout)
    app.state.poller = build_poller(app.state.http_client)
    logger.info("State store at %s", settings.state_file)

    if settings.enable_poller:
        app.state.poller.start()
    else:
        logger.warning("Background polling disabled; use POST /api/v1/refresh")

    try:
        yield
    finally:
        await app.state.poller.stop()
        await app.state.http_client.aclose()


app = FastAPI(title="PlaneWatch", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log basic request information for observability."""

    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "HTTP %s %s -> %s (%.2f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.include_router(api_router)


@app.get("/", summary="Root")
def read_root() -> dict[str, str]:
    """Basic root endpoint for quick verification."""

    return {"message": "PlaneWatch is running"}
