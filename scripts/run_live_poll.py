#!/usr/bin/env python
"""
Run one live fetch cycle against OpenSky and print what was found.

Usage (from repo root):
    python scripts/run_live_poll.py [LAT LON]

Credentials are taken from OPENSKY_* environment variables, as for the service.
State is kept in memory only, so this does not touch the service's state file.
"""

import asyncio
import sys

import httpx

from planewatch.main import _initial_settings
from planewatch.models import Coordinates
from planewatch.services import InMemoryStore, PersistenceAdapter, Poller, StaticLocationProvider

# Madrid, matching the service's fallback location
LAT = 40.417
LON = -3.704


async def main() -> None:
    lat, lon = (float(sys.argv[1]), float(sys.argv[2])) if len(sys.argv) == 3 else (LAT, LON)
    location = StaticLocationProvider(Coordinates(latitude=lat, longitude=lon), "command line")

    async with httpx.AsyncClient(timeout=15) as client:
        poller = Poller(
            http_client=client,
            persistence=PersistenceAdapter(InMemoryStore()),
            location=location,
            initial_settings=_initial_settings(),
        )
        print(f"=== Live OpenSky poll around {lat}, {lon} (radius {poller.radius_km} km) ===\n")

        outcome = await poller.poll_once()
        await poller.metadata.drain()

    print(f"Outcome: {outcome.value if outcome else 'skipped'}")
    if outcome is not None and outcome.value == "rate_limited":
        print(f"Rate limited; retry in {poller.rate_limit.delay_seconds}s")
        return

    if not poller.aircraft:
        print("\nNo aircraft in range.")
        return

    for idx, aircraft in enumerate(poller.aircraft, start=1):
        print(
            f"{idx}. {aircraft.callsign:<8} icao={aircraft.icao24} "
            f"dist={aircraft.distance_km:.2f}km alt={aircraft.altitude:.0f}m "
            f"route={aircraft.route!r} type={poller.metadata.describe_type(aircraft.icao24)!r}"
        )


if __name__ == "__main__":
    asyncio.run(main())
