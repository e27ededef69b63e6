"""Adaptive polling coordinator for nearby aircraft."""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import logging
from typing import Callable, Optional

import httpx

from planewatch.config import (
    ANONYMOUS_INTERVAL_SECONDS,
    AUTHENTICATED_INTERVAL_SECONDS,
    SEARCH_RADIUS_KM,
)
from planewatch.domain.geo import bounding_box, haversine_km
from planewatch.domain.routes import resolve_route
from planewatch.ingestors.credentials import ANONYMOUS, RequestCredentials
from planewatch.ingestors.metadata import MetadataCache
from planewatch.ingestors.states import (
    MAX_RETRY_AFTER_SECONDS,
    RateLimitedError,
    StatesFetchError,
    StateVectorIngestor,
)
from planewatch.models.aircraft import Aircraft, AircraftState
from planewatch.models.geo import Coordinates
from planewatch.models.settings import DisplaySettings

from .auth import AuthTokenManager
from .location import LocationProvider
from .persistence import PersistenceAdapter
from .stats import StatsTracker

logger = logging.getLogger("planewatch.poller")

DEFAULT_LOCATION = Coordinates(latitude=40.417, longitude=-3.704)
DEFAULT_PLACE_NAME = "Madrid"
# floor on the wait between automatic fetches; a zero retry-after is still shown as 0
MIN_POLL_DELAY_SECONDS = 1


def _local_now() -> datetime:
    return datetime.now().astimezone()


class PollState(str, Enum):
    """Where the poller is in its fetch cycle."""

    IDLE = "idle"
    FETCHING = "fetching"
    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"


@dataclass
class RateLimitState:
    """Seconds to wait before the next automatic fetch."""

    delay_seconds: int

    def set_delay(self, seconds: int) -> None:
        self.delay_seconds = max(0, min(int(seconds), MAX_RETRY_AFTER_SECONDS))


class Poller:
    """Drive fetch cycles and publish nearby aircraft and statistics.

    One cycle runs at a time: a trigger that arrives while a cycle is in flight
    is skipped. Automatic cycles run every ``interval_seconds``, or after the
    server's retry-after delay following a 429. ``seconds_until_next_poll``
    counts down once per second for display.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        persistence: PersistenceAdapter,
        location: LocationProvider | None = None,
        initial_settings: DisplaySettings | None = None,
        default_location: Coordinates = DEFAULT_LOCATION,
        default_place_name: str = DEFAULT_PLACE_NAME,
        radius_km: float = SEARCH_RADIUS_KM,
        min_loading_seconds: float = 0.0,
        clock: Callable[[], datetime] = _local_now,
        states_url: str | None = None,
        metadata_url: str | None = None,
        token_url: str | None = None,
    ) -> None:
        self.http_client = http_client
        self.persistence = persistence
        self.radius_km = radius_km
        self.min_loading_seconds = min_loading_seconds
        self.clock = clock
        self.token_url = token_url

        stored = persistence.load_settings()
        self.display_settings = stored or initial_settings or DisplaySettings()
        if stored is None:
            persistence.save_settings(self.display_settings)

        self.ingestor = StateVectorIngestor(http_client=http_client, base_url=states_url)
        self.metadata = MetadataCache(http_client=http_client, base_url=metadata_url)
        self.metadata.subscribe(lambda icao24: self._notify())
        self.token_manager = self._build_token_manager()

        self.stats = StatsTracker(persistence, clock=clock)
        self.stats.load()

        self.default_location = default_location
        self.default_place_name = default_place_name
        self.reference = default_location
        self.place_name = default_place_name
        if location is not None:
            self._apply_location(location.current_coordinates(), location.current_place_name())

        self.state = PollState.IDLE
        self.is_loading = False
        self.aircraft: list[Aircraft] = []
        self.last_updated: Optional[datetime] = None
        self.rate_limit = RateLimitState(self.interval_seconds)
        self.seconds_until_next_poll = self.interval_seconds

        self._cycle_lock = asyncio.Lock()
        self._reschedule = asyncio.Event()
        self._poll_task: asyncio.Task | None = None
        self._countdown_task: asyncio.Task | None = None
        self._listeners: list[Callable[[], None]] = []

    # -- configuration -------------------------------------------------

    @property
    def interval_seconds(self) -> int:
        if self.display_settings.is_authenticated:
            return AUTHENTICATED_INTERVAL_SECONDS
        return ANONYMOUS_INTERVAL_SECONDS

    @property
    def is_running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def _build_token_manager(self) -> AuthTokenManager:
        return AuthTokenManager(
            http_client=self.http_client,
            client_id=self.display_settings.client_id,
            client_secret=self.display_settings.client_secret,
            token_url=self.token_url,
            clock=self.clock,
        )

    def update_settings(self, new_settings: DisplaySettings) -> None:
        """Persist new settings; an auth change restarts the timers."""

        previous = self.display_settings
        self.display_settings = new_settings
        self.persistence.save_settings(new_settings)

        if previous.credentials_key() != new_settings.credentials_key():
            self.token_manager = self._build_token_manager()
        if previous.auth_key() != new_settings.auth_key():
            logger.info(
                "Authentication changed; polling every %ss", self.interval_seconds
            )
            self.restart_timers()

    def _apply_location(
        self, coordinates: Optional[Coordinates], place_name: Optional[str]
    ) -> None:
        if coordinates is None:
            self.reference = self.default_location
            self.place_name = f"{self.default_place_name} (Location disabled)"
            return
        self.reference = coordinates
        self.place_name = place_name or "Unknown Location"

    def set_location(
        self, coordinates: Optional[Coordinates], place_name: Optional[str] = None
    ) -> None:
        """Accept a location fix; None falls back to the default location."""

        self._apply_location(coordinates, place_name)
        logger.info(
            "Reference point set to %.4f, %.4f (%s)",
            self.reference.latitude,
            self.reference.longitude,
            self.place_name,
        )

    def subscribe(self, callback: Callable[[], None]) -> None:
        """Call ``callback()`` whenever results or metadata change."""

        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            try:
                callback()
            except Exception:  # pragma: no cover - listener bugs must not stop polling
                logger.exception("Poller listener failed")

    # -- scheduling ----------------------------------------------------

    def start(self) -> None:
        if self.is_running:
            return
        self._poll_task = asyncio.create_task(self._poll_loop())
        self._countdown_task = asyncio.create_task(self._countdown_loop())
        logger.info("Poller started; polling every %ss", self.interval_seconds)

    async def stop(self) -> None:
        for task in (self._poll_task, self._countdown_task):
            if task is None:
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._poll_task = self._countdown_task = None
        await self.metadata.drain()
        logger.info("Poller stopped")

    def restart_timers(self) -> None:
        """Restart the poll and countdown timers with the current interval."""

        interval = self.interval_seconds
        self.rate_limit.set_delay(interval)
        self.seconds_until_next_poll = interval
        if self.is_running:
            if self._countdown_task is not None:
                self._countdown_task.cancel()
            self._countdown_task = asyncio.create_task(self._countdown_loop())
        self._reschedule.set()

    async def refresh(self) -> Optional[PollState]:
        """Fetch now and restart the countdown from the full delay."""

        outcome = await self.poll_once()
        self.seconds_until_next_poll = self.rate_limit.delay_seconds
        self._reschedule.set()
        return outcome

    async def _poll_loop(self) -> None:
        await self._guarded_poll()
        while True:
            self._reschedule.clear()
            delay = self.rate_limit.delay_seconds
            self.seconds_until_next_poll = delay
            try:
                await asyncio.wait_for(
                    self._reschedule.wait(), timeout=max(delay, MIN_POLL_DELAY_SECONDS)
                )
            except asyncio.TimeoutError:
                await self._guarded_poll()

    async def _countdown_loop(self) -> None:
        while True:
            await asyncio.sleep(1)
            if self.seconds_until_next_poll > 0:
                self.seconds_until_next_poll -= 1

    async def _guarded_poll(self) -> None:
        try:
            await self.poll_once()
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # pragma: no cover - defensive logging
            logger.exception("Unexpected error during fetch cycle: %s", exc)

    # -- fetch cycle ---------------------------------------------------

    async def poll_once(self) -> Optional[PollState]:
        """Run one fetch cycle. Returns None if another cycle is in flight."""

        if self._cycle_lock.locked():
            logger.debug("Fetch cycle already in flight; skipping trigger")
            return None

        async with self._cycle_lock:
            self.state = PollState.FETCHING
            self.is_loading = True
            started = asyncio.get_running_loop().time()
            outcome = PollState.FAILED
            try:
                outcome = await self._run_cycle(started)
                return outcome
            finally:
                logger.debug("Fetch cycle finished: %s", outcome.value)
                self.is_loading = False
                self.state = PollState.IDLE

    async def _run_cycle(self, started: float) -> PollState:
        credentials = await self._credentials()
        box = bounding_box(self.reference, self.radius_km)

        try:
            states = await self.ingestor.fetch_states(box, credentials)
        except RateLimitedError as exc:
            self.rate_limit.set_delay(exc.retry_after)
            self.seconds_until_next_poll = self.rate_limit.delay_seconds
            return PollState.RATE_LIMITED
        except StatesFetchError as exc:
            logger.info("Fetch cycle failed: %s", exc)
            self.rate_limit.set_delay(self.interval_seconds)
            await self._hold_loading(started)
            return PollState.FAILED

        self.rate_limit.set_delay(self.interval_seconds)
        nearby = self.rank_nearby(states)
        for aircraft in nearby:
            self.metadata.resolve(aircraft.icao24, credentials)

        await self._hold_loading(started)

        added = self.stats.record_cycle(nearby, self.metadata.describe_type)
        self.aircraft = nearby
        self.last_updated = self.clock()
        logger.info(
            "%s aircraft within %.1f km (%s new, %s today)",
            len(nearby),
            self.radius_km,
            len(added),
            self.stats.daily_count,
        )
        self._notify()
        return PollState.SUCCESS

    def rank_nearby(self, states: list[AircraftState]) -> list[Aircraft]:
        """Keep states within the radius, nearest first."""

        box = bounding_box(self.reference, self.radius_km)
        nearby: list[Aircraft] = []
        for state in states:
            position = state.position
            if not box.contains(position):
                continue
            distance = haversine_km(self.reference, position)
            if distance > self.radius_km:
                continue
            nearby.append(
                Aircraft(
                    icao24=state.icao24,
                    callsign=state.callsign or "Unknown",
                    altitude=state.altitude,
                    latitude=state.latitude,
                    longitude=state.longitude,
                    distance_km=distance,
                    speed=state.velocity if state.velocity > 0 else None,
                    route=resolve_route(state.callsign),
                )
            )
        nearby.sort(key=lambda aircraft: aircraft.distance_km)
        return nearby

    async def _credentials(self) -> RequestCredentials:
        current = self.display_settings
        if current.use_bearer_token:
            token = await self.token_manager.get_token()
            if token:
                return RequestCredentials(bearer_token=token)
        if current.has_basic_credentials:
            return RequestCredentials(
                username=current.opensky_username, password=current.opensky_password
            )
        return ANONYMOUS

    async def _hold_loading(self, started: float) -> None:
        remaining = self.min_loading_seconds - (asyncio.get_running_loop().time() - started)
        if remaining > 0:
            await asyncio.sleep(remaining)


__all__ = ["DEFAULT_LOCATION", "Poller", "PollState", "RateLimitState"]
