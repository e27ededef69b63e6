"""Daily distinct-aircraft counter and recent sighting history."""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Callable, Iterable, Optional

from planewatch.models.aircraft import Aircraft
from planewatch.models.stats import DailyStats, SightingHistoryEntry

from .persistence import PersistenceAdapter

logger = logging.getLogger("planewatch.stats")

HISTORY_LIMIT = 20


def _local_now() -> datetime:
    return datetime.now().astimezone()


class StatsTracker:
    """Track today's distinct aircraft and the most recent new sightings.

    Every mutation is written through the persistence adapter straight away;
    a cycle that changes nothing writes nothing.
    """

    def __init__(
        self,
        persistence: PersistenceAdapter,
        *,
        clock: Callable[[], datetime] = _local_now,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        self.persistence = persistence
        self.clock = clock
        self.history_limit = history_limit
        self.daily = DailyStats(date=self.today())
        self._history: list[SightingHistoryEntry] = []
        self._previous_cycle: set[str] = set()

    def today(self) -> str:
        return self.clock().date().isoformat()

    @property
    def daily_count(self) -> int:
        return self.daily.count

    @property
    def seen_today(self) -> frozenset[str]:
        return frozenset(self.daily.seen)

    @property
    def history(self) -> list[SightingHistoryEntry]:
        return list(self._history)

    def load(self) -> None:
        """Restore persisted state, resetting the counter if the day changed."""

        self.daily = self.persistence.load_daily_stats()
        self._history = self.persistence.load_history()[: self.history_limit]
        self.check_rollover()
        logger.info(
            "Loaded stats for %s: %s aircraft today, %s history entries",
            self.daily.date,
            self.daily.count,
            len(self._history),
        )

    def check_rollover(self) -> bool:
        """Clear the daily counter when the local date differs from the stored one."""

        today = self.today()
        if self.daily.date == today:
            return False

        logger.info("Day changed from %r to %s; resetting daily count", self.daily.date, today)
        self.daily = DailyStats(date=today)
        self.persistence.save_last_reset_date(today)
        self.persistence.save_daily_stats(self.daily)
        return True

    def record_cycle(
        self,
        aircraft: Iterable[Aircraft],
        type_lookup: Callable[[str], Optional[str]] = lambda icao24: None,
    ) -> list[SightingHistoryEntry]:
        """Fold one successful cycle into the counters.

        Returns the history entries added for aircraft that were not present in
        the previous cycle.
        """

        current = list(aircraft)
        self.check_rollover()

        new_today = [item.icao24 for item in current if self.daily.add(item.icao24)]
        if new_today:
            self.persistence.save_daily_stats(self.daily)

        now = self.clock()
        added: list[SightingHistoryEntry] = []
        for item in current:
            if item.icao24 in self._previous_cycle:
                continue
            entry = SightingHistoryEntry(
                icao24=item.icao24,
                callsign=item.callsign,
                route=item.route,
                aircraft_type=type_lookup(item.icao24),
                timestamp=now,
            )
            self._history.insert(0, entry)
            added.append(entry)

        self._previous_cycle = {item.icao24 for item in current}

        if added:
            del self._history[self.history_limit :]
            self.persistence.save_history(self._history)
        return added

    def clear_history(self) -> None:
        self._history.clear()
        self.persistence.save_history(self._history)


__all__ = ["HISTORY_LIMIT", "StatsTracker"]
