"""Key-value persistence for settings and statistics across restarts."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Optional, Protocol

from pydantic import TypeAdapter, ValidationError

from planewatch.models.settings import DisplaySettings
from planewatch.models.stats import DailyStats, SightingHistoryEntry

logger = logging.getLogger("planewatch.persistence")

SETTINGS_KEY = "displaySettings"
LAST_RESET_DATE_KEY = "lastResetDate"
SEEN_TODAY_KEY = "seenICAOsToday"
COUNT_TODAY_KEY = "todaysFlightCount"
HISTORY_KEY = "flightHistory"

_seen_adapter = TypeAdapter(list[str])
_history_adapter = TypeAdapter(list[SightingHistoryEntry])


class KeyValueStore(Protocol):
    """String-keyed blob store supplied by the host."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryStore:
    """Process-local store; state is lost on exit."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """Store every key in a single JSON object on disk, rewritten on each set."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = Lock()
        self._data = self._load()

    def _load(self) -> dict[str, str]:
        try:
            if not self.path.exists():
                return {}
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Failed to load state from %s: %s", self.path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring state file %s: not a JSON object", self.path)
            return {}
        return {str(key): value for key, value in raw.items() if isinstance(value, str)}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
                tmp_path.write_text(json.dumps(self._data), encoding="utf-8")
                tmp_path.replace(self.path)
            except OSError as exc:
                logger.warning("Failed to persist state to %s: %s", self.path, exc)


class PersistenceAdapter:
    """Serialize domain state to and from a ``KeyValueStore``.

    Unreadable values are logged and treated as absent so a corrupt entry never
    prevents startup.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load_settings(self) -> Optional[DisplaySettings]:
        raw = self.store.get(SETTINGS_KEY)
        if raw is None:
            return None
        try:
            return DisplaySettings.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Discarding unreadable display settings: %s", exc)
            return None

    def save_settings(self, value: DisplaySettings) -> None:
        self.store.set(SETTINGS_KEY, value.model_dump_json())

    def load_last_reset_date(self) -> str:
        return self.store.get(LAST_RESET_DATE_KEY) or ""

    def save_last_reset_date(self, value: str) -> None:
        self.store.set(LAST_RESET_DATE_KEY, value)

    def load_daily_stats(self) -> DailyStats:
        """Stats for the persisted date; the caller decides whether to roll over."""

        date_key = self.load_last_reset_date()
        seen: set[str] = set()
        raw_seen = self.store.get(SEEN_TODAY_KEY)
        if raw_seen is not None:
            try:
                seen = set(_seen_adapter.validate_json(raw_seen))
            except ValidationError as exc:
                logger.warning("Discarding unreadable seen-today set: %s", exc)

        raw_count = self.store.get(COUNT_TODAY_KEY)
        count = 0
        if raw_count is not None:
            try:
                count = int(raw_count)
            except ValueError:
                logger.warning("Discarding unreadable daily count %r", raw_count)
        if count != len(seen):
            logger.warning(
                "Stored daily count %s disagrees with %s seen aircraft; using the set",
                count,
                len(seen),
            )
        return DailyStats(date=date_key, seen=seen, count=len(seen))

    def save_daily_stats(self, stats: DailyStats) -> None:
        self.store.set(COUNT_TODAY_KEY, str(stats.count))
        self.store.set(SEEN_TODAY_KEY, _seen_adapter.dump_json(sorted(stats.seen)).decode())

    def load_history(self) -> list[SightingHistoryEntry]:
        raw = self.store.get(HISTORY_KEY)
        if raw is None:
            return []
        try:
            history = _history_adapter.validate_json(raw)
        except ValidationError as exc:
            logger.warning("Discarding unreadable sighting history: %s", exc)
            return []
        return sorted(history, key=lambda entry: entry.timestamp, reverse=True)

    def save_history(self, history: list[SightingHistoryEntry]) -> None:
        self.store.set(HISTORY_KEY, _history_adapter.dump_json(history).decode())


__all__ = [
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "PersistenceAdapter",
]
