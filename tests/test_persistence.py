import json
from datetime import datetime, timezone

from planewatch.models.settings import DisplaySettings
from planewatch.models.stats import DailyStats, SightingHistoryEntry
from planewatch.services.persistence import InMemoryStore, JsonFileStore, PersistenceAdapter


def test_json_file_store_survives_restart(tmp_path):
    path = tmp_path / "nested" / "state.json"
    store = JsonFileStore(path)
    store.set("lastResetDate", "2024-05-01")
    store.set("todaysFlightCount", "3")

    reopened = JsonFileStore(path)

    assert reopened.get("lastResetDate") == "2024-05-01"
    assert reopened.get("todaysFlightCount") == "3"
    assert reopened.get("missing") is None


def test_json_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json")

    store = JsonFileStore(path)

    assert store.get("anything") is None
    store.set("key", "value")
    assert json.loads(path.read_text()) == {"key": "value"}


def test_settings_round_trip():
    adapter = PersistenceAdapter(InMemoryStore())
    assert adapter.load_settings() is None

    adapter.save_settings(DisplaySettings(use_basic_auth=True, opensky_username="pilot"))

    loaded = adapter.load_settings()
    assert loaded is not None
    assert loaded.use_basic_auth is True
    assert loaded.opensky_username == "pilot"
    assert loaded.show_route is True


def test_unreadable_values_are_treated_as_absent():
    store = InMemoryStore(
        {
            "displaySettings": "{broken",
            "seenICAOsToday": "42",
            "todaysFlightCount": "many",
            "flightHistory": '[{"icao24": "abc"}]',
        }
    )
    adapter = PersistenceAdapter(store)

    assert adapter.load_settings() is None
    assert adapter.load_history() == []
    stats = adapter.load_daily_stats()
    assert stats.seen == set()
    assert stats.count == 0


def test_daily_count_is_reconciled_with_seen_set():
    store = InMemoryStore(
        {
            "lastResetDate": "2024-05-01",
            "todaysFlightCount": "7",
            "seenICAOsToday": '["a","b"]',
        }
    )

    stats = PersistenceAdapter(store).load_daily_stats()

    assert stats.date == "2024-05-01"
    assert stats.count == len(stats.seen) == 2


def test_daily_stats_round_trip():
    store = InMemoryStore({"lastResetDate": "2024-05-01"})
    adapter = PersistenceAdapter(store)
    stats = DailyStats(date="2024-05-01")
    stats.add("b")
    stats.add("a")
    assert stats.add("a") is False

    adapter.save_daily_stats(stats)

    assert store.get("seenICAOsToday") == '["a","b"]'
    assert adapter.load_daily_stats() == DailyStats(date="2024-05-01", seen={"a", "b"}, count=2)


def test_history_loads_newest_first():
    older = SightingHistoryEntry(
        icao24="a", callsign="AA1", timestamp=datetime(2024, 5, 1, 9, tzinfo=timezone.utc)
    )
    newer = SightingHistoryEntry(
        icao24="b",
        callsign="BA2",
        route="British Airways 2",
        aircraft_type="B738",
        timestamp=datetime(2024, 5, 1, 10, tzinfo=timezone.utc),
    )
    adapter = PersistenceAdapter(InMemoryStore())

    adapter.save_history([older, newer])

    assert [entry.icao24 for entry in adapter.load_history()] == ["b", "a"]
    assert adapter.load_history()[0].aircraft_type == "B738"
