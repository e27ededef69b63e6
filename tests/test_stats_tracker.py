from datetime import datetime, timedelta, timezone

from planewatch.models.aircraft import Aircraft
from planewatch.services.persistence import InMemoryStore, PersistenceAdapter
from planewatch.services.stats import StatsTracker


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def _aircraft(icao24: str, callsign: str = "IB3170") -> Aircraft:
    return Aircraft(
        icao24=icao24,
        callsign=callsign,
        altitude=1000.0,
        latitude=40.42,
        longitude=-3.70,
        distance_km=1.0,
        route="Iberia 3170",
    )


def _tracker(store: InMemoryStore, clock: FakeClock) -> StatsTracker:
    tracker = StatsTracker(PersistenceAdapter(store), clock=clock)
    tracker.load()
    return tracker


def test_loading_on_a_new_day_clears_counts():
    store = InMemoryStore(
        {
            "lastResetDate": "2024-01-01",
            "todaysFlightCount": "2",
            "seenICAOsToday": '["abc123","def456"]',
        }
    )
    clock = FakeClock(datetime(2024, 1, 2, 8, 0))

    tracker = _tracker(store, clock)

    assert tracker.daily_count == 0
    assert tracker.seen_today == frozenset()
    assert store.get("lastResetDate") == "2024-01-02"
    assert store.get("todaysFlightCount") == "0"


def test_loading_on_the_same_day_restores_counts():
    store = InMemoryStore(
        {
            "lastResetDate": "2024-01-02",
            "todaysFlightCount": "2",
            "seenICAOsToday": '["abc123","def456"]',
        }
    )
    tracker = _tracker(store, FakeClock(datetime(2024, 1, 2, 23, 59)))

    assert tracker.daily_count == 2
    assert tracker.seen_today == {"abc123", "def456"}


def test_dedup_count_matches_seen_set():
    store = InMemoryStore()
    clock = FakeClock(datetime(2024, 3, 1, 9, 0))
    tracker = _tracker(store, clock)

    cycles = [["a", "b"], ["b", "c"], [], ["a", "c", "d"], ["d"]]
    for cycle in cycles:
        tracker.record_cycle([_aircraft(icao) for icao in cycle])
        assert len(tracker.seen_today) == tracker.daily_count

    assert tracker.daily_count == 4
    assert store.get("todaysFlightCount") == "4"


def test_rollover_is_checked_every_cycle():
    store = InMemoryStore()
    clock = FakeClock(datetime(2024, 3, 1, 23, 59))
    tracker = _tracker(store, clock)

    tracker.record_cycle([_aircraft("a"), _aircraft("b")])
    assert tracker.daily_count == 2

    clock.advance(minutes=2)
    tracker.record_cycle([_aircraft("b")])

    assert tracker.daily.date == "2024-03-02"
    assert tracker.daily_count == 1
    assert store.get("lastResetDate") == "2024-03-02"


def test_history_records_only_newly_seen_aircraft():
    clock = FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))
    tracker = _tracker(InMemoryStore(), clock)

    added = tracker.record_cycle([_aircraft("a"), _aircraft("b")])
    assert [entry.icao24 for entry in added] == ["a", "b"]

    clock.advance(seconds=10)
    added = tracker.record_cycle([_aircraft("b"), _aircraft("c")])
    assert [entry.icao24 for entry in added] == ["c"]

    clock.advance(seconds=10)
    tracker.record_cycle([_aircraft("c")])
    clock.advance(seconds=10)
    added = tracker.record_cycle([_aircraft("a"), _aircraft("c")])

    # "a" left and came back, so it is a new sighting but not a new daily count
    assert [entry.icao24 for entry in added] == ["a"]
    assert tracker.daily_count == 3
    assert [entry.icao24 for entry in tracker.history] == ["a", "c", "b", "a"]


def test_history_is_capped_newest_first():
    clock = FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))
    store = InMemoryStore()
    tracker = _tracker(store, clock)

    for index in range(25):
        clock.advance(seconds=30)
        tracker.record_cycle([_aircraft(f"icao{index:02d}")])

    history = tracker.history
    assert len(history) == 20
    assert [entry.icao24 for entry in history] == [f"icao{index:02d}" for index in range(24, 4, -1)]
    assert all(a.timestamp > b.timestamp for a, b in zip(history, history[1:]))

    reloaded = _tracker(store, clock)
    assert [entry.icao24 for entry in reloaded.history] == [entry.icao24 for entry in history]


def test_history_snapshots_type_at_insertion():
    clock = FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))
    tracker = _tracker(InMemoryStore(), clock)
    types = {"a": None}

    tracker.record_cycle([_aircraft("a", callsign="AA100")], types.get)
    types["a"] = "2016 AIRBUS A320"

    entry = tracker.history[0]
    assert entry.aircraft_type is None
    assert entry.callsign == "AA100"
    assert entry.route == "Iberia 3170"
    assert entry.id == f"a_{clock.now.timestamp()}"


def test_clear_history_persists():
    store = InMemoryStore()
    clock = FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))
    tracker = _tracker(store, clock)
    tracker.record_cycle([_aircraft("a")])

    tracker.clear_history()

    assert tracker.history == []
    assert _tracker(store, clock).history == []


class CountingStore(InMemoryStore):
    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes: list[str] = []

    def set(self, key: str, value: str) -> None:
        self.writes.append(key)
        super().set(key, value)


def test_unchanged_cycle_writes_nothing():
    store = CountingStore()
    tracker = _tracker(store, FakeClock(datetime(2024, 1, 2, 8, 0)))
    tracker.record_cycle([_aircraft("abc123")])
    store.writes.clear()

    added = tracker.record_cycle([_aircraft("abc123")])

    assert added == []
    assert store.writes == []
    assert tracker.daily_count == 1
