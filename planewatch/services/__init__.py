"""Service-layer components for PlaneWatch."""

from .auth import AuthTokenManager, TokenState
from .location import LocationProvider, StaticLocationProvider
from .persistence import InMemoryStore, JsonFileStore, KeyValueStore, PersistenceAdapter
from .poller import Poller, PollState, RateLimitState
from .stats import HISTORY_LIMIT, StatsTracker

__all__ = [
    "AuthTokenManager",
    "HISTORY_LIMIT",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "LocationProvider",
    "PersistenceAdapter",
    "PollState",
    "Poller",
    "RateLimitState",
    "StaticLocationProvider",
    "StatsTracker",
    "TokenState",
]
