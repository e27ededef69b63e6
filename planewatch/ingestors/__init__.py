"""OpenSky data ingestors for PlaneWatch."""

from .credentials import ANONYMOUS, RequestCredentials
from .metadata import MetadataCache, describe_type
from .states import (
    RateLimitedError,
    StatesFetchError,
    StateVectorIngestor,
    decode_row,
    decode_states,
    parse_retry_after,
)

__all__ = [
    "ANONYMOUS",
    "MetadataCache",
    "RateLimitedError",
    "RequestCredentials",
    "StateVectorIngestor",
    "StatesFetchError",
    "decode_row",
    "decode_states",
    "describe_type",
    "parse_retry_after",
]
