"""Route labels derived from airline callsign prefixes."""

from __future__ import annotations

from typing import Optional

AIRLINE_NAMES: dict[str, str] = {
    "AA": "American",
    "UA": "United",
    "DL": "Delta",
    "IB": "Iberia",
    "AF": "Air France",
    "LH": "Lufthansa",
    "BA": "British Airways",
    "KL": "KLM",
    "VY": "Vueling",
    "UX": "Air Europa",
    "FR": "Ryanair",
    "EK": "Emirates",
    "QR": "Qatar Airways",
    "TK": "Turkish Airlines",
}


def resolve_route(callsign: str) -> Optional[str]:
    """Return ``"<airline> <flight number>"`` for known two-letter prefixes."""

    trimmed = callsign.strip()
    if len(trimmed) < 4:
        return None

    airline = AIRLINE_NAMES.get(trimmed[:2])
    if airline is None:
        return None
    return f"{airline} {trimmed[2:]}"


__all__ = ["AIRLINE_NAMES", "resolve_route"]
