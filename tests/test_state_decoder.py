import httpx
import pytest

from planewatch.domain.geo import bounding_box
from planewatch.ingestors.credentials import RequestCredentials
from planewatch.ingestors.states import (
    RateLimitedError,
    StatesFetchError,
    StateVectorIngestor,
    as_float,
    decode_row,
    decode_states,
    parse_retry_after,
)
from planewatch.models.geo import Coordinates


def _row(**overrides):
    row = [
        "3c6444",  # icao24
        "DLH9LF  ",  # callsign with trailing space
        "Germany",
        1714765198,  # time_position
        1714765200,  # last_contact
        -3.70,  # longitude
        40.42,  # latitude
        3657.6,  # baro_altitude meters
        False,  # on_ground
        164.6,  # velocity m/s
        90.0,  # true_track
        2.0,  # vertical_rate
        None,  # sensors
        3700.0,  # geo_altitude
        "7000",  # squawk
        False,  # spi
        0,  # position_source
    ]
    positions = {"icao24": 0, "callsign": 1, "lon": 5, "lat": 6, "altitude": 7, "velocity": 9}
    for key, value in overrides.items():
        row[positions[key]] = value
    return row


def test_decode_row_parses_fields():
    state = decode_row(_row())

    assert state is not None
    assert state.icao24 == "3c6444"
    assert state.callsign == "DLH9LF"
    assert state.longitude == -3.70
    assert state.latitude == 40.42
    assert state.altitude == 3657.6
    assert state.velocity == 164.6


def test_decode_row_coerces_integer_coordinates():
    state = decode_row(_row(lon=-3, lat=40))

    assert state is not None
    assert isinstance(state.longitude, float)
    assert state.latitude == 40.0


def test_decode_row_defaults_missing_numbers():
    state = decode_row(_row(callsign=None, altitude=None, velocity=None))

    assert state is not None
    assert state.callsign == ""
    assert state.altitude == 0.0
    assert state.velocity == 0.0


@pytest.mark.parametrize(
    "row",
    [
        _row()[:8],
        _row()[:9],
        _row(lat=float("nan")),
        _row(lon=float("nan")),
        _row(icao24=None),
        _row(icao24=12345),
        _row(lat=None),
        _row(lon="-3.70"),
        "not a row",
        None,
    ],
)
def test_decode_row_drops_invalid_rows(row):
    assert decode_row(row) is None


def test_decode_row_accepts_exactly_ten_columns():
    assert decode_row(_row()[:10]) is not None


def test_booleans_are_not_numbers():
    assert as_float(True) is None
    assert as_float(3) == 3.0


def test_decode_states_skips_bad_rows_without_failing_batch():
    payload = {"time": 1, "states": [_row(), _row()[:8], _row(icao24="abc123", lat=float("nan"))]}

    states = decode_states(payload)

    assert [state.icao24 for state in states] == ["3c6444"]


def test_decode_states_handles_null_states():
    assert decode_states({"time": 1, "states": None}) == []


def test_decode_states_rejects_non_object():
    with pytest.raises(StatesFetchError):
        decode_states(["states"])


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("999999", 86400),
        ("120", 120),
        (" 30 ", 30),
        ("-5", 0),
        ("0", 0),
        (None, 900),
        ("soon", 900),
        ("12.5", 900),
    ],
)
def test_parse_retry_after(raw, expected):
    assert parse_retry_after(raw) == expected


BOX = bounding_box(Coordinates(latitude=40.417, longitude=-3.704), 3.0)


@pytest.mark.anyio
async def test_fetch_states_sends_bounding_box_and_bearer_token():
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request):
        captured.append(request)
        return httpx.Response(200, json={"time": 1, "states": [_row()]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        ingestor = StateVectorIngestor(http_client=client, base_url="https://example.test/api/states/all")
        states = await ingestor.fetch_states(BOX, RequestCredentials(bearer_token="tok"))

    assert len(states) == 1
    request = captured[0]
    assert float(request.url.params["lamin"]) == pytest.approx(BOX.min_lat)
    assert float(request.url.params["lomax"]) == pytest.approx(BOX.max_lon)
    assert request.headers["Authorization"] == "Bearer tok"


@pytest.mark.anyio
async def test_fetch_states_uses_basic_auth():
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request):
        captured.append(request)
        return httpx.Response(200, json={"states": []})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        ingestor = StateVectorIngestor(http_client=client)
        await ingestor.fetch_states(BOX, RequestCredentials(username="user", password="pass"))

    assert captured[0].headers["Authorization"] == "Basic dXNlcjpwYXNz"


@pytest.mark.anyio
async def test_fetch_states_anonymous_has_no_auth_header():
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request):
        captured.append(request)
        return httpx.Response(200, json={"states": []})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        await StateVectorIngestor(http_client=client).fetch_states(BOX)

    assert "Authorization" not in captured[0].headers


@pytest.mark.anyio
async def test_fetch_states_rate_limited():
    def handler(request: httpx.Request):
        return httpx.Response(
            429, headers={"x-rate-limit-retry-after-seconds": "999999"}, text="slow down"
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(RateLimitedError) as excinfo:
            await StateVectorIngestor(http_client=client).fetch_states(BOX)

    assert excinfo.value.retry_after == 86400


@pytest.mark.anyio
async def test_fetch_states_error_response():
    def handler(request: httpx.Request):
        return httpx.Response(503, text="unavailable")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(StatesFetchError):
            await StateVectorIngestor(http_client=client).fetch_states(BOX)


@pytest.mark.anyio
async def test_fetch_states_transport_error():
    def handler(request: httpx.Request):
        raise httpx.ConnectError("no route to host")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(StatesFetchError):
            await StateVectorIngestor(http_client=client).fetch_states(BOX)


@pytest.mark.anyio
async def test_fetch_states_malformed_json():
    def handler(request: httpx.Request):
        return httpx.Response(200, text="<html>oops</html>")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(StatesFetchError):
            await StateVectorIngestor(http_client=client).fetch_states(BOX)
