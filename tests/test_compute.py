from datetime import datetime, timezone

import httpx
import pytest

from zodiacsky.compute import (
    GeocodingError,
    Location,
    QueryInput,
    geocode_address,
    run,
    search_locations,
    to_utc,
)
from zodiacsky.models import Observer

PHOTON_HELSINKI = {
    "features": [
        {
            "geometry": {"coordinates": [24.9384, 60.1699]},
            "properties": {"name": "Helsinki", "country": "Finland"},
        }
    ]
}

NOMINATIM_BUSAN = [
    {"display_name": "Busan, South Korea", "lat": "35.1796", "lon": "129.0756"}
]


def _client(photon, nominatim=None, calls=None) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request.url.host)
        assert request.headers["User-Agent"].startswith("ZodiacSky")
        if request.url.host == "photon.komoot.io":
            return photon
        if request.url.host == "nominatim.openstreetmap.org":
            return nominatim or httpx.Response(200, json=[])
        return httpx.Response(404)

    return httpx.Client(transport=httpx.MockTransport(handler))


def test_short_query_makes_no_request():
    calls: list[str] = []
    client = _client(httpx.Response(500), calls=calls)
    assert search_locations("", client=client) == []
    assert search_locations(" a ", client=client) == []
    assert calls == []


def test_search_locations():
    client = _client(httpx.Response(200, json=PHOTON_HELSINKI))
    (hit,) = search_locations("Helsinki", client=client)
    assert hit == Location(name="Helsinki, Finland", lat=60.1699, lng=24.9384)
    assert hit.observer == Observer(lat=60.1699, lng=24.9384)


def test_search_locations_unnamed_hit():
    photon = {"features": [{"geometry": {"coordinates": [10.0, 20.0]}, "properties": {}}]}
    (hit,) = search_locations("somewhere", client=_client(httpx.Response(200, json=photon)))
    assert hit.name == "20.00, 10.00"


@pytest.mark.parametrize(
    "photon",
    [httpx.Response(200, json={"features": []}), httpx.Response(500)],
)
def test_geocode_falls_back_to_nominatim(photon):
    calls: list[str] = []
    client = _client(photon, httpx.Response(200, json=NOMINATIM_BUSAN), calls)
    location = geocode_address("Busan", client=client)
    assert location.name == "Busan, South Korea"
    assert location.lat == pytest.approx(35.1796)
    assert calls == ["photon.komoot.io", "nominatim.openstreetmap.org"]


def test_geocode_not_found():
    client = _client(httpx.Response(200, json={"features": []}))
    with pytest.raises(GeocodingError):
        geocode_address("Nowhere at all", client=client)


def test_to_utc_helsinki_winter():
    assert to_utc("2024-01-15 12:00", 60.17, 24.94) == datetime(
        2024, 1, 15, 10, 0, tzinfo=timezone.utc
    )


def test_to_utc_helsinki_summer():
    assert to_utc("2024-07-15 12:00", 60.17, 24.94) == datetime(
        2024, 7, 15, 9, 0, tzinfo=timezone.utc
    )


def test_to_utc_bad_format():
    with pytest.raises(ValueError):
        to_utc("15/01/2024 12:00", 60.17, 24.94)


def test_run():
    client = _client(httpx.Response(200, json=PHOTON_HELSINKI))
    context = run(QueryInput(address="Helsinki", when="2024-01-15 12:00"), client=client)
    assert context.address_display == "Helsinki, Finland"
    assert context.observer == Observer(lat=60.1699, lng=24.9384)
    assert context.utc_dt == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
