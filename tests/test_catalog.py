import json
import logging

import httpx
import pytest

from zodiacsky.catalog import (
    CONSTELLATIONS_URL,
    STARS_URL,
    fetch_catalogs,
    load_catalogs,
    parse_constellations,
    parse_stars,
)
from zodiacsky.config import Settings

STARS_GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "id": 1,
            "properties": {"mag": 1.25, "bv": "-0.1"},
            "geometry": {"type": "Point", "coordinates": [-170.0, 12.0]},
        },
        {
            "type": "Feature",
            "id": 2,
            "properties": {"mag": 4.8, "bv": ""},
            "geometry": {"type": "Point", "coordinates": [45.5, -20.0]},
        },
        {
            "type": "Feature",
            "id": 3,
            "properties": {"mag": 2.0, "bv": 0.4},
            "geometry": {"type": "Point", "coordinates": [100.0, 75.0]},
        },
    ],
}

CONSTELLATIONS_GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "id": "Leo",
            "geometry": {
                "type": "MultiLineString",
                "coordinates": [[[-160.0, 12.0], [-150.0, 20.0]]],
            },
        },
        {
            "type": "Feature",
            "id": "UMa",
            "geometry": {
                "type": "MultiLineString",
                "coordinates": [[[165.0, 56.0], [178.0, 53.0]]],
            },
        },
    ],
}


def test_parse_stars():
    stars = parse_stars(STARS_GEOJSON)
    assert len(stars) == 3
    assert stars[0].ra == pytest.approx(190.0)
    assert stars[0].color_index == pytest.approx(-0.1)
    assert stars[1].color_index == 0.0
    assert stars[1].magnitude == pytest.approx(4.8)
    assert stars[2].color_index == pytest.approx(0.4)


def test_parse_stars_rejects_missing_magnitude():
    bad = {"features": [{"id": 9, "properties": {}, "geometry": {"coordinates": [1, 2]}}]}
    with pytest.raises(ValueError):
        parse_stars(bad)


def test_parse_constellations():
    (leo, uma) = parse_constellations(CONSTELLATIONS_GEOJSON)
    assert leo.id == "Leo"
    assert leo.lines == (((200.0, 12.0), (210.0, 20.0)),)
    assert uma.id == "UMa"


def test_parse_constellations_id_from_properties():
    geojson = {
        "features": [
            {"properties": {"id": "Vir"}, "geometry": {"coordinates": [[[10, 0], [11, 1]]]}}
        ]
    }
    (vir,) = parse_constellations(geojson)
    assert vir.id == "Vir"


def test_load_catalogs_missing_files(tmp_path, caplog):
    settings = Settings(resources_dir=tmp_path)
    with caplog.at_level(logging.WARNING, logger="zodiacsky.catalog"):
        stars, constellations = load_catalogs(settings)
    assert stars == ()
    assert constellations == ()
    assert "Star catalog not found" in caplog.text
    assert "Constellation catalog not found" in caplog.text


def test_load_catalogs(tmp_path):
    settings = Settings(resources_dir=tmp_path)
    settings.stars_path.write_text(json.dumps(STARS_GEOJSON), encoding="utf-8")
    settings.constellations_path.write_text(
        json.dumps(CONSTELLATIONS_GEOJSON), encoding="utf-8"
    )
    stars, constellations = load_catalogs(settings)
    assert len(stars) == 3
    assert [c.id for c in constellations] == ["Leo", "UMa"]


def _catalog_transport(requests: list[str]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(str(request.url))
        if str(request.url) == STARS_URL:
            return httpx.Response(200, json=STARS_GEOJSON)
        if str(request.url) == CONSTELLATIONS_URL:
            return httpx.Response(200, json=CONSTELLATIONS_GEOJSON)
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def test_fetch_catalogs_filters(tmp_path):
    requests: list[str] = []
    with httpx.Client(transport=_catalog_transport(requests)) as client:
        stars_path, constellations_path = fetch_catalogs(
            tmp_path / "resources", client=client
        )

    assert requests == [STARS_URL, CONSTELLATIONS_URL]
    stars = json.loads(stars_path.read_text(encoding="utf-8"))
    assert [f["id"] for f in stars["features"]] == [1, 2]
    zodiac = json.loads(constellations_path.read_text(encoding="utf-8"))
    assert [f["id"] for f in zodiac["features"]] == ["Leo"]

    loaded_stars, loaded_constellations = load_catalogs(
        Settings(resources_dir=tmp_path / "resources")
    )
    assert len(loaded_stars) == 2
    assert loaded_constellations[0].id == "Leo"


def test_fetch_catalogs_http_error(tmp_path):
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    with httpx.Client(transport=transport) as client:
        with pytest.raises(httpx.HTTPStatusError):
            fetch_catalogs(tmp_path, client=client)
    assert list(tmp_path.iterdir()) == []
