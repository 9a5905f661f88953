"""Star and constellation catalogs: d3-celestial GeoJSON loading and the offline filter step."""

import json
import logging
from pathlib import Path
from typing import Any

import httpx

from zodiacsky.astronomy import CONSTELLATION_NAMES
from zodiacsky.config import Settings
from zodiacsky.models import ConstellationRecord, Star
from zodiacsky.timeutil import normalize_degrees

logger = logging.getLogger(__name__)

STARS_URL = "https://raw.githubusercontent.com/ofrohn/d3-celestial/master/data/stars.6.json"
CONSTELLATIONS_URL = (
    "https://raw.githubusercontent.com/ofrohn/d3-celestial/master/data/"
    "constellations.lines.json"
)

# Ecliptic is tilted 23.4° to the equator; ±30° around it is roughly dec ±53°.
DEC_MIN = -53.0
DEC_MAX = 53.0


def _as_float(value: Any, default: float = 0.0) -> float:
    """d3-celestial stores some numbers as strings, occasionally blank."""
    if value is None or value == "":
        return default
    return float(value)


def parse_stars(geojson: dict) -> tuple[Star, ...]:
    """Parse a star FeatureCollection into Star records.

    RA is stored in [-180, 180] and normalised to [0, 360) here.

    Raises:
        ValueError: On a feature without coordinates or magnitude.
    """
    stars: list[Star] = []
    for feature in geojson.get("features", []):
        coords = (feature.get("geometry") or {}).get("coordinates")
        props = feature.get("properties") or {}
        if not coords or len(coords) < 2 or props.get("mag") is None:
            raise ValueError(f"Invalid star feature: {feature.get('id')!r}")
        stars.append(
            Star(
                ra=normalize_degrees(float(coords[0])),
                dec=float(coords[1]),
                magnitude=float(props["mag"]),
                color_index=_as_float(props.get("bv")),
            )
        )
    return tuple(stars)


def parse_constellations(geojson: dict) -> tuple[ConstellationRecord, ...]:
    """Parse a MultiLineString FeatureCollection into ConstellationRecords."""
    records: list[ConstellationRecord] = []
    for feature in geojson.get("features", []):
        cid = feature.get("id") or (feature.get("properties") or {}).get("id")
        if not cid:
            raise ValueError("Constellation feature without id")
        lines = tuple(
            tuple((normalize_degrees(float(v[0])), float(v[1])) for v in line)
            for line in (feature.get("geometry") or {}).get("coordinates", [])
        )
        records.append(ConstellationRecord(id=cid, lines=lines))
    return tuple(records)


def load_stars(path: Path) -> tuple[Star, ...]:
    with path.open(encoding="utf-8") as f:
        return parse_stars(json.load(f))


def load_constellations(path: Path) -> tuple[ConstellationRecord, ...]:
    with path.open(encoding="utf-8") as f:
        return parse_constellations(json.load(f))


def load_catalogs(
    settings: Settings,
) -> tuple[tuple[Star, ...], tuple[ConstellationRecord, ...]]:
    """Load both catalogs. A missing file yields an empty group, so its layer is skipped."""
    stars: tuple[Star, ...] = ()
    constellations: tuple[ConstellationRecord, ...] = ()
    if settings.stars_path.exists():
        stars = load_stars(settings.stars_path)
    else:
        logger.warning("Star catalog not found: %s", settings.stars_path)
    if settings.constellations_path.exists():
        constellations = load_constellations(settings.constellations_path)
    else:
        logger.warning(
            "Constellation catalog not found: %s", settings.constellations_path
        )
    logger.info(
        "Loaded %d stars, %d constellations", len(stars), len(constellations)
    )
    return stars, constellations


def filter_star_features(geojson: dict) -> dict:
    """Keep stars whose declination lies within the ecliptic band."""
    features = [
        f
        for f in geojson.get("features", [])
        if DEC_MIN <= f["geometry"]["coordinates"][1] <= DEC_MAX
    ]
    return {**geojson, "features": features}


def filter_zodiac_features(geojson: dict) -> dict:
    """Keep only the 13 zodiac constellations."""
    features = [f for f in geojson.get("features", []) if f.get("id") in CONSTELLATION_NAMES]
    return {**geojson, "features": features}


def fetch_catalogs(
    out_dir: Path,
    settings: Settings | None = None,
    client: httpx.Client | None = None,
) -> tuple[Path, Path]:
    """Download the d3-celestial data, filter it, and write the two catalog files.

    Args:
        out_dir: Destination directory (created if missing).
        settings: Supplies the output file names.
        client: Optional httpx client (tests pass one with a mock transport).

    Returns:
        (stars_path, constellations_path) that were written.

    Raises:
        httpx.HTTPStatusError: If a download fails.
    """
    settings = settings or Settings()
    own_client = client is None
    client = client or httpx.Client(timeout=30, follow_redirects=True)
    try:
        logger.info("Downloading %s", STARS_URL)
        resp = client.get(STARS_URL)
        resp.raise_for_status()
        stars_raw = resp.json()
        stars = filter_star_features(stars_raw)
        logger.info(
            "Stars: %d total, %d within dec %.0f..%.0f",
            len(stars_raw.get("features", [])),
            len(stars["features"]),
            DEC_MIN,
            DEC_MAX,
        )

        logger.info("Downloading %s", CONSTELLATIONS_URL)
        resp = client.get(CONSTELLATIONS_URL)
        resp.raise_for_status()
        zodiac = filter_zodiac_features(resp.json())
        logger.info(
            "Zodiac constellations kept: %s",
            ", ".join(f["id"] for f in zodiac["features"]),
        )
    finally:
        if own_client:
            client.close()

    out_dir.mkdir(parents=True, exist_ok=True)
    stars_path = out_dir / settings.stars_file
    constellations_path = out_dir / settings.constellations_file
    stars_path.write_text(json.dumps(stars), encoding="utf-8")
    constellations_path.write_text(json.dumps(zodiac), encoding="utf-8")
    return stars_path, constellations_path
