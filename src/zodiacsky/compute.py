"""Host-side glue — location search, geocoding, and local-time-to-UTC conversion.

Nothing here is needed to draw a frame; it only turns what a user types into
the (UTC instant, observer) pair the position model and renderer consume.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

import httpx
from pytz import timezone, utc
from timezonefinder import TimezoneFinder

from zodiacsky.models import Observer

logger = logging.getLogger(__name__)

_PHOTON_URL = "https://photon.komoot.io/api/"
_NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
_USER_AGENT = "ZodiacSky/1.0"

_tf = TimezoneFinder()


class GeocodingError(Exception):
    """Geocoder call failure."""


@dataclass(frozen=True)
class QueryInput:
    """Raw user input. Not yet validated."""

    address: str  # Free-text place name ("Helsinki")
    when: str  # Local wall-clock time, "YYYY-MM-DD HH:MM"


@dataclass(frozen=True)
class Location:
    """A geocoder hit."""

    name: str  # Display name ("Helsinki, Finland")
    lat: float
    lng: float

    @property
    def observer(self) -> Observer:
        return Observer(lat=self.lat, lng=self.lng)


@dataclass(frozen=True)
class ObserverContext:
    """Result of geocoding + timezone conversion. Input to sky computation."""

    observer: Observer
    utc_dt: datetime  # UTC datetime (with tzinfo=utc)
    address_display: str  # Normalized address returned by geocoder (for display)


def _get(client: httpx.Client | None, url: str, params: dict) -> httpx.Response:
    headers = {"User-Agent": _USER_AGENT}
    if client is None:
        resp = httpx.get(url, params=params, headers=headers, timeout=10)
    else:
        resp = client.get(url, params=params, headers=headers)
    resp.raise_for_status()
    return resp


def search_locations(
    query: str, limit: int = 5, client: httpx.Client | None = None
) -> list[Location]:
    """Photon (OpenStreetMap) place search.

    Args:
        query: Free-text place name. Fewer than two characters returns nothing.
        limit: Maximum number of hits.
        client: Optional httpx client.

    Returns:
        Matching locations, best first.
    """
    if not query or len(query.strip()) < 2:
        return []
    params = {"q": query, "limit": limit, "lang": "en"}
    data = _get(client, _PHOTON_URL, params).json()
    results: list[Location] = []
    for feature in data.get("features", []):
        props = feature.get("properties", {})
        lng, lat = feature["geometry"]["coordinates"][:2]
        name = ", ".join(
            p for p in (props.get("name"), props.get("city"), props.get("country")) if p
        )
        results.append(
            Location(name=name or f"{lat:.2f}, {lng:.2f}", lat=float(lat), lng=float(lng))
        )
    return results


def _geocode_nominatim(address: str, client: httpx.Client | None) -> Location | None:
    """Nominatim (OpenStreetMap) geocoder. Returns the first hit or None."""
    params = {"q": address, "format": "json", "limit": 1}
    results = _get(client, _NOMINATIM_URL, params).json()
    if not results:
        return None
    r = results[0]
    return Location(name=r["display_name"], lat=float(r["lat"]), lng=float(r["lon"]))


def geocode_address(address: str, client: httpx.Client | None = None) -> Location:
    """Resolve an address string to a single Location.

    Tries Photon first and falls back to Nominatim.

    Raises:
        GeocodingError: When the address cannot be found.
    """
    try:
        hits = search_locations(address, limit=1, client=client)
    except httpx.HTTPError as e:
        logger.warning("Photon search failed for %r: %s", address, e)
        hits = []
    if hits:
        return hits[0]

    location = _geocode_nominatim(address, client)
    if location is None:
        raise GeocodingError(f"Address not found: {address}")
    return location


def to_utc(when: str, lat: float, lng: float) -> datetime:
    """Interpret a local "YYYY-MM-DD HH:MM" time at (lat, lng) and return it in UTC.

    Raises:
        GeocodingError: If no timezone covers the location.
        ValueError: If `when` is not in the expected format.
    """
    dt = datetime.strptime(when, "%Y-%m-%d %H:%M")
    tz_str = _tf.timezone_at(lat=lat, lng=lng)
    if tz_str is None:
        raise GeocodingError(f"Timezone not found: lat={lat}, lng={lng}")
    local_tz = timezone(tz_str)
    return local_tz.localize(dt, is_dst=None).astimezone(utc)


def run(query: QueryInput, client: httpx.Client | None = None) -> ObserverContext:
    """Top-level entry point: takes a QueryInput and returns an ObserverContext.

    Args:
        query: User input (address, local time string).
        client: Optional httpx client.

    Returns:
        Observer location with the UTC instant.
    """
    location = geocode_address(query.address, client=client)
    utc_dt = to_utc(query.when, location.lat, location.lng)
    logger.debug("Resolved %r to %s at %s", query.address, location, utc_dt)
    return ObserverContext(
        observer=location.observer, utc_dt=utc_dt, address_display=location.name
    )
