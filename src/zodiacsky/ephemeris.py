"""skyfield-backed position model with the same interface as astronomy.MeanElementModel.

Needs a JPL kernel (de421.bsp by default) in the resources directory; the
Loader downloads it on first use if it is missing and the network allows.
"""

import logging
from datetime import datetime
from pathlib import Path

from skyfield import almanac
from skyfield.api import Loader
from skyfield.framelib import ecliptic_frame

from zodiacsky.astronomy import MeanElementModel, PositionModel
from zodiacsky.config import Settings
from zodiacsky.models import EclipticPoint, MoonState, SunState
from zodiacsky.timeutil import (
    as_utc,
    days_since_j2000,
    ecliptic_to_equatorial,
    mean_obliquity,
    normalize_degrees,
)

logger = logging.getLogger(__name__)

# Outer planets only have barycentre segments in the de4xx kernels.
_TARGETS: dict[str, str] = {
    "mercury": "mercury",
    "venus": "venus",
    "mars": "mars",
    "jupiter": "jupiter barycenter",
    "saturn": "saturn barycenter",
    "uranus": "uranus barycenter",
    "neptune": "neptune barycenter",
}


class SkyfieldEphemeris:
    """Sun, Moon, and planets from a JPL ephemeris."""

    def __init__(self, resources_dir: Path, ephemeris_file: str = "de421.bsp"):
        self._loader = Loader(str(resources_dir))
        logger.info("Loading ephemeris %s from %s", ephemeris_file, resources_dir)
        self._eph = self._loader(ephemeris_file)
        self._earth = self._eph["earth"]
        self._ts = self._loader.timescale()

    def _ecliptic(self, target: str, when: datetime) -> tuple[float, float]:
        t = self._ts.from_datetime(as_utc(when))
        astrometric = self._earth.at(t).observe(self._eph[target])
        lat, lon, _ = astrometric.frame_latlon(ecliptic_frame)
        return normalize_degrees(lon.degrees), lat.degrees

    def _point(self, target: str, when: datetime) -> EclipticPoint:
        lon, lat = self._ecliptic(target, when)
        ra, dec = ecliptic_to_equatorial(lon, lat, mean_obliquity(days_since_j2000(when)))
        return EclipticPoint(ra=ra, dec=dec, ecliptic_longitude=lon)

    def sun(self, when: datetime) -> SunState:
        lon, _ = self._ecliptic("sun", when)
        ra, dec = ecliptic_to_equatorial(lon, 0.0, mean_obliquity(days_since_j2000(when)))
        return SunState(ra=ra, dec=dec, ecliptic_longitude=lon)

    def moon(self, when: datetime) -> MoonState:
        point = self._point("moon", when)
        t = self._ts.from_datetime(as_utc(when))
        # Moon-Sun elongation in ecliptic longitude: 0° new, 180° full
        phase = normalize_degrees(almanac.moon_phase(self._eph, t).degrees) / 360.0
        return MoonState(ra=point.ra, dec=point.dec, phase=phase)

    def planet(self, planet: str, when: datetime) -> EclipticPoint:
        target = _TARGETS.get(planet)
        if target is None:
            raise ValueError(f"Unknown planet: {planet}")
        return self._point(target, when)


def position_model(settings: Settings) -> PositionModel:
    """Pick the position model named by ``settings.ephemeris``.

    Raises:
        ValueError: For an unknown model name.
    """
    if settings.ephemeris == "mean":
        return MeanElementModel()
    if settings.ephemeris == "skyfield":
        return SkyfieldEphemeris(settings.resources_dir, settings.ephemeris_file)
    raise ValueError(f"Unknown ephemeris: {settings.ephemeris}")
