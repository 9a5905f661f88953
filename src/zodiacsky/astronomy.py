"""Astronomical position model — mean-element Sun, Moon, planets, and special points.

Accuracy is coarse: about 0.01° for the Sun near J2000, and only
"right constellation" quality for the Moon and planets. Zodiac membership uses
IAU constellation boundaries projected onto the ecliptic; the tropical sign is
a plain calendar lookup.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

from zodiacsky.models import (
    ConstellationName,
    EclipticPoint,
    EquatorialPosition,
    HorizonPosition,
    MoonState,
    Observer,
    SkyState,
    SunState,
    TropicalSign,
    ZodiacInterval,
)
from zodiacsky.timeutil import (
    as_utc,
    days_since_j2000,
    ecliptic_to_equatorial,
    mean_obliquity,
    normalize_degrees,
    to_deg,
    to_rad,
)

SYNODIC_MONTH = 29.53058867  # days, new moon to new moon
DRACONIC_MONTH = 27.212221  # days, node to node
MOON_DAILY_MOTION = 12.19  # degrees/day relative to the Sun
MOON_MAX_DEC = 5.145  # degrees
REFERENCE_NEW_MOON = datetime(2000, 1, 6, 18, 14, tzinfo=timezone.utc)


@dataclass(frozen=True)
class OrbitalElements:
    """Circular heliocentric orbit."""

    semi_major_axis: float  # AU
    mean_longitude: float  # Degrees at J2000.0
    period: float  # Days

    def heliocentric_longitude(self, n: float) -> float:
        return normalize_degrees(self.mean_longitude + (360.0 / self.period) * n)


EARTH = OrbitalElements(1.00000, 100.46435, 365.256)

PLANETS: dict[str, OrbitalElements] = {
    "mercury": OrbitalElements(0.38710, 252.25084, 87.969),
    "venus": OrbitalElements(0.72333, 181.97973, 224.701),
    "mars": OrbitalElements(1.52368, 355.45332, 686.980),
    "jupiter": OrbitalElements(5.20260, 34.40438, 4332.589),
    "saturn": OrbitalElements(9.55491, 49.94432, 10759.22),
    "uranus": OrbitalElements(19.21845, 313.23218, 30685.4),
    "neptune": OrbitalElements(30.11039, 304.88003, 60189.0),
}

# (longitude at J2000, degrees/day). The mean node regresses.
SPECIAL_POINTS: dict[str, tuple[float, float]] = {
    "north_node": (125.04, -0.05295),
    "lilith": (45.0, 360.0 / 3232.6),
    "chiron": (120.5, 0.01945),
}

# Checked in order. Pisces straddles 0°.
ZODIAC_BOUNDARIES: tuple[ZodiacInterval, ...] = (
    ZodiacInterval("Cap", 300.0, 327.0),
    ZodiacInterval("Aqr", 327.0, 351.6),
    ZodiacInterval("Psc", 351.6, 360.0),
    ZodiacInterval("Psc", 0.0, 29.0),
    ZodiacInterval("Ari", 29.0, 53.5),
    ZodiacInterval("Tau", 53.5, 90.4),
    ZodiacInterval("Gem", 90.4, 118.1),
    ZodiacInterval("Cnc", 118.1, 138.1),
    ZodiacInterval("Leo", 138.1, 174.1),
    ZodiacInterval("Vir", 174.1, 217.8),
    ZodiacInterval("Lib", 217.8, 241.0),
    ZodiacInterval("Sco", 241.0, 247.7),
    ZodiacInterval("Oph", 247.7, 266.3),
    ZodiacInterval("Sgr", 266.3, 300.0),
)

CONSTELLATION_NAMES: dict[str, ConstellationName] = {
    "Cap": ConstellationName("Capricornus", "♑", "Capricorn"),
    "Aqr": ConstellationName("Aquarius", "♒", "Aquarius"),
    "Psc": ConstellationName("Pisces", "♓", "Pisces"),
    "Ari": ConstellationName("Aries", "♈", "Aries"),
    "Tau": ConstellationName("Taurus", "♉", "Taurus"),
    "Gem": ConstellationName("Gemini", "♊", "Gemini"),
    "Cnc": ConstellationName("Cancer", "♋", "Cancer"),
    "Leo": ConstellationName("Leo", "♌", "Leo"),
    "Vir": ConstellationName("Virgo", "♍", "Virgo"),
    "Lib": ConstellationName("Libra", "♎", "Libra"),
    "Sco": ConstellationName("Scorpius", "♏", "Scorpio"),
    "Oph": ConstellationName("Ophiuchus", "⛎", "Ophiuchus"),
    "Sgr": ConstellationName("Sagittarius", "♐", "Sagittarius"),
}

TROPICAL_SIGNS: tuple[TropicalSign, ...] = (
    TropicalSign("Capricorn", "♑", (12, 22), (1, 19)),
    TropicalSign("Aquarius", "♒", (1, 20), (2, 18)),
    TropicalSign("Pisces", "♓", (2, 19), (3, 20)),
    TropicalSign("Aries", "♈", (3, 21), (4, 19)),
    TropicalSign("Taurus", "♉", (4, 20), (5, 20)),
    TropicalSign("Gemini", "♊", (5, 21), (6, 20)),
    TropicalSign("Cancer", "♋", (6, 21), (7, 22)),
    TropicalSign("Leo", "♌", (7, 23), (8, 22)),
    TropicalSign("Virgo", "♍", (8, 23), (9, 22)),
    TropicalSign("Libra", "♎", (9, 23), (10, 22)),
    TropicalSign("Scorpio", "♏", (10, 23), (11, 21)),
    TropicalSign("Sagittarius", "♐", (11, 22), (12, 21)),
)


class PositionModel(Protocol):
    """Anything that can place the Sun, Moon, and planets for an instant."""

    def sun(self, when: datetime) -> SunState: ...

    def moon(self, when: datetime) -> MoonState: ...

    def planet(self, planet: str, when: datetime) -> EquatorialPosition: ...


def _ecliptic_point(lon: float, n: float) -> EclipticPoint:
    lon = normalize_degrees(lon)
    ra, dec = ecliptic_to_equatorial(lon, 0.0, mean_obliquity(n))
    return EclipticPoint(ra=ra, dec=dec, ecliptic_longitude=lon)


def sun_position(when: datetime) -> SunState:
    """Sun position from the low-order solar theory (two-harmonic equation of centre).

    Args:
        when: Instant (naive values are taken as UTC).

    Returns:
        SunState with RA, declination, and ecliptic longitude in degrees.
    """
    n = days_since_j2000(when)
    mean_lon = normalize_degrees(280.460 + 0.9856474 * n)
    g = to_rad(normalize_degrees(357.528 + 0.9856003 * n))
    lon = normalize_degrees(mean_lon + 1.915 * math.sin(g) + 0.020 * math.sin(2 * g))
    ra, dec = ecliptic_to_equatorial(lon, 0.0, mean_obliquity(n))
    return SunState(ra=ra, dec=dec, ecliptic_longitude=lon)


def moon_phase(when: datetime) -> float:
    """Fraction of the synodic month elapsed since the reference new moon, in [0, 1)."""
    elapsed = (as_utc(when) - REFERENCE_NEW_MOON) / timedelta(days=1)
    phase = (elapsed % SYNODIC_MONTH) / SYNODIC_MONTH
    return 0.0 if phase >= 1.0 else phase


def moon_position(when: datetime, sun: SunState | None = None) -> MoonState:
    """Coarse Moon: RA offset from the Sun by the elapsed synodic fraction.

    The Moon sits on the Sun at new moon and opposite it at full. Declination
    swings ±5.145° over the draconic month, independently of RA.
    """
    sun = sun or sun_position(when)
    n = days_since_j2000(when)
    phase = moon_phase(when)
    ra = normalize_degrees(sun.ra + phase * SYNODIC_MONTH * MOON_DAILY_MOTION)
    dec = MOON_MAX_DEC * math.sin(2 * math.pi * n / DRACONIC_MONTH)
    return MoonState(ra=ra, dec=dec, phase=phase)


def geocentric_longitude(elements: OrbitalElements, n: float) -> float:
    """Ecliptic longitude of a body as seen from Earth, both on circular orbits."""
    lon = to_rad(elements.heliocentric_longitude(n))
    earth_lon = to_rad(EARTH.heliocentric_longitude(n))
    dx = elements.semi_major_axis * math.cos(lon) - EARTH.semi_major_axis * math.cos(
        earth_lon
    )
    dy = elements.semi_major_axis * math.sin(lon) - EARTH.semi_major_axis * math.sin(
        earth_lon
    )
    return normalize_degrees(to_deg(math.atan2(dy, dx)))


def planet_position(planet: str, when: datetime) -> EclipticPoint:
    """Planet position from the circular two-body model.

    Raises:
        ValueError: If `planet` is not one of PLANETS.
    """
    elements = PLANETS.get(planet)
    if elements is None:
        raise ValueError(f"Unknown planet: {planet}")
    n = days_since_j2000(when)
    return _ecliptic_point(geocentric_longitude(elements, n), n)


def special_point(point: str, when: datetime) -> EclipticPoint:
    """Mean-element position of the lunar node, Lilith, or Chiron.

    Raises:
        ValueError: If `point` is not one of SPECIAL_POINTS.
    """
    if point not in SPECIAL_POINTS:
        raise ValueError(f"Unknown special point: {point}")
    epoch_lon, rate = SPECIAL_POINTS[point]
    n = days_since_j2000(when)
    return _ecliptic_point(epoch_lon + rate * n, n)


def special_points(when: datetime) -> dict[str, EclipticPoint]:
    return {key: special_point(key, when) for key in SPECIAL_POINTS}


class MeanElementModel:
    """Default position model built from the formulas in this module."""

    def sun(self, when: datetime) -> SunState:
        return sun_position(when)

    def moon(self, when: datetime) -> MoonState:
        return moon_position(when)

    def planet(self, planet: str, when: datetime) -> EquatorialPosition:
        return planet_position(planet, when)


def zodiac_constellation(ecliptic_longitude: float) -> str:
    """Return the IAU code of the zodiac constellation containing a longitude."""
    for interval in ZODIAC_BOUNDARIES:
        if interval.start <= ecliptic_longitude < interval.end:
            return interval.id
    return ZODIAC_BOUNDARIES[-1].id


def tropical_sign(month: int, day: int) -> TropicalSign:
    """Traditional calendar sign for a (month, day)."""
    for sign in TROPICAL_SIGNS:
        (from_m, from_d), (to_m, to_d) = sign.start, sign.end
        if from_m > to_m:
            # Wraps over the year boundary (Capricorn: Dec 22 - Jan 19)
            if (
                (month == from_m and day >= from_d)
                or (month == to_m and day <= to_d)
                or month > from_m
                or month < to_m
            ):
                return sign
        elif (
            (month == from_m and day >= from_d)
            or (month == to_m and day <= to_d)
            or from_m < month < to_m
        ):
            return sign
    return TROPICAL_SIGNS[11]


def solar_altaz(when: datetime, lat: float, lng: float) -> HorizonPosition:
    """Approximate solar altitude/azimuth for an observer.

    Uses a single-sine solar declination, not the equation-of-centre Sun of
    sun_position(); good enough to fade the horizon in and out.
    """
    when = as_utc(when)
    n = days_since_j2000(when)
    dec = 23.45 * math.sin(to_rad(normalize_degrees((360 / 365) * (n % 365 + 10))))

    utc_hours = when.hour + when.minute / 60 + when.second / 3600
    hour_angle = (utc_hours + lng / 15 - 12) * 15

    lat_r, dec_r, ha_r = to_rad(lat), to_rad(dec), to_rad(hour_angle)
    sin_alt = math.sin(lat_r) * math.sin(dec_r) + math.cos(lat_r) * math.cos(
        dec_r
    ) * math.cos(ha_r)
    altitude = to_deg(math.asin(max(-1.0, min(1.0, sin_alt))))

    cos_alt = math.cos(to_rad(altitude))
    azimuth = 0.0
    if cos_alt > 0.001:
        sin_az = math.cos(dec_r) * math.sin(ha_r) / cos_alt
        cos_az = (math.sin(dec_r) - math.sin(lat_r) * sin_alt) / (
            math.cos(lat_r) * cos_alt
        )
        azimuth = normalize_degrees(to_deg(math.atan2(sin_az, cos_az)))
    return HorizonPosition(altitude=altitude, azimuth=azimuth)


def compute_sky(
    when: datetime,
    observer: Observer | None = None,
    model: PositionModel | None = None,
) -> SkyState:
    """Resolve every body for one instant.

    Args:
        when: Instant (naive values are taken as UTC).
        observer: Optional observer; enables the horizon position.
        model: Sun/Moon/planet provider. Defaults to MeanElementModel.

    Returns:
        SkyState ready for the renderers.
    """
    when = as_utc(when)
    model = model or MeanElementModel()
    sun = model.sun(when)
    horizon = (
        solar_altaz(when, observer.lat, observer.lng) if observer is not None else None
    )
    return SkyState(
        when=when,
        sun=sun,
        constellation=zodiac_constellation(sun.ecliptic_longitude),
        tropical=tropical_sign(when.month, when.day),
        moon=model.moon(when),
        planets={key: model.planet(key, when) for key in PLANETS},
        specials=special_points(when),
        horizon=horizon,
    )
