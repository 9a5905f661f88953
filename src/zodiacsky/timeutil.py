"""Time and reference-frame helpers shared by the position model and projection."""

import math
from datetime import datetime, timezone

J2000 = datetime(2000, 1, 1, 12, 0, tzinfo=timezone.utc)
SECONDS_PER_DAY = 86400.0


def as_utc(when: datetime) -> datetime:
    """Return `when` as an aware UTC datetime. Naive values are taken as UTC."""
    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc)


def days_since_j2000(when: datetime) -> float:
    """Days (fractional) elapsed since the J2000.0 epoch, 2000-01-01T12:00 UTC."""
    return (as_utc(when) - J2000).total_seconds() / SECONDS_PER_DAY


def to_rad(deg: float) -> float:
    return deg * math.pi / 180.0


def to_deg(rad: float) -> float:
    return rad * 180.0 / math.pi


def normalize_degrees(deg: float) -> float:
    """Wrap an angle into [0, 360)."""
    wrapped = deg % 360.0
    # -1e-17 % 360 rounds to 360.0
    return 0.0 if wrapped == 360.0 else wrapped


def normalize_delta(deg: float) -> float:
    """Wrap an angle difference into (-180, 180]."""
    wrapped = normalize_degrees(deg)
    return wrapped - 360.0 if wrapped > 180.0 else wrapped


def mean_obliquity(n: float) -> float:
    """Obliquity of the ecliptic (degrees) `n` days after J2000.0."""
    return 23.439 - 0.0000004 * n


def ecliptic_to_equatorial(
    lon: float, lat: float = 0.0, obliquity: float = 23.439
) -> tuple[float, float]:
    """Convert ecliptic (lon, lat) to equatorial (ra, dec), all in degrees.

    With ``lat == 0`` this reduces to ``dec = asin(sin ε sin λ)`` and
    ``ra = atan2(cos ε sin λ, cos λ)``.

    Args:
        lon: Ecliptic longitude.
        lat: Ecliptic latitude.
        obliquity: Obliquity of the ecliptic.

    Returns:
        (ra, dec) with ra in [0, 360) and dec in [-90, 90].
    """
    eps = to_rad(obliquity)
    lon_r = to_rad(lon)
    lat_r = to_rad(lat)
    sin_dec = math.sin(lat_r) * math.cos(eps) + math.cos(lat_r) * math.sin(
        eps
    ) * math.sin(lon_r)
    dec = to_deg(math.asin(max(-1.0, min(1.0, sin_dec))))
    ra = normalize_degrees(
        to_deg(
            math.atan2(
                math.sin(lon_r) * math.cos(eps) - math.tan(lat_r) * math.sin(eps),
                math.cos(lon_r),
            )
        )
    )
    return ra, dec
