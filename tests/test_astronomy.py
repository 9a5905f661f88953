import math
from datetime import datetime, timedelta, timezone

import pytest

from zodiacsky.astronomy import (
    CONSTELLATION_NAMES,
    PLANETS,
    REFERENCE_NEW_MOON,
    SYNODIC_MONTH,
    ZODIAC_BOUNDARIES,
    compute_sky,
    moon_phase,
    moon_position,
    planet_position,
    solar_altaz,
    special_point,
    sun_position,
    tropical_sign,
    zodiac_constellation,
)
from zodiacsky.models import EquatorialPosition, MoonState, Observer, SunState
from zodiacsky.timeutil import J2000, normalize_delta

UTC = timezone.utc


def _reference_sun(n: float) -> tuple[float, float, float]:
    """Independent evaluation of the low-order solar formulas."""
    L = (280.460 + 0.9856474 * n) % 360
    g = math.radians((357.528 + 0.9856003 * n) % 360)
    lam = (L + 1.915 * math.sin(g) + 0.020 * math.sin(2 * g)) % 360
    eps = math.radians(23.439 - 0.0000004 * n)
    lam_r = math.radians(lam)
    dec = math.degrees(math.asin(math.sin(eps) * math.sin(lam_r)))
    ra = math.degrees(math.atan2(math.cos(eps) * math.sin(lam_r), math.cos(lam_r))) % 360
    return lam, ra, dec


def test_sun_at_j2000():
    sun = sun_position(J2000)
    lam, ra, dec = _reference_sun(0.0)
    assert sun.ecliptic_longitude == pytest.approx(lam, abs=1e-9)
    assert sun.ra == pytest.approx(ra, abs=1e-9)
    assert sun.dec == pytest.approx(dec, abs=1e-9)
    # Mean longitude dominates at n = 0
    assert sun.ecliptic_longitude == pytest.approx(280.46, abs=0.1)
    assert sun.ecliptic_longitude == pytest.approx(280.3757, abs=1e-3)
    assert sun.ra == pytest.approx(281.29, abs=0.05)
    assert sun.dec == pytest.approx(-23.03, abs=0.05)


@pytest.mark.parametrize("days", [-3650.25, 1234.5, 9000.0])
def test_sun_matches_reference_formula(days):
    sun = sun_position(J2000 + timedelta(days=days))
    lam, ra, dec = _reference_sun(days)
    assert sun.ecliptic_longitude == pytest.approx(lam, abs=1e-6)
    assert sun.ra == pytest.approx(ra, abs=1e-6)
    assert sun.dec == pytest.approx(dec, abs=1e-6)


def test_sun_near_march_equinox():
    sun = sun_position(datetime(2024, 3, 20, 3, 6, tzinfo=UTC))
    assert abs(normalize_delta(sun.ecliptic_longitude)) < 0.1
    assert abs(sun.dec) < 0.1


def test_moon_phase_at_reference_new_moon():
    assert moon_phase(REFERENCE_NEW_MOON) == 0.0
    half = REFERENCE_NEW_MOON + timedelta(days=SYNODIC_MONTH / 2)
    assert moon_phase(half) == pytest.approx(0.5)


@pytest.mark.parametrize(
    "when",
    [
        datetime(1987, 7, 4, 3, 30, tzinfo=UTC),
        datetime(2000, 1, 1, 12, tzinfo=UTC),
        datetime(2031, 11, 30, 23, 59, tzinfo=UTC),
    ],
)
def test_moon_phase_is_periodic(when):
    a = moon_phase(when)
    b = moon_phase(when + timedelta(days=SYNODIC_MONTH))
    assert 0.0 <= a < 1.0
    diff = abs(a - b)
    assert min(diff, 1 - diff) < 1e-6


def test_moon_phase_increases_between_new_moons():
    start = REFERENCE_NEW_MOON + timedelta(days=SYNODIC_MONTH * 100)
    phases = [moon_phase(start + timedelta(days=d)) for d in range(1, 29)]
    assert phases == sorted(phases)


def test_moon_tracks_sun():
    new = moon_position(REFERENCE_NEW_MOON)
    sun = sun_position(REFERENCE_NEW_MOON)
    assert new.ra == pytest.approx(sun.ra)

    full_time = REFERENCE_NEW_MOON + timedelta(days=SYNODIC_MONTH / 2)
    full = moon_position(full_time)
    sun = sun_position(full_time)
    assert abs(normalize_delta(full.ra - sun.ra - 180.0)) < 0.1


def test_moon_declination_amplitude():
    for d in range(0, 60):
        moon = moon_position(J2000 + timedelta(days=d * 0.5))
        assert -5.145 <= moon.dec <= 5.145


@pytest.mark.parametrize("planet", sorted(PLANETS))
def test_planets_lie_on_ecliptic(planet):
    pos = planet_position(planet, datetime(2024, 6, 1, tzinfo=UTC))
    assert 0.0 <= pos.ra < 360.0
    assert abs(pos.dec) <= 23.44
    assert 0.0 <= pos.ecliptic_longitude < 360.0


@pytest.mark.parametrize("planet, max_elongation", [("mercury", 25.0), ("venus", 48.0)])
def test_inner_planets_stay_near_sun(planet, max_elongation):
    for month in range(1, 13):
        when = datetime(2023, month, 15, tzinfo=UTC)
        pos = planet_position(planet, when)
        sun = sun_position(when)
        assert abs(normalize_delta(pos.ecliptic_longitude - sun.ecliptic_longitude)) < max_elongation


def test_unknown_planet():
    with pytest.raises(ValueError):
        planet_position("pluto", J2000)


def test_special_points():
    node = special_point("north_node", J2000)
    assert node.ecliptic_longitude == pytest.approx(125.04)

    year_later = special_point("north_node", J2000 + timedelta(days=365.25))
    assert year_later.ecliptic_longitude == pytest.approx(125.04 - 0.05295 * 365.25)

    chiron = special_point("chiron", J2000 + timedelta(days=1000))
    assert chiron.ecliptic_longitude == pytest.approx(120.5 + 19.45)

    with pytest.raises(ValueError):
        special_point("vertex", J2000)


@pytest.mark.parametrize(
    "lon, code",
    [
        (300.0, "Cap"),
        (299.999, "Sgr"),
        (0.0, "Psc"),
        (359.99, "Psc"),
        (28.999, "Psc"),
        (29.0, "Ari"),
        (245.0, "Sco"),
        (250.0, "Oph"),
        (150.0, "Leo"),
    ],
)
def test_zodiac_lookup(lon, code):
    assert zodiac_constellation(lon) == code


def test_zodiac_total_coverage():
    seen = set()
    for i in range(36000):
        lon = i / 100
        matches = [z for z in ZODIAC_BOUNDARIES if z.start <= lon < z.end]
        assert len(matches) == 1, lon
        code = zodiac_constellation(lon)
        assert code == matches[0].id
        seen.add(code)
    assert seen == set(CONSTELLATION_NAMES)
    assert len(seen) == 13


def test_zodiac_fallback_is_last_entry():
    assert zodiac_constellation(360.0) == ZODIAC_BOUNDARIES[-1].id == "Sgr"
    assert zodiac_constellation(float("nan")) == "Sgr"


@pytest.mark.parametrize(
    "month, day, name",
    [
        (12, 25, "Capricorn"),
        (1, 10, "Capricorn"),
        (1, 19, "Capricorn"),
        (12, 22, "Capricorn"),
        (1, 20, "Aquarius"),
        (12, 21, "Sagittarius"),
        (3, 20, "Pisces"),
        (3, 21, "Aries"),
        (7, 23, "Leo"),
        (11, 21, "Scorpio"),
    ],
)
def test_tropical_sign(month, day, name):
    assert tropical_sign(month, day).name == name


def test_tropical_sign_covers_every_day():
    day = datetime(2024, 1, 1)
    while day.year == 2024:
        sign = tropical_sign(day.month, day.day)
        (fm, fd), (tm, td) = sign.start, sign.end
        if (fm, fd) <= (tm, td):
            assert (fm, fd) <= (day.month, day.day) <= (tm, td)
        day += timedelta(days=1)


def test_solar_altaz_day_and_night():
    noon = solar_altaz(datetime(2024, 3, 20, 12, tzinfo=UTC), 0.0, 0.0)
    midnight = solar_altaz(datetime(2024, 3, 20, 0, tzinfo=UTC), 0.0, 0.0)
    assert noon.altitude > 60
    assert midnight.altitude < -60
    for pos in (noon, midnight):
        assert -90 <= pos.altitude <= 90
        assert 0 <= pos.azimuth < 360


def test_solar_altaz_longitude_shifts_noon():
    # 12:00 UTC is midnight on the antimeridian
    pos = solar_altaz(datetime(2024, 6, 1, 12, tzinfo=UTC), 0.0, 180.0)
    assert pos.altitude < -60


def test_compute_sky_calendar_vs_sky():
    sky = compute_sky(datetime(2024, 12, 25, 12, tzinfo=UTC))
    assert sky.tropical.name == "Capricorn"
    assert sky.constellation == "Sgr"
    assert sky.horizon is None
    assert set(sky.planets) == set(PLANETS)
    assert set(sky.specials) == {"north_node", "lilith", "chiron"}
    assert sky.moon is not None


def test_compute_sky_with_observer_and_naive_time():
    sky = compute_sky(datetime(2024, 6, 21, 10), observer=Observer(lat=60.17, lng=24.94))
    assert sky.when.tzinfo == UTC
    assert sky.horizon is not None
    assert sky.horizon.altitude > 0


class _FixedModel:
    def sun(self, when):
        return SunState(ra=150.0, dec=12.0, ecliptic_longitude=148.0)

    def moon(self, when):
        return MoonState(ra=10.0, dec=1.0, phase=0.25)

    def planet(self, planet, when):
        return EquatorialPosition(ra=42.0, dec=0.0)


def test_compute_sky_uses_injected_model():
    sky = compute_sky(J2000, model=_FixedModel())
    assert sky.sun.ra == 150.0
    assert sky.constellation == "Leo"
    assert sky.moon.phase == 0.25
    assert all(p.ra == 42.0 for p in sky.planets.values())
