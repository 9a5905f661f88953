"""Value types passed between the position model, projection, and renderers."""

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping


@dataclass(frozen=True)
class Observer:
    """Observer location on Earth."""

    lat: float  # Latitude (decimal degrees, north positive)
    lng: float  # Longitude (decimal degrees, east positive)


@dataclass(frozen=True)
class EquatorialPosition:
    """Sky position on the celestial equator grid."""

    ra: float  # Right ascension (degrees, [0, 360))
    dec: float  # Declination (degrees, [-90, 90])


@dataclass(frozen=True)
class EclipticPoint(EquatorialPosition):
    """Equatorial position of a body that also carries its ecliptic longitude."""

    ecliptic_longitude: float  # Degrees, [0, 360)


@dataclass(frozen=True)
class SunState(EclipticPoint):
    """The Sun. Its ecliptic longitude is the sole input to zodiac lookup."""


@dataclass(frozen=True)
class MoonState(EquatorialPosition):
    """The Moon with its phase fraction."""

    phase: float  # [0, 1): 0 = new, 0.5 = full


@dataclass(frozen=True)
class HorizonPosition:
    """Local horizontal coordinates of the Sun for an observer."""

    altitude: float  # Degrees above the horizon
    azimuth: float  # Degrees from north through east, [0, 360)


@dataclass(frozen=True)
class Star:
    """A catalog star. Shared read-only by every render."""

    ra: float  # Right ascension (degrees)
    dec: float  # Declination (degrees)
    magnitude: float  # Apparent magnitude (lower = brighter)
    color_index: float  # B-V colour index


@dataclass(frozen=True)
class ConstellationRecord:
    """Stick-figure lines of one constellation."""

    id: str  # IAU abbreviation ("Leo", "Oph", ...)
    lines: tuple[tuple[tuple[float, float], ...], ...]  # Polylines of (ra, dec)


@dataclass(frozen=True)
class ProjectedPoint:
    """Stereographic projection output, unit-disk coordinates (y grows downward)."""

    x: float
    y: float


@dataclass(frozen=True)
class ViewState:
    """Per-frame view parameters."""

    width: float  # Surface width (pixels)
    height: float  # Surface height (pixels)
    center_ra: float  # RA at the view centre (degrees)
    altitude: float | None = None  # Observer's solar altitude; None hides the ground

    @property
    def scale(self) -> float:
        """Pixels per projected unit."""
        return min(self.width, self.height) * 0.45

    def to_screen(self, point: ProjectedPoint) -> tuple[float, float]:
        """Map a projected point to surface pixel coordinates."""
        return (
            self.width / 2 + point.x * self.scale,
            self.height / 2 + point.y * self.scale,
        )


@dataclass(frozen=True)
class ZodiacInterval:
    """Half-open ecliptic-longitude interval [start, end) owned by one constellation."""

    id: str
    start: float
    end: float


@dataclass(frozen=True)
class ConstellationName:
    """Display names for a zodiac constellation."""

    name: str  # Latin IAU name ("Scorpius")
    symbol: str
    common: str  # Everyday English name ("Scorpio")


@dataclass(frozen=True)
class TropicalSign:
    """Calendar sign spanning [start, end] as (month, day) pairs, inclusive."""

    name: str
    symbol: str
    start: tuple[int, int]
    end: tuple[int, int]


@dataclass(frozen=True)
class SkyState:
    """The sole input to renderers. Fully resolved body positions for one instant."""

    when: datetime  # UTC
    sun: SunState
    constellation: str  # Zodiac code the Sun currently occupies
    tropical: TropicalSign
    moon: MoonState | None = None
    planets: Mapping[str, EquatorialPosition] | None = None  # Keyed by planet id
    specials: Mapping[str, EquatorialPosition] | None = None  # Keyed by special-point id
    horizon: HorizonPosition | None = None  # Present only with an observer
