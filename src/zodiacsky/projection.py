"""Stereographic projection centred on a right ascension on the celestial equator."""

import math
from typing import Iterable

from zodiacsky.models import ProjectedPoint
from zodiacsky.timeutil import normalize_delta, to_rad

# Slightly past the limb so points right at the edge don't flicker in and out.
LIMB_MARGIN = -0.01


def project(ra: float, dec: float, center_ra: float) -> ProjectedPoint | None:
    """Project (ra, dec) onto the plane tangent at (center_ra, 0).

    The result lies in a bounded disk; y is flipped so higher declination
    renders upward on a y-down surface.

    Args:
        ra: Target right ascension (degrees).
        dec: Target declination (degrees).
        center_ra: Right ascension at the view centre (degrees).

    Returns:
        ProjectedPoint, or None when the target is behind the far hemisphere.
    """
    dra = to_rad(normalize_delta(ra - center_ra))
    dec_r = to_rad(dec)
    cos_dist = math.cos(dec_r) * math.cos(dra)
    if cos_dist < LIMB_MARGIN:
        return None

    d = 1 + cos_dist
    return ProjectedPoint(
        x=math.cos(dec_r) * math.sin(dra) / d,
        y=-math.sin(dec_r) / d,
    )


def split_polyline(
    vertices: Iterable[tuple[float, float]], center_ra: float
) -> list[list[ProjectedPoint]]:
    """Project a polyline, breaking it wherever a vertex is not visible.

    Runs with fewer than two points draw nothing and are dropped.
    """
    runs: list[list[ProjectedPoint]] = []
    current: list[ProjectedPoint] = []
    for ra, dec in vertices:
        p = project(ra, dec, center_ra)
        if p is None:
            if len(current) > 1:
                runs.append(current)
            current = []
            continue
        current.append(p)
    if len(current) > 1:
        runs.append(current)
    return runs
