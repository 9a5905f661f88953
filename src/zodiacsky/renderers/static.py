"""Matplotlib sky-map compositor and static PNG renderer.

Paints one frame back to front onto an Axes laid out in surface pixels:
ground, constellation lines, stars, planets, special points, Moon, Sun.
Nothing persists between calls; every call clears the Axes first.
"""

import math
from datetime import datetime
from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.collections import LineCollection, PathCollection
from matplotlib.colors import to_rgba
from matplotlib.figure import Figure
from matplotlib.patches import Circle, Rectangle
from matplotlib.path import Path as MplPath

from zodiacsky.astronomy import PositionModel, compute_sky
from zodiacsky.models import (
    ConstellationRecord,
    Observer,
    SkyState,
    Star,
    ViewState,
)
from zodiacsky.projection import project, split_polyline
from zodiacsky.renderers.bodies import (
    PLANET_STYLES,
    SPECIAL_STYLES,
    BodyMarker,
    MoonMarker,
    PlanetMarker,
    SpecialMarker,
    SunMarker,
    draw_glow,
    px_to_pt,
)
from zodiacsky.timeutil import normalize_degrees

_ROOT = Path(__file__).parent.parent.parent.parent

_BG = "#0a0a14"
_LINE_COLOR = (212 / 255, 175 / 255, 55 / 255)
_BRIGHT_STAR_CUTOFF = 3.0  # Only stars brighter than this get a glow

# Layer depths, back to front
_Z_GROUND = 1
_Z_LINES = 2
_Z_STARS = 3
_Z_PLANETS = 4
_Z_SPECIALS = 5
_Z_MOON = 6
_Z_SUN = 7

# Upper bound of each B-V bucket → RGB, blue-white to red
_BV_BUCKETS: tuple[tuple[float, tuple[int, int, int]], ...] = (
    (0.0, (180, 200, 255)),
    (0.5, (240, 240, 255)),
    (1.0, (255, 255, 220)),
    (1.5, (255, 220, 180)),
)
_BV_RED = (255, 180, 140)

# Vertical ground gradient: (offset, RGBA)
_GROUND_STOPS: tuple[tuple[float, tuple[float, float, float, float]], ...] = (
    (0.0, (34 / 255, 50 / 255, 30 / 255, 0.6)),
    (0.3, (20 / 255, 35 / 255, 20 / 255, 0.8)),
    (1.0, (10 / 255, 15 / 255, 10 / 255, 1.0)),
)


def _four_point_star() -> MplPath:
    """Unit 4-point star with concave quadratic sides."""
    verts: list[tuple[float, float]] = [(1.0, 0.0)]
    for i in range(4):
        a = i * math.pi / 2
        mid = a + math.pi / 4
        na = (i + 1) * math.pi / 2
        verts.append((math.cos(mid) * 0.10, math.sin(mid) * 0.10))
        verts.append((math.cos(na), math.sin(na)))
    verts.append((0.0, 0.0))
    codes = [MplPath.MOVETO] + [MplPath.CURVE3] * 8 + [MplPath.CLOSEPOLY]
    return MplPath(verts, codes)


_STAR_SHAPE = _four_point_star()


def star_color(color_index: float) -> tuple[float, float, float]:
    """Quantize a B-V colour index into one of five tints."""
    for upper, rgb in _BV_BUCKETS:
        if color_index <= upper:
            return rgb[0] / 255, rgb[1] / 255, rgb[2] / 255
    return _BV_RED[0] / 255, _BV_RED[1] / 255, _BV_RED[2] / 255


def star_radius(magnitude: float) -> float:
    """Brighter stars are larger, with a floor for faint ones."""
    return max(0.6, 3.2 - magnitude * 0.45)


def horizon_opacity(altitude: float) -> float:
    """Ground opacity: 0.1 below -5°, 1 above +5°, linear in between."""
    if altitude > 5:
        return 1.0
    if altitude < -5:
        return 0.1
    return 0.1 + ((altitude + 5) / 10) * 0.9


class _GaussianBlur:
    """agg_filter that blurs an artist's rendered pixels."""

    def __init__(self, sigma: float):
        self.sigma = sigma

    def __call__(self, im: np.ndarray, dpi: float) -> tuple[np.ndarray, int, int]:
        pad = int(math.ceil(self.sigma * 3))
        padded = np.pad(im, [(pad, pad), (pad, pad), (0, 0)], "constant")
        offsets = np.arange(-pad, pad + 1)
        kernel = np.exp(-(offsets**2) / (2 * self.sigma**2))
        kernel /= kernel.sum()
        for axis in (0, 1):
            blurred = np.zeros_like(padded)
            for offset, weight in zip(offsets, kernel):
                blurred += weight * np.roll(padded, offset, axis=axis)
            padded = blurred
        return padded, -pad, -pad


def _draw_ground(ax: Axes, view: ViewState, altitude: float) -> None:
    opacity = horizon_opacity(altitude)
    radius = min(view.width, view.height) * 3
    center_x = view.width / 2
    center_y = view.height / 2 + radius * (1 + altitude / 90)

    offsets = np.linspace(0.0, 1.0, 256)
    stops = np.array([s[0] for s in _GROUND_STOPS])
    colors = np.array([s[1] for s in _GROUND_STOPS])
    gradient = np.stack(
        [np.interp(offsets, stops, colors[:, c]) for c in range(4)], axis=-1
    )[:, np.newaxis, :]

    clip = Circle((center_x, center_y), radius, transform=ax.transData)
    image = ax.imshow(
        gradient,
        extent=(
            center_x - radius,
            center_x + radius,
            center_y + radius,
            center_y - radius,
        ),
        aspect="auto",
        interpolation="bilinear",
        alpha=opacity,
        zorder=_Z_GROUND,
    )
    image.set_clip_path(clip)
    sigma = (1 - opacity) * 5
    if sigma >= 0.5:
        image.set_agg_filter(_GaussianBlur(sigma))


def _draw_constellations(
    ax: Axes,
    view: ViewState,
    constellations: Sequence[ConstellationRecord],
    active_id: str | None,
) -> None:
    pt = px_to_pt(ax)
    for record in constellations:
        segments = [
            [view.to_screen(p) for p in run]
            for line in record.lines
            for run in split_polyline(line, view.center_ra)
        ]
        if not segments:
            continue
        active = record.id == active_id
        if active:
            ax.add_collection(
                LineCollection(
                    segments,
                    colors=[to_rgba(_LINE_COLOR, 0.25)],
                    linewidths=6 * pt,
                    capstyle="round",
                    joinstyle="round",
                    zorder=_Z_LINES,
                    gid=f"glow:{record.id}",
                ),
                autolim=False,
            )
        ax.add_collection(
            LineCollection(
                segments,
                colors=[to_rgba(_LINE_COLOR, 0.85 if active else 0.2)],
                linewidths=(1.8 if active else 1.0) * pt,
                zorder=_Z_LINES + 0.1,
                gid=f"constellation:{record.id}",
            ),
            autolim=False,
        )


def _draw_stars(ax: Axes, view: ViewState, stars: Sequence[Star]) -> None:
    paths: list[MplPath] = []
    colors: list[tuple[float, float, float]] = []
    for s in stars:
        p = project(s.ra, s.dec, view.center_ra)
        if p is None:
            continue
        x, y = view.to_screen(p)
        r = star_radius(s.magnitude)
        color = star_color(s.color_index)
        if s.magnitude < _BRIGHT_STAR_CUTOFF:
            draw_glow(ax, x, y, r * 3, color, 0.4, _Z_STARS)
        paths.append(MplPath(_STAR_SHAPE.vertices * r + (x, y), _STAR_SHAPE.codes))
        colors.append(color)
    if paths:
        ax.add_collection(
            PathCollection(
                paths,
                facecolors=colors,
                edgecolors="none",
                zorder=_Z_STARS + 0.1,
                gid="stars",
            ),
            autolim=False,
        )


def _draw_marker(
    ax: Axes, view: ViewState, ra: float, dec: float, marker: BodyMarker, zorder: float
) -> None:
    p = project(ra, dec, view.center_ra)
    if p is None:
        return
    x, y = view.to_screen(p)
    marker.draw(ax, x, y, zorder)


def draw_sky_map(
    ax: Axes,
    sky: SkyState,
    stars: Sequence[Star],
    constellations: Sequence[ConstellationRecord],
    view: ViewState,
) -> None:
    """Clear `ax` and paint one complete frame.

    Args:
        ax: Target Axes; it is reset to a pixel grid of view.width × view.height.
        sky: Resolved body positions for the frame.
        stars: Star catalog (may be empty).
        constellations: Constellation line catalog (may be empty).
        view: View centre, surface size, and optional ground altitude.
    """
    ax.cla()
    ax.axis("off")
    ax.add_patch(
        Rectangle((0, 0), view.width, view.height, color=_BG, zorder=0)
    )

    if view.altitude is not None:
        _draw_ground(ax, view, view.altitude)

    _draw_constellations(ax, view, constellations, sky.constellation)
    _draw_stars(ax, view, stars)

    if sky.planets:
        for key, pos in sky.planets.items():
            style = PLANET_STYLES.get(key)
            if style is None or pos is None:
                continue
            _draw_marker(ax, view, pos.ra, pos.dec, PlanetMarker(style), _Z_PLANETS)

    if sky.specials:
        for key, pos in sky.specials.items():
            style = SPECIAL_STYLES.get(key)
            if style is None or pos is None:
                continue
            _draw_marker(ax, view, pos.ra, pos.dec, SpecialMarker(style), _Z_SPECIALS)

    if sky.moon is not None:
        _draw_marker(
            ax, view, sky.moon.ra, sky.moon.dec, MoonMarker(sky.moon.phase), _Z_MOON
        )

    # Sun last, on top
    _draw_marker(ax, view, sky.sun.ra, sky.sun.dec, SunMarker(), _Z_SUN)

    ax.set_xlim(0, view.width)
    ax.set_ylim(view.height, 0)


def paint_frame(
    ax: Axes,
    when: datetime,
    stars: Sequence[Star],
    constellations: Sequence[ConstellationRecord],
    width: float,
    height: float,
    observer: Observer | None = None,
    rotation_offset: float = 0.0,
    model: PositionModel | None = None,
) -> SkyState:
    """Compute the sky for `when` and paint it centred on the Sun.

    Args:
        ax: Target Axes.
        when: Frame instant (naive values are taken as UTC).
        stars: Star catalog.
        constellations: Constellation line catalog.
        width: Surface width in pixels.
        height: Surface height in pixels.
        observer: Optional observer; adds the ground layer.
        rotation_offset: Degrees added to the Sun's RA to pan the view.
        model: Sun/Moon/planet provider; defaults to the mean-element model.

    Returns:
        The SkyState that was drawn.
    """
    sky = compute_sky(when, observer=observer, model=model)
    view = ViewState(
        width=width,
        height=height,
        center_ra=normalize_degrees(sky.sun.ra + rotation_offset),
        altitude=sky.horizon.altitude if sky.horizon is not None else None,
    )
    draw_sky_map(ax, sky, stars, constellations, view)
    return sky


def render_static_chart(
    when: datetime,
    stars: Sequence[Star],
    constellations: Sequence[ConstellationRecord],
    observer: Observer | None = None,
    rotation_offset: float = 0.0,
    size: tuple[int, int] = (900, 900),
    dpi: int = 100,
    model: PositionModel | None = None,
) -> Figure:
    """Render one frame into a new matplotlib Figure of `size` pixels.

    Args:
        when: Frame instant.
        stars: Star catalog.
        constellations: Constellation line catalog.
        observer: Optional observer location.
        rotation_offset: View pan in degrees of RA.
        size: (width, height) in pixels.
        dpi: Figure resolution.
        model: Sun/Moon/planet provider.

    Returns:
        matplotlib Figure object.
    """
    width, height = size
    fig = plt.figure(figsize=(width / dpi, height / dpi), dpi=dpi)
    fig.patch.set_facecolor(_BG)
    ax = fig.add_axes((0, 0, 1, 1))
    paint_frame(
        ax,
        when,
        stars,
        constellations,
        width,
        height,
        observer=observer,
        rotation_offset=rotation_offset,
        model=model,
    )
    return fig


def save_static_chart(
    when: datetime,
    stars: Sequence[Star],
    constellations: Sequence[ConstellationRecord],
    output_path: Path | None = None,
    **kwargs,
) -> Path:
    """Save one frame as a PNG file.

    Args:
        when: Frame instant.
        stars: Star catalog.
        constellations: Constellation line catalog.
        output_path: Destination path. Auto-generated under results/ if None.
        **kwargs: Forwarded to render_static_chart().

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        filename = f"sky__{when.strftime('%Y_%m_%d_%H_%M')}.png"
        output_path = _ROOT / "results" / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_chart(when, stars, constellations, **kwargs)
    fig.savefig(output_path, facecolor=fig.get_facecolor())
    plt.close(fig)
    return output_path
