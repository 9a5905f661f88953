"""Body markers — one variant per body kind, all drawn at a projected pixel position.

Every marker draws on an Axes whose data units are surface pixels with the
y axis pointing down. Line widths and font sizes are converted from pixels to
points with the figure dpi so the chart looks the same at any resolution.
"""

from dataclasses import dataclass

import numpy as np
from matplotlib import patheffects
from matplotlib.axes import Axes
from matplotlib.colors import to_rgba
from matplotlib.patches import Circle, Ellipse, Polygon

_GLOW_STEPS = 8
_LABEL_COLOR_SHADOW = "black"

SUN_COLOR = "#fbbf24"
MOON_GLOW_COLOR = "#e2e8f0"
MOON_DARK_COLOR = "#1a1a2e"
MOON_LIT_COLOR = "#f1f5f9"


@dataclass(frozen=True)
class PlanetStyle:
    name: str
    symbol: str
    color: str
    size: float  # Disk radius (pixels)
    has_rings: bool = False


@dataclass(frozen=True)
class SpecialStyle:
    name: str
    symbol: str
    color: str
    size: float
    is_node: bool = False


PLANET_STYLES: dict[str, PlanetStyle] = {
    "mercury": PlanetStyle("Mercury", "☿", "#a0a0a0", 3),
    "venus": PlanetStyle("Venus", "♀", "#e8c88a", 4),
    "mars": PlanetStyle("Mars", "♂", "#c1440e", 3.5),
    "jupiter": PlanetStyle("Jupiter", "♃", "#c88b3a", 5),
    "saturn": PlanetStyle("Saturn", "♄", "#d4a855", 4.5, has_rings=True),
    "uranus": PlanetStyle("Uranus", "♅", "#7de8e8", 3.5),
    "neptune": PlanetStyle("Neptune", "♆", "#3a5fcd", 3.5),
}

SPECIAL_STYLES: dict[str, SpecialStyle] = {
    "lilith": SpecialStyle("Lilith", "⚸", "#a855f7", 2.5),
    "north_node": SpecialStyle("North Node", "☊", "#22d3ee", 2.5, is_node=True),
    "chiron": SpecialStyle("Chiron", "⚷", "#f472b6", 2.5),
}


def px_to_pt(ax: Axes) -> float:
    """Points per surface pixel for this Axes' figure."""
    return 72.0 / ax.figure.dpi


def draw_glow(
    ax: Axes,
    x: float,
    y: float,
    radius: float,
    color: str,
    peak_alpha: float,
    zorder: float,
) -> None:
    """Soft radial halo: stacked translucent disks that darken toward the centre."""
    for i in range(_GLOW_STEPS):
        ax.add_patch(
            Circle(
                (x, y),
                radius * (1 - i / _GLOW_STEPS),
                facecolor=color,
                edgecolor="none",
                alpha=peak_alpha / _GLOW_STEPS,
                zorder=zorder,
            )
        )


def draw_disk(ax: Axes, x: float, y: float, radius: float, color: str, zorder: float) -> Circle:
    disk = Circle((x, y), radius, facecolor=color, edgecolor="none", zorder=zorder)
    ax.add_patch(disk)
    return disk


def draw_label(
    ax: Axes, x: float, y: float, offset: float, text: str, color: str, zorder: float
) -> None:
    """Bold label to the right of a body, outlined in black for legibility."""
    pt = px_to_pt(ax)
    ax.text(
        x + offset + 6,
        y,
        text,
        color=color,
        fontsize=11 * pt,
        fontweight="bold",
        ha="left",
        va="center",
        zorder=zorder,
        path_effects=[
            patheffects.withStroke(linewidth=3 * pt, foreground=_LABEL_COLOR_SHADOW)
        ],
    )


def lit_outline(
    x: float, y: float, radius: float, phase: float, samples: int = 48
) -> np.ndarray:
    """Outline of the Moon's illuminated region on a y-down surface.

    The illuminated fraction ``f = 1 - phase`` picks the construction: below
    one half, a crescent between the left half-circle and an ellipse of
    half-width ``(1 - 2f) * radius``; otherwise the right half-circle and an
    ellipse of half-width ``(2f - 1) * radius``.

    This never yields a full disk: phase 0.5 is a right half disk and the
    lit side flips to the left just after it, so the shape does not morph
    continuously through full moon.

    Returns:
        (2 * samples, 2) array of vertices, suitable for a closed Polygon.
    """
    f = 1 - phase
    if f < 0.5:
        width = (1 - 2 * f) * radius
        arc = np.linspace(-np.pi / 2, -3 * np.pi / 2, samples)  # top → left → bottom
        terminator = np.linspace(np.pi / 2, 3 * np.pi / 2, samples)  # bottom → left → top
    else:
        width = (2 * f - 1) * radius
        arc = np.linspace(np.pi / 2, -np.pi / 2, samples)  # bottom → right → top
        terminator = np.linspace(-np.pi / 2, np.pi / 2, samples)  # top → right → bottom
    rim = np.column_stack((x + radius * np.cos(arc), y + radius * np.sin(arc)))
    inner = np.column_stack(
        (x + width * np.cos(terminator), y + radius * np.sin(terminator))
    )
    return np.vstack((rim, inner))


@dataclass(frozen=True)
class SunMarker:
    size: float = 12

    def draw(self, ax: Axes, x: float, y: float, zorder: float) -> None:
        draw_glow(ax, x, y, self.size * 2.5, SUN_COLOR, 0.8, zorder)
        draw_disk(ax, x, y, self.size, SUN_COLOR, zorder + 0.1)


@dataclass(frozen=True)
class MoonMarker:
    phase: float
    size: float = 10

    def draw(self, ax: Axes, x: float, y: float, zorder: float) -> None:
        draw_glow(ax, x, y, self.size * 2.5, MOON_GLOW_COLOR, 0.5, zorder)
        disk = draw_disk(ax, x, y, self.size, MOON_DARK_COLOR, zorder + 0.1)

        lit = Polygon(
            lit_outline(x, y, self.size, self.phase),
            closed=True,
            facecolor=MOON_LIT_COLOR,
            edgecolor="none",
            zorder=zorder + 0.2,
        )
        ax.add_patch(lit)
        lit.set_clip_path(disk)

        ax.add_patch(
            Circle(
                (x, y),
                self.size,
                fill=False,
                edgecolor=to_rgba("white", 0.3),
                linewidth=0.5 * px_to_pt(ax),
                zorder=zorder + 0.3,
            )
        )
        draw_label(ax, x, y, self.size, "☽ Moon", MOON_GLOW_COLOR, zorder + 0.4)


@dataclass(frozen=True)
class PlanetMarker:
    style: PlanetStyle

    def draw(self, ax: Axes, x: float, y: float, zorder: float) -> None:
        s = self.style
        draw_glow(ax, x, y, s.size * 2.5, s.color, 0.6, zorder)
        draw_disk(ax, x, y, s.size, s.color, zorder + 0.1)
        if s.has_rings:
            ax.add_patch(
                Ellipse(
                    (x, y),
                    width=s.size * 1.8 * 2,
                    height=s.size * 0.5 * 2,
                    fill=False,
                    edgecolor=to_rgba(s.color, 0.5),
                    linewidth=1.5 * px_to_pt(ax),
                    zorder=zorder + 0.2,
                )
            )
        draw_label(ax, x, y, s.size, f"{s.symbol} {s.name}", s.color, zorder + 0.3)


@dataclass(frozen=True)
class SpecialMarker:
    style: SpecialStyle

    def draw(self, ax: Axes, x: float, y: float, zorder: float) -> None:
        s = self.style
        if s.is_node:
            ax.add_patch(
                Polygon(
                    [
                        (x, y - s.size),
                        (x + s.size * 0.7, y),
                        (x, y + s.size),
                        (x - s.size * 0.7, y),
                    ],
                    closed=True,
                    facecolor=s.color,
                    edgecolor="none",
                    zorder=zorder,
                )
            )
        else:
            draw_glow(ax, x, y, s.size * 2, s.color, 0.6, zorder)
            draw_disk(ax, x, y, s.size, s.color, zorder + 0.1)
        draw_label(ax, x, y, s.size, f"{s.symbol} {s.name}", s.color, zorder + 0.2)


BodyMarker = SunMarker | MoonMarker | PlanetMarker | SpecialMarker
