"""Path construction for rectangles, rounded rectangles, circles and ellipses.

All inputs are physical pixels; every builder starts a fresh path.
"""
from __future__ import annotations

import math
from typing import Tuple

from poster_client.surface import DrawingSurface

Radii = Tuple[float, float, float, float]


def rect_path(surface: DrawingSurface, x: float, y: float, w: float, h: float) -> None:
    surface.begin_path()
    surface.rect(x, y, w, h)


def rounded_rect_path(
    surface: DrawingSurface,
    x: float,
    y: float,
    w: float,
    h: float,
    radii: Radii,
) -> None:
    """Sweep the four corner arcs clockwise from the top-left, then close."""
    r_tl, r_tr, r_br, r_bl = radii
    surface.begin_path()
    surface.arc(x + r_tl, y + r_tl, r_tl, math.pi, math.pi * 1.5)
    surface.arc(x + w - r_tr, y + r_tr, r_tr, math.pi * 1.5, math.pi * 2)
    surface.arc(x + w - r_br, y + h - r_br, r_br, 0, math.pi * 0.5)
    surface.arc(x + r_bl, y + h - r_bl, r_bl, math.pi * 0.5, math.pi)
    surface.close_path()


def circle_path(surface: DrawingSurface, x: float, y: float, diameter: float) -> None:
    radius = diameter / 2
    rounded_rect_path(surface, x, y, diameter, diameter, (radius, radius, radius, radius))


def ellipse_path(surface: DrawingSurface, x: float, y: float, w: float, h: float) -> None:
    """Polyline approximation sampled every ``1 / max(a, b)`` radians."""
    a = w / 2
    b = h / 2
    major = max(a, b)
    step = 1 / major if major > 0 else math.inf
    surface.begin_path()
    surface.move_to(x + 2 * a, y + b)
    angle = 0.0
    while angle < 2 * math.pi:
        surface.line_to(x + a * (1 + math.cos(angle)), y + b * (1 + math.sin(angle)))
        angle += step
    surface.close_path()
