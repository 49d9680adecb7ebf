"""Paint a constructed path with fill, border, shadow and an optional clipped image."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from poster_client.style_parser import (
    ABSENT,
    Border,
    StyleArg,
    coerce_style_arg,
    is_present,
    numeric,
    parse_border,
    parse_shadow,
)
from poster_client.surface import DrawingSurface, saved_state
from poster_client.units import UnitConverter

LOGGER = logging.getLogger("ModernPoster.Compositor")


@dataclass(frozen=True)
class ShapeStyle:
    """Per-call bundle of optional paint options; padding is in virtual units."""

    fill: Optional[str] = None
    border: StyleArg = ABSENT
    shadow: StyleArg = ABSENT
    image: Any = None
    padding: Any = None

    @classmethod
    def build(
        cls,
        fill: Optional[str] = None,
        border: Any = None,
        shadow: Any = None,
        image: Any = None,
        padding: Any = None,
    ) -> "ShapeStyle":
        return cls(
            fill=fill or None,
            border=coerce_style_arg(border),
            shadow=coerce_style_arg(shadow),
            image=image or None,
            padding=padding,
        )


@dataclass(frozen=True)
class ImageFrame:
    """Border-inset transform applied before clipping the image."""

    translate_x: float
    translate_y: float
    scale_x: float
    scale_y: float


def _inset_scale(extent: float, border_width: float) -> float:
    outer = extent + border_width
    return extent / outer if outer else 1.0


def border_inset_frame(x: float, y: float, w: float, h: float, border_width: float) -> ImageFrame:
    scale_x = _inset_scale(w, border_width)
    scale_y = _inset_scale(h, border_width)
    return ImageFrame(
        translate_x=border_width / 2 + x * (1 - scale_x),
        translate_y=border_width / 2 + y * (1 - scale_y),
        scale_x=scale_x,
        scale_y=scale_y,
    )


def apply_style(
    surface: DrawingSurface,
    converter: UnitConverter,
    x: float,
    y: float,
    w: float,
    h: float,
    style: ShapeStyle,
) -> None:
    """Paint the current path.

    The order is fixed: shadow state, fill, border stroke, shadow reset, then
    the image clipped to the path. ``x``, ``y``, ``w`` and ``h`` describe the
    path's bounding rectangle in physical pixels.
    """
    with saved_state(surface):
        if is_present(style.shadow):
            shadow = parse_shadow(style.shadow)
            surface.set_shadow(shadow.offset_x, shadow.offset_y, shadow.blur, shadow.color)

        if style.fill:
            surface.set_fill_color(style.fill)
            surface.fill()

        border: Optional[Border] = None
        if is_present(style.border):
            border = parse_border(style.border, converter)
            surface.set_line_width(border.width)
            surface.set_stroke_color(border.color)
            if border.dashed:
                surface.set_line_dash(border.dash_pattern())
            surface.stroke()

        surface.set_shadow(0, 0, 0, "#000")

        if style.image:
            _fill_image(surface, converter, x, y, w, h, style, border)


def _fill_image(
    surface: DrawingSurface,
    converter: UnitConverter,
    x: float,
    y: float,
    w: float,
    h: float,
    style: ShapeStyle,
    border: Optional[Border],
) -> None:
    if border is not None:
        frame = border_inset_frame(x, y, w, h, border.width)
        surface.translate(frame.translate_x, frame.translate_y)
        surface.scale(frame.scale_x, frame.scale_y)
    padding = numeric(style.padding)
    if padding:
        padding = converter.to_physical(padding)
        x, y = x + padding, y + padding
        w, h = w - 2 * padding, h - 2 * padding
    elif padding is None and style.padding is not None:
        LOGGER.debug("Ignoring non-numeric image padding %r", style.padding)
    surface.clip()
    surface.draw_image(style.image, x, y, w, h)
