"""Single-line, centred and wrapped paragraph text drawing."""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from poster_client.style_parser import Border, coerce_style_arg, is_present, parse_border
from poster_client.surface import DrawingSurface, saved_state
from poster_client.units import UnitConverter

LOGGER = logging.getLogger("ModernPoster.Text")

ELLIPSIS = "..."

MeasureFn = Callable[[str], float]


def wrap_text(text: str, width: float, measure: MeasureFn) -> List[str]:
    """Greedy character wrap.

    Characters are appended one at a time; when the line's measured width
    reaches ``width`` the last character moves to a new line.
    """
    if measure(text) <= width:
        return [text]
    lines = [""]
    for char in text:
        lines[-1] += char
        if measure(lines[-1]) >= width:
            lines[-1] = lines[-1][:-1]
            lines.append(char)
    return lines


def truncate_lines(lines: List[str], max_lines: Optional[int]) -> List[str]:
    """Keep ``max_lines`` lines, ending the last kept line with an ellipsis on overflow."""
    if max_lines is None:
        return list(lines)
    if max_lines <= 0:
        return []
    kept = list(lines[:max_lines])
    if len(lines) > max_lines:
        kept[-1] = kept[-1][:-1] + ELLIPSIS
    return kept


def _outline(outline: Any, converter: UnitConverter) -> Optional[Border]:
    arg = coerce_style_arg(outline)
    if not is_present(arg):
        return None
    return parse_border(arg, converter)


def _paint_text(
    surface: DrawingSurface,
    text: str,
    x: float,
    y: float,
    outline: Optional[Border],
    max_width: Optional[float] = None,
) -> None:
    if outline is not None:
        surface.set_line_width(outline.width)
        surface.set_stroke_color(outline.color)
        surface.stroke_text(text, x, y, max_width)
    surface.fill_text(text, x, y, max_width)


def _prepare(surface: DrawingSurface, font: Optional[str], color: Optional[str]) -> None:
    if font:
        surface.set_font(font)
    if color:
        surface.set_fill_color(color)
    surface.set_text_baseline("top")


def draw_line(
    surface: DrawingSurface,
    converter: UnitConverter,
    text: str,
    x: float,
    y: float,
    *,
    font: Optional[str] = None,
    color: Optional[str] = None,
    outline: Any = None,
    max_width: Optional[float] = None,
) -> None:
    """Draw one line with its top edge at ``y``; physical coordinates."""
    border = _outline(outline, converter)
    with saved_state(surface):
        _prepare(surface, font, color)
        _paint_text(surface, text, x, y, border, max_width or None)


def draw_centered(
    surface: DrawingSurface,
    converter: UnitConverter,
    text: str,
    x: float,
    y: float,
    width: float,
    *,
    font: Optional[str] = None,
    color: Optional[str] = None,
    outline: Any = None,
) -> None:
    border = _outline(outline, converter)
    with saved_state(surface):
        _prepare(surface, font, color)
        surface.set_text_align("center")
        _paint_text(surface, text, x + width / 2, y, border, width or None)


def draw_paragraph(
    surface: DrawingSurface,
    converter: UnitConverter,
    text: str,
    x: float,
    y: float,
    width: float,
    line_height: float,
    max_lines: Optional[int],
    *,
    font: Optional[str] = None,
    color: Optional[str] = None,
    outline: Any = None,
) -> List[str]:
    """Wrap ``text`` to ``width`` and draw up to ``max_lines`` lines.

    Line ``n`` (zero based) is drawn at ``y + line_height * (n + 1)``.
    Returns the lines that were drawn.
    """
    border = _outline(outline, converter)
    with saved_state(surface):
        _prepare(surface, font, color)
        lines = truncate_lines(wrap_text(text, width, surface.measure_text), max_lines)
        for index, line in enumerate(lines):
            _paint_text(surface, line, x, y + line_height * (index + 1), border)
    LOGGER.debug("Paragraph drew %d line(s) at width %.1f", len(lines), width)
    return lines
