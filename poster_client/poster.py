"""Public drawing API in virtual units, bound to one drawing surface."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Sequence

from poster_client.client_config import PosterSettings
from poster_client.compositor import ShapeStyle, apply_style
from poster_client.exporter import export_raster
from poster_client.image_loader import load_images
from poster_client.paths import circle_path, ellipse_path, rect_path, rounded_rect_path
from poster_client.results import Result
from poster_client.style_parser import parse_radii
from poster_client.surface import DrawingSurface
from poster_client.text_layout import draw_centered, draw_line, draw_paragraph
from poster_client.units import UnitConverter

LOGGER = logging.getLogger("ModernPoster.Client")


class PosterCanvas:
    """Draws shapes, images and text given in virtual units onto ``surface``.

    Style keywords shared by the shape operations:

    fill:    fill colour.
    border:  border width (number) or ``"<width> <solid|dashed> <colour>"``.
    shadow:  ``"<offset-x> <offset-y> <blur> <colour>"``.
    image:   local image path painted inside the shape, clipped to it.
    padding: inset of the image from the shape edges.
    """

    def __init__(self, surface: DrawingSurface, settings: Optional[PosterSettings] = None) -> None:
        self.surface = surface
        self.settings = settings or PosterSettings()
        self.converter: UnitConverter = self.settings.converter()
        self._commit_pending = False

    # unit helpers --------------------------------------------------------

    def to_physical(self, value: Any) -> Any:
        return self.converter.to_physical(value)

    def to_virtual(self, value: float) -> float:
        return self.converter.to_virtual(value)

    def font(self, value: Any = None) -> Optional[str]:
        return self.converter.css_font(value)

    async def load_images(self, sources: Sequence[str] = ()) -> Result[List[str]]:
        return await load_images(
            sources,
            cache_dir=self.settings.image_cache_dir,
            timeout=self.settings.fetch_timeout,
        )

    def _box(self, x: float, y: float, w: float, h: float) -> tuple:
        convert = self.converter.to_physical
        return convert(x), convert(y), convert(w), convert(h)

    # images --------------------------------------------------------------

    def image(self, src: Any, x: float, y: float, w: float, h: float) -> None:
        self.surface.draw_image(src, *self._box(x, y, w, h))

    def center_image(self, src: Any, x: float, y: float, w: float, h: float, area_width: float) -> None:
        """Draw an image horizontally centred within ``area_width`` starting at ``x``."""
        px, py, pw, ph = self._box(x, y, w, h)
        px += (self.converter.to_physical(area_width) - pw) / 2
        self.surface.draw_image(src, px, py, pw, ph)

    # shapes --------------------------------------------------------------

    def rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        *,
        fill: Optional[str] = None,
        border: Any = None,
        shadow: Any = None,
        image: Any = None,
        padding: Any = None,
    ) -> None:
        px, py, pw, ph = self._box(x, y, w, h)
        rect_path(self.surface, px, py, pw, ph)
        apply_style(self.surface, self.converter, px, py, pw, ph, ShapeStyle.build(fill, border, shadow, image, padding))

    def rect_image(
        self,
        src: Any,
        x: float,
        y: float,
        w: float,
        h: float,
        *,
        border: Any = None,
        shadow: Any = None,
        padding: Any = None,
    ) -> None:
        self.rect(x, y, w, h, border=border, shadow=shadow, image=src, padding=padding)

    def round_rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        radius: Any = 0,
        *,
        fill: Optional[str] = None,
        border: Any = None,
        shadow: Any = None,
        image: Any = None,
        padding: Any = None,
    ) -> None:
        """Rounded rectangle; ``radius`` is one value or ``[tl, tr, br, bl]``."""
        px, py, pw, ph = self._box(x, y, w, h)
        rounded_rect_path(self.surface, px, py, pw, ph, parse_radii(radius, self.converter))
        apply_style(self.surface, self.converter, px, py, pw, ph, ShapeStyle.build(fill, border, shadow, image, padding))

    def round_rect_image(
        self,
        src: Any,
        x: float,
        y: float,
        w: float,
        h: float,
        radius: Any = 0,
        *,
        border: Any = None,
        shadow: Any = None,
        padding: Any = None,
    ) -> None:
        self.round_rect(x, y, w, h, radius, border=border, shadow=shadow, image=src, padding=padding)

    def circle(
        self,
        x: float,
        y: float,
        diameter: float,
        *,
        fill: Optional[str] = None,
        border: Any = None,
        shadow: Any = None,
        image: Any = None,
        padding: Any = None,
    ) -> None:
        """Circle inscribed in the square at ``(x, y)`` with side ``diameter``."""
        px, py, pd, _ = self._box(x, y, diameter, diameter)
        circle_path(self.surface, px, py, pd)
        apply_style(self.surface, self.converter, px, py, pd, pd, ShapeStyle.build(fill, border, shadow, image, padding))

    def circle_image(
        self,
        src: Any,
        x: float,
        y: float,
        diameter: float,
        *,
        border: Any = None,
        shadow: Any = None,
        padding: Any = None,
    ) -> None:
        self.circle(x, y, diameter, border=border, shadow=shadow, image=src, padding=padding)

    def ellipse(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        *,
        fill: Optional[str] = None,
        border: Any = None,
        shadow: Any = None,
        image: Any = None,
        padding: Any = None,
    ) -> None:
        """Ellipse inscribed in the box at ``(x, y)``."""
        px, py, pw, ph = self._box(x, y, w, h)
        ellipse_path(self.surface, px, py, pw, ph)
        apply_style(self.surface, self.converter, px, py, pw, ph, ShapeStyle.build(fill, border, shadow, image, padding))

    def ellipse_image(
        self,
        src: Any,
        x: float,
        y: float,
        w: float,
        h: float,
        *,
        border: Any = None,
        shadow: Any = None,
        padding: Any = None,
    ) -> None:
        self.ellipse(x, y, w, h, border=border, shadow=shadow, image=src, padding=padding)

    # text ----------------------------------------------------------------

    def text(
        self,
        txt: str,
        x: float,
        y: float,
        *,
        font: Any = None,
        color: Optional[str] = None,
        max_width: Optional[float] = None,
        outline: Any = None,
    ) -> None:
        """One line of text with its top edge at ``y``.

        ``max_width`` squeezes wider text horizontally; it never wraps.
        ``outline`` uses the border grammar (``"2 #fff"``) and is stroked under
        the fill.
        """
        px, py = self.converter.to_physical(x), self.converter.to_physical(y)
        draw_line(
            self.surface,
            self.converter,
            txt,
            px,
            py,
            font=self.font(font),
            color=color,
            outline=outline,
            max_width=self.converter.to_physical(max_width),
        )

    def center_text(
        self,
        txt: str,
        x: float,
        y: float,
        width: float,
        *,
        font: Any = None,
        color: Optional[str] = None,
        outline: Any = None,
    ) -> None:
        px, py, pw, _ = self._box(x, y, width, 0)
        draw_centered(self.surface, self.converter, txt, px, py, pw, font=self.font(font), color=color, outline=outline)

    def paragraph(
        self,
        txt: str,
        x: float,
        y: float,
        width: float,
        line_height: float,
        max_lines: Optional[int],
        *,
        font: Any = None,
        color: Optional[str] = None,
        outline: Any = None,
    ) -> List[str]:
        """Wrap text to ``width``; at most ``max_lines`` lines, the last ending in "..." on overflow."""
        px, py, pw, plh = self._box(x, y, width, line_height)
        return draw_paragraph(
            self.surface,
            self.converter,
            txt,
            px,
            py,
            pw,
            plh,
            max_lines,
            font=self.font(font),
            color=color,
            outline=outline,
        )

    # commit / export -----------------------------------------------------

    async def flush(self, reserve: bool = False) -> None:
        """Commit pending drawing and wait until the surface reports completion.

        Only one flush may be outstanding per surface; overlapping calls are
        logged and issued anyway.
        """
        if self._commit_pending:
            LOGGER.warning("flush() issued while a previous flush is still pending")
        loop = asyncio.get_running_loop()
        done: asyncio.Future = loop.create_future()

        def _resolve() -> None:
            if not done.done():
                done.set_result(None)

        def _on_complete() -> None:
            loop.call_soon_threadsafe(_resolve)

        self._commit_pending = True
        try:
            self.surface.commit(_on_complete, reserve)
            await done
        finally:
            self._commit_pending = False

    async def to_image(self, **options: Any) -> Result:
        return await export_raster(self, **options)
