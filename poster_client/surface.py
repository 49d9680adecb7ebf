"""Drawing surface contract consumed by the compositor and text layout."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, Sequence, Tuple

TextBaseline = str  # "top" | "middle" | "alphabetic"
TextAlign = str  # "left" | "center" | "right"


class DrawingSurface:
    """Canvas-style retained drawing context.

    Coordinates are physical pixels. Paths are built with the transform that
    is current while they are built; paint state lives on a save/restore
    stack.
    """

    # path construction
    def begin_path(self) -> None: ...
    def move_to(self, x: float, y: float) -> None: ...
    def line_to(self, x: float, y: float) -> None: ...
    def arc(self, cx: float, cy: float, radius: float, start: float, end: float) -> None: ...
    def rect(self, x: float, y: float, w: float, h: float) -> None: ...
    def close_path(self) -> None: ...

    # paint state
    def set_fill_color(self, color: str) -> None: ...
    def set_stroke_color(self, color: str) -> None: ...
    def set_line_width(self, width: float) -> None: ...
    def set_line_dash(self, pattern: Sequence[float]) -> None: ...
    def set_shadow(self, offset_x: float, offset_y: float, blur: float, color: str) -> None: ...

    # paint operations
    def fill(self) -> None: ...
    def stroke(self) -> None: ...
    def clip(self) -> None: ...
    def draw_image(self, source: Any, x: float, y: float, w: float, h: float) -> None: ...

    # text
    def set_font(self, font: str) -> None: ...
    def set_text_baseline(self, baseline: TextBaseline) -> None: ...
    def set_text_align(self, align: TextAlign) -> None: ...
    def measure_text(self, text: str) -> float: ...
    def fill_text(self, text: str, x: float, y: float, max_width: Optional[float] = None) -> None: ...
    def stroke_text(self, text: str, x: float, y: float, max_width: Optional[float] = None) -> None: ...

    # transform and state
    def translate(self, dx: float, dy: float) -> None: ...
    def scale(self, sx: float, sy: float) -> None: ...
    def save(self) -> None: ...
    def restore(self) -> None: ...

    # lifecycle
    def commit(self, callback: Callable[[], None], reserve: bool = False) -> None: ...
    def save_to_file(
        self,
        path: str,
        *,
        file_type: str = "png",
        quality: float = 1.0,
        region: Optional[Tuple[float, float, float, float]] = None,
        dest_size: Optional[Tuple[int, int]] = None,
    ) -> str: ...


@contextmanager
def saved_state(surface: DrawingSurface) -> Iterator[DrawingSurface]:
    """Save paint state and restore it on every exit, including exceptions."""
    surface.save()
    try:
        yield surface
    finally:
        surface.restore()
