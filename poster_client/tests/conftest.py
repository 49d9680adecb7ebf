from __future__ import annotations

import os
from typing import Any, Callable, List, Optional, Tuple

import pytest

from poster_client.surface import DrawingSurface


class RecordingSurface(DrawingSurface):
    """Records every surface call; text is measured as ``len(text) * char_width``."""

    def __init__(self, *, char_width: float = 10.0, width: int = 400, height: int = 300) -> None:
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.char_width = char_width
        self.width = width
        self.height = height
        self.depth = 0
        self.fail_on: Optional[str] = None
        self.commit_callbacks: List[Callable[[], None]] = []
        self.defer_commit = False

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if self.fail_on == name:
            raise RuntimeError(f"{name} failed")

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def args_of(self, name: str) -> List[Tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]

    def begin_path(self) -> None:
        self._record("begin_path")

    def move_to(self, x, y) -> None:
        self._record("move_to", x, y)

    def line_to(self, x, y) -> None:
        self._record("line_to", x, y)

    def arc(self, cx, cy, radius, start, end) -> None:
        self._record("arc", cx, cy, radius, start, end)

    def rect(self, x, y, w, h) -> None:
        self._record("rect", x, y, w, h)

    def close_path(self) -> None:
        self._record("close_path")

    def set_fill_color(self, color) -> None:
        self._record("set_fill_color", color)

    def set_stroke_color(self, color) -> None:
        self._record("set_stroke_color", color)

    def set_line_width(self, width) -> None:
        self._record("set_line_width", width)

    def set_line_dash(self, pattern) -> None:
        self._record("set_line_dash", tuple(pattern))

    def set_shadow(self, offset_x, offset_y, blur, color) -> None:
        self._record("set_shadow", offset_x, offset_y, blur, color)

    def fill(self) -> None:
        self._record("fill")

    def stroke(self) -> None:
        self._record("stroke")

    def clip(self) -> None:
        self._record("clip")

    def draw_image(self, source, x, y, w, h) -> None:
        self._record("draw_image", source, x, y, w, h)

    def set_font(self, font) -> None:
        self._record("set_font", font)

    def set_text_baseline(self, baseline) -> None:
        self._record("set_text_baseline", baseline)

    def set_text_align(self, align) -> None:
        self._record("set_text_align", align)

    def measure_text(self, text) -> float:
        return len(text) * self.char_width

    def fill_text(self, text, x, y, max_width=None) -> None:
        self._record("fill_text", text, x, y, max_width)

    def stroke_text(self, text, x, y, max_width=None) -> None:
        self._record("stroke_text", text, x, y, max_width)

    def translate(self, dx, dy) -> None:
        self._record("translate", dx, dy)

    def scale(self, sx, sy) -> None:
        self._record("scale", sx, sy)

    def save(self) -> None:
        self.depth += 1
        self._record("save")

    def restore(self) -> None:
        self.depth -= 1
        self._record("restore")

    def commit(self, callback, reserve=False) -> None:
        self._record("commit", reserve)
        if self.defer_commit:
            self.commit_callbacks.append(callback)
        else:
            callback()

    def save_to_file(self, path, *, file_type="png", quality=1.0, region=None, dest_size=None) -> str:
        self._record("save_to_file", path, file_type, quality, region, dest_size)
        return path


@pytest.fixture
def recording_surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture(scope="session")
def qt_app():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PyQt6.QtGui import QGuiApplication

    app = QGuiApplication.instance()
    if app is None:
        app = QGuiApplication([])
    yield app
