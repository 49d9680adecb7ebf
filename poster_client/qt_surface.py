"""QPainter-backed implementation of the canvas-style drawing surface."""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from PyQt6.QtCore import QPointF, QRect, QRectF, Qt
from PyQt6.QtGui import (
    QBrush,
    QColor,
    QFont,
    QFontMetricsF,
    QImage,
    QPainter,
    QPainterPath,
    QPen,
    QTransform,
)

from poster_client.surface import DrawingSurface

LOGGER = logging.getLogger("ModernPoster.Surface")

DEFAULT_FONT = "10px sans-serif"

_RGB_FUNC = re.compile(r"^rgba?\(\s*(?P<args>[^)]*)\)$", re.IGNORECASE)
_HEX_ALPHA = re.compile(r"^#(?:[0-9a-fA-F]{4}|[0-9a-fA-F]{8})$")
_FONT_SIZE = re.compile(r"(?P<size>\d+(?:\.\d+)?)px(?:/\S+)?", re.IGNORECASE)
_GENERIC_FAMILIES = {
    "sans-serif": QFont.StyleHint.SansSerif,
    "serif": QFont.StyleHint.Serif,
    "monospace": QFont.StyleHint.Monospace,
    "cursive": QFont.StyleHint.Cursive,
    "fantasy": QFont.StyleHint.Fantasy,
}


def _channel(token: str, scale: float) -> float:
    token = token.strip()
    if token.endswith("%"):
        return float(token[:-1]) / 100.0 * scale
    return float(token)


def parse_color(spec: Any) -> QColor:
    """Parse CSS-style colours (hex, ``rgb()``/``rgba()``, names, ``transparent``)."""
    text = str(spec or "").strip()
    match = _RGB_FUNC.match(text)
    if match:
        parts = [part for part in re.split(r"[\s,/]+", match.group("args").strip()) if part]
        try:
            red, green, blue = (int(round(_channel(part, 255.0))) for part in parts[:3])
            alpha = _channel(parts[3], 1.0) if len(parts) > 3 else 1.0
        except (ValueError, IndexError):
            LOGGER.debug("Invalid colour function %r; using black", spec)
            return QColor(0, 0, 0)
        clamp = lambda value: max(0, min(255, value))  # noqa: E731
        return QColor(clamp(red), clamp(green), clamp(blue), clamp(int(round(alpha * 255))))
    if _HEX_ALPHA.match(text):
        digits = text[1:]
        if len(digits) == 4:
            digits = "".join(ch * 2 for ch in digits)
        red, green, blue, alpha = (int(digits[i : i + 2], 16) for i in range(0, 8, 2))
        return QColor(red, green, blue, alpha)
    color = QColor(text)
    if not color.isValid():
        LOGGER.debug("Invalid colour %r; using black", spec)
        return QColor(0, 0, 0)
    return color


def parse_font(spec: Optional[str]) -> QFont:
    """Build a QFont from ``[style] [weight] <size>px <family, ...>``."""
    text = str(spec or DEFAULT_FONT).strip()
    font = QFont()
    match = _FONT_SIZE.search(text)
    size = 10.0
    families: List[str] = []
    prefix = text
    if match:
        size = float(match.group("size"))
        prefix = text[: match.start()]
        families = [name.strip().strip("'\"") for name in text[match.end() :].split(",")]
        families = [name for name in families if name]
    for token in prefix.lower().split():
        if token in {"bold", "bolder"}:
            font.setBold(True)
        elif token.isdigit() and int(token) >= 600:
            font.setBold(True)
        elif token in {"italic", "oblique"}:
            font.setItalic(True)
    font.setPixelSize(max(1, int(round(size))))
    concrete = [name for name in families if name.lower() not in _GENERIC_FAMILIES]
    generic = next((name.lower() for name in families if name.lower() in _GENERIC_FAMILIES), "sans-serif")
    font.setStyleHint(_GENERIC_FAMILIES[generic])
    if concrete:
        font.setFamilies(concrete)
    return font


@dataclass
class _PaintState:
    fill_color: str = "#000"
    stroke_color: str = "#000"
    line_width: float = 1.0
    line_dash: Tuple[float, ...] = ()
    shadow: Tuple[float, float, float, str] = (0.0, 0.0, 0.0, "#000")
    font: str = DEFAULT_FONT
    baseline: str = "alphabetic"
    align: str = "left"


@dataclass
class _ImageCache:
    images: Dict[str, QImage] = field(default_factory=dict)

    def get(self, source: str) -> QImage:
        image = self.images.get(source)
        if image is None:
            image = QImage(source)
            self.images[source] = image
        return image


class QtPainterSurface(DrawingSurface):
    """Draws onto a pending QImage layer that ``commit`` composites onto the output raster."""

    def __init__(self, width: float, height: float) -> None:
        self.width = max(1, int(math.ceil(width)))
        self.height = max(1, int(math.ceil(height)))
        self._committed = self._blank_image()
        self._pending = self._blank_image()
        self._images = _ImageCache()
        self._painter: Optional[QPainter] = None
        self._state = _PaintState()
        self._stack: List[_PaintState] = []
        self._path = QPainterPath()
        self._begin()

    # lifecycle -----------------------------------------------------------

    def _blank_image(self) -> QImage:
        image = QImage(self.width, self.height, QImage.Format.Format_ARGB32_Premultiplied)
        image.fill(QColor(0, 0, 0, 0))
        return image

    def _begin(self) -> None:
        painter = QPainter(self._pending)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.setRenderHint(QPainter.RenderHint.TextAntialiasing, True)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        self._painter = painter
        self._state = _PaintState()
        self._stack = []
        self._path = QPainterPath()

    @property
    def painter(self) -> QPainter:
        if self._painter is None:
            raise RuntimeError("surface has been closed")
        return self._painter

    def close(self) -> None:
        if self._painter is not None:
            self._painter.end()
            self._painter = None

    def committed_image(self) -> QImage:
        return self._committed

    def commit(self, callback: Callable[[], None], reserve: bool = False) -> None:
        if self._stack:
            LOGGER.warning("Committing with %d unrestored save(s); paint state is reset", len(self._stack))
        self.close()
        if not reserve:
            self._committed.fill(QColor(0, 0, 0, 0))
        compositor = QPainter(self._committed)
        compositor.drawImage(0, 0, self._pending)
        compositor.end()
        self._pending.fill(QColor(0, 0, 0, 0))
        self._begin()
        callback()

    def save_to_file(
        self,
        path: str,
        *,
        file_type: str = "png",
        quality: float = 1.0,
        region: Optional[Tuple[float, float, float, float]] = None,
        dest_size: Optional[Tuple[int, int]] = None,
    ) -> str:
        image = self._committed
        if region is not None:
            x, y, w, h = region
            image = image.copy(QRect(int(x), int(y), max(1, int(round(w))), max(1, int(round(h)))))
        if dest_size is not None:
            image = image.scaled(
                max(1, int(dest_size[0])),
                max(1, int(dest_size[1])),
                Qt.AspectRatioMode.IgnoreAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            )
        fmt = "JPG" if file_type.lower() in {"jpg", "jpeg"} else "PNG"
        if fmt == "JPG":
            flattened = QImage(image.size(), QImage.Format.Format_RGB32)
            flattened.fill(QColor("white"))
            painter = QPainter(flattened)
            painter.drawImage(0, 0, image)
            painter.end()
            image = flattened
            level = max(0, min(100, int(round(quality * 100))))
        else:
            level = -1
        if not image.save(path, fmt, level):
            raise OSError(f"failed to write {fmt} raster to {path}")
        return path

    # path construction ---------------------------------------------------

    def _map(self, x: float, y: float) -> QPointF:
        return self.painter.worldTransform().map(QPointF(x, y))

    def begin_path(self) -> None:
        self._path = QPainterPath()

    def move_to(self, x: float, y: float) -> None:
        self._path.moveTo(self._map(x, y))

    def line_to(self, x: float, y: float) -> None:
        if self._path.elementCount() == 0:
            self.move_to(x, y)
            return
        self._path.lineTo(self._map(x, y))

    def arc(self, cx: float, cy: float, radius: float, start: float, end: float) -> None:
        if radius <= 0:
            self.line_to(cx, cy)
            return
        sweep = end - start
        if sweep >= 2 * math.pi:
            sweep = 2 * math.pi
        elif sweep < 0:
            sweep %= 2 * math.pi
        segment = QPainterPath()
        segment.moveTo(QPointF(cx + radius * math.cos(start), cy + radius * math.sin(start)))
        segment.arcTo(
            QRectF(cx - radius, cy - radius, radius * 2, radius * 2),
            -math.degrees(start),
            -math.degrees(sweep),
        )
        mapped = self.painter.worldTransform().map(segment)
        if self._path.elementCount() == 0:
            self._path = mapped
        else:
            self._path.connectPath(mapped)

    def rect(self, x: float, y: float, w: float, h: float) -> None:
        segment = QPainterPath()
        segment.addRect(QRectF(x, y, w, h))
        self._path.addPath(self.painter.worldTransform().map(segment))

    def close_path(self) -> None:
        self._path.closeSubpath()

    def _user_path(self) -> Optional[QPainterPath]:
        inverted, invertible = self.painter.worldTransform().inverted()
        if not invertible:
            LOGGER.debug("Skipping paint: current transform is not invertible")
            return None
        path = inverted.map(self._path)
        path.setFillRule(Qt.FillRule.WindingFill)
        return path

    # paint state ---------------------------------------------------------

    def set_fill_color(self, color: str) -> None:
        self._state.fill_color = color

    def set_stroke_color(self, color: str) -> None:
        self._state.stroke_color = color

    def set_line_width(self, width: float) -> None:
        self._state.line_width = float(width)

    def set_line_dash(self, pattern: Sequence[float]) -> None:
        self._state.line_dash = tuple(float(value) for value in pattern)

    def set_shadow(self, offset_x: float, offset_y: float, blur: float, color: str) -> None:
        self._state.shadow = (float(offset_x), float(offset_y), float(blur), color)

    def _pen(self, color: str, width: float) -> QPen:
        pen = QPen(parse_color(color))
        pen.setWidthF(width)
        pen.setCapStyle(Qt.PenCapStyle.FlatCap)
        pen.setJoinStyle(Qt.PenJoinStyle.MiterJoin)
        dash = [value / width for value in self._state.line_dash if value > 0]
        if dash:
            if len(dash) % 2:
                dash *= 2
            pen.setDashPattern(dash)
        return pen

    def _shadow_active(self) -> bool:
        offset_x, offset_y, blur, color = self._state.shadow
        return parse_color(color).alpha() > 0 and bool(offset_x or offset_y or blur)

    def _paint_shadow(self, path: QPainterPath, pen: Optional[QPen]) -> None:
        offset_x, offset_y, blur, color = self._state.shadow
        painter = self.painter
        shadow_color = parse_color(color)
        painter.save()
        painter.setWorldTransform(painter.worldTransform() * QTransform.fromTranslate(offset_x, offset_y))
        if pen is None:
            painter.fillPath(path, QBrush(shadow_color))
        else:
            shadow_pen = QPen(pen)
            shadow_pen.setColor(shadow_color)
            painter.strokePath(path, shadow_pen)
        if blur > 0:
            halo = QColor(shadow_color)
            halo.setAlpha(shadow_color.alpha() // 2)
            halo_width = blur if pen is None else pen.widthF() + blur
            halo_pen = QPen(halo)
            halo_pen.setWidthF(halo_width)
            halo_pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
            painter.strokePath(path, halo_pen)
        painter.restore()

    # paint operations ----------------------------------------------------

    def fill(self) -> None:
        path = self._user_path()
        if path is None:
            return
        if self._shadow_active():
            self._paint_shadow(path, None)
        self.painter.fillPath(path, QBrush(parse_color(self._state.fill_color)))

    def stroke(self) -> None:
        width = self._state.line_width
        if width <= 0:
            return
        path = self._user_path()
        if path is None:
            return
        pen = self._pen(self._state.stroke_color, width)
        if self._shadow_active():
            self._paint_shadow(path, pen)
        self.painter.strokePath(path, pen)

    def clip(self) -> None:
        path = self._user_path()
        if path is None:
            return
        self.painter.setClipPath(path, Qt.ClipOperation.IntersectClip)

    def draw_image(self, source: Any, x: float, y: float, w: float, h: float) -> None:
        image = source if isinstance(source, QImage) else self._images.get(str(source))
        if image.isNull():
            LOGGER.warning("Unable to load image %r; skipping draw", source)
            return
        self.painter.drawImage(QRectF(x, y, w, h), image)

    # text ----------------------------------------------------------------

    def set_font(self, font: str) -> None:
        self._state.font = font

    def set_text_baseline(self, baseline: str) -> None:
        self._state.baseline = baseline

    def set_text_align(self, align: str) -> None:
        self._state.align = align

    def measure_text(self, text: str) -> float:
        return QFontMetricsF(parse_font(self._state.font)).horizontalAdvance(text)

    def fill_text(self, text: str, x: float, y: float, max_width: Optional[float] = None) -> None:
        self._draw_text(text, x, y, max_width, stroke=False)

    def stroke_text(self, text: str, x: float, y: float, max_width: Optional[float] = None) -> None:
        if self._state.line_width <= 0:
            return
        self._draw_text(text, x, y, max_width, stroke=True)

    def _draw_text(self, text: str, x: float, y: float, max_width: Optional[float], *, stroke: bool) -> None:
        font = parse_font(self._state.font)
        metrics = QFontMetricsF(font)
        width = metrics.horizontalAdvance(text)
        squeeze = 1.0
        if max_width is not None and max_width > 0 and width > max_width:
            squeeze = max_width / width
        drawn = width * squeeze
        align = self._state.align
        if align == "center":
            left = x - drawn / 2
        elif align in {"right", "end"}:
            left = x - drawn
        else:
            left = x
        baseline = self._state.baseline
        if baseline in {"top", "hanging"}:
            origin_y = y + metrics.ascent()
        elif baseline == "middle":
            origin_y = y + (metrics.ascent() - metrics.descent()) / 2
        elif baseline == "bottom":
            origin_y = y - metrics.descent()
        else:
            origin_y = y
        painter = self.painter
        painter.save()
        painter.translate(left, origin_y)
        if squeeze != 1.0:
            painter.scale(squeeze, 1.0)
        if stroke:
            outline = QPainterPath()
            outline.addText(QPointF(0, 0), font, text)
            pen = QPen(parse_color(self._state.stroke_color))
            pen.setWidthF(self._state.line_width)
            pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
            painter.strokePath(outline, pen)
        else:
            painter.setFont(font)
            painter.setPen(QPen(parse_color(self._state.fill_color)))
            painter.drawText(QPointF(0, 0), text)
        painter.restore()

    # transform and state -------------------------------------------------

    def translate(self, dx: float, dy: float) -> None:
        self.painter.translate(dx, dy)

    def scale(self, sx: float, sy: float) -> None:
        self.painter.scale(sx, sy)

    def save(self) -> None:
        self._stack.append(replace(self._state))
        self.painter.save()

    def restore(self) -> None:
        if not self._stack:
            LOGGER.debug("restore() without matching save(); ignoring")
            return
        self._state = self._stack.pop()
        self.painter.restore()

    @property
    def save_depth(self) -> int:
        return len(self._stack)
