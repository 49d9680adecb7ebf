"""Render JSON layout documents through a PosterCanvas.

A document looks like::

    {"width": 750, "height": 1000, "background": "#fff",
     "items": [{"type": "roundRect", "x": 0, "y": 0, "w": 100, "h": 100, "r": 10,
                "fill": "#0f0", "border": "2 solid #000"}]}

All geometry is in virtual units. Items that cannot be drawn are logged and
skipped.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, Sequence

from poster_client.poster import PosterCanvas
from poster_client.style_parser import numeric

LOGGER = logging.getLogger("ModernPoster.Document")

ItemHandler = Callable[[PosterCanvas, Mapping[str, Any]], None]

_IMAGE_KEYS = ("src", "image")


def _pick(item: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in item and item[key] is not None:
            return item[key]
    return default


def _need(item: Mapping[str, Any], *keys: str) -> Any:
    value = _pick(item, *keys)
    if value is None:
        raise KeyError(keys[0])
    return value


def _number(item: Mapping[str, Any], *keys: str) -> float:
    value = _need(item, *keys)
    number = numeric(value)
    if number is None:
        raise ValueError(f"'{keys[0]}' must be a number, got {value!r}")
    return number


def _optional_number(item: Mapping[str, Any], *keys: str) -> Optional[float]:
    if _pick(item, *keys) is None:
        return None
    return _number(item, *keys)


def _style(item: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "fill": _pick(item, "fill", "color"),
        "border": _pick(item, "border"),
        "shadow": _pick(item, "shadow"),
        "image": _pick(item, *_IMAGE_KEYS),
        "padding": _pick(item, "padding"),
    }


def _box(item: Mapping[str, Any]) -> tuple:
    return (
        _number(item, "x"),
        _number(item, "y"),
        _number(item, "w", "width"),
        _number(item, "h", "height"),
    )


def _draw_image(canvas: PosterCanvas, item: Mapping[str, Any]) -> None:
    canvas.image(_need(item, *_IMAGE_KEYS), *_box(item))


def _draw_center_image(canvas: PosterCanvas, item: Mapping[str, Any]) -> None:
    canvas.center_image(_need(item, *_IMAGE_KEYS), *_box(item), _number(item, "areaWidth", "area_width", "cw"))


def _draw_rect(canvas: PosterCanvas, item: Mapping[str, Any]) -> None:
    canvas.rect(*_box(item), **_style(item))


def _draw_round_rect(canvas: PosterCanvas, item: Mapping[str, Any]) -> None:
    canvas.round_rect(*_box(item), _pick(item, "r", "radius", default=0), **_style(item))


def _draw_circle(canvas: PosterCanvas, item: Mapping[str, Any]) -> None:
    canvas.circle(_number(item, "x"), _number(item, "y"), _number(item, "d", "diameter"), **_style(item))


def _draw_ellipse(canvas: PosterCanvas, item: Mapping[str, Any]) -> None:
    canvas.ellipse(*_box(item), **_style(item))


def _draw_text(canvas: PosterCanvas, item: Mapping[str, Any]) -> None:
    canvas.text(
        str(_need(item, "text")),
        _number(item, "x"),
        _number(item, "y"),
        font=_pick(item, "font"),
        color=_pick(item, "color"),
        max_width=_optional_number(item, "maxWidth", "max_width", "w"),
        outline=_pick(item, "outline"),
    )


def _draw_center_text(canvas: PosterCanvas, item: Mapping[str, Any]) -> None:
    canvas.center_text(
        str(_need(item, "text")),
        _number(item, "x"),
        _number(item, "y"),
        _number(item, "w", "width"),
        font=_pick(item, "font"),
        color=_pick(item, "color"),
        outline=_pick(item, "outline"),
    )


def _max_lines(item: Mapping[str, Any]) -> Optional[int]:
    value = _optional_number(item, "maxLines", "max_lines", "ln")
    return None if value is None else int(value)


def _draw_paragraph(canvas: PosterCanvas, item: Mapping[str, Any]) -> None:
    canvas.paragraph(
        str(_need(item, "text")),
        _number(item, "x"),
        _number(item, "y"),
        _number(item, "w", "width"),
        _number(item, "lineHeight", "line_height", "lh"),
        _max_lines(item),
        font=_pick(item, "font"),
        color=_pick(item, "color"),
        outline=_pick(item, "outline"),
    )


ITEM_HANDLERS: Dict[str, ItemHandler] = {
    "image": _draw_image,
    "centerImage": _draw_center_image,
    "rect": _draw_rect,
    "roundRect": _draw_round_rect,
    "circle": _draw_circle,
    "ellipse": _draw_ellipse,
    "text": _draw_text,
    "centerText": _draw_center_text,
    "paragraph": _draw_paragraph,
}
ITEM_HANDLERS.update(
    {
        "center_image": _draw_center_image,
        "round_rect": _draw_round_rect,
        "center_text": _draw_center_text,
    }
)


def collect_image_sources(document: Mapping[str, Any]) -> List[str]:
    """Image sources referenced by the document's items, in item order."""
    sources: List[str] = []
    for item in document.get("items") or []:
        if not isinstance(item, Mapping):
            continue
        for key in _IMAGE_KEYS:
            if item.get(key):
                sources.append(str(item[key]))
                break
    return sources


def apply_image_paths(document: MutableMapping[str, Any], resolved: Sequence[str]) -> None:
    """Replace item image sources with preloaded local paths (same order as collected)."""
    remaining = iter(resolved)
    for item in document.get("items") or []:
        if not isinstance(item, MutableMapping):
            continue
        for key in _IMAGE_KEYS:
            if item.get(key):
                item[key] = next(remaining, item[key])
                break


def render_document(canvas: PosterCanvas, document: Mapping[str, Any]) -> int:
    """Draw every item; returns how many items were drawn."""
    background = document.get("background")
    width = numeric(document.get("width"))
    height = numeric(document.get("height"))
    if background and width and height:
        canvas.rect(0, 0, width, height, fill=str(background))
    drawn = 0
    items = document.get("items") or []
    if not isinstance(items, list):
        LOGGER.warning("Layout document ignored: 'items' must be a list (got %s)", type(items).__name__)
        return 0
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            LOGGER.warning("Layout item %d ignored: expected an object", index)
            continue
        item_type = str(item.get("type") or "")
        handler: Optional[ItemHandler] = ITEM_HANDLERS.get(item_type)
        if handler is None:
            LOGGER.warning("Layout item %d ignored: unknown type %r", index, item_type)
            continue
        try:
            handler(canvas, item)
        except KeyError as exc:
            LOGGER.warning("Layout item %d (%s) ignored: missing %s", index, item_type, exc)
            continue
        except (TypeError, ValueError) as exc:
            LOGGER.warning("Layout item %d (%s) ignored: %s", index, item_type, exc)
            continue
        drawn += 1
    LOGGER.debug("Rendered %d of %d layout item(s)", drawn, len(items))
    return drawn
