"""Command-line entry point: render a JSON layout document to an image file."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional

from PyQt6.QtGui import QGuiApplication

from poster_client.client_config import PosterSettings, load_settings
from poster_client.document import apply_image_paths, collect_image_sources, render_document
from poster_client.poster import PosterCanvas
from poster_client.qt_surface import QtPainterSurface
from poster_client.style_parser import numeric
from version import __version__, is_dev_build

_LOGGER_NAME = "ModernPoster"
_CLIENT_LOGGER = logging.getLogger(f"{_LOGGER_NAME}.Client")


def configure_logging(level_name: str) -> logging.Handler:
    """Attach a UTC stream handler to the package logger."""
    formatter = logging.Formatter(
        "%(asctime)s.%(msecs)03d UTC - %(levelname)s - %(message)s",
        "%Y-%m-%d %H:%M:%S",
    )
    formatter.converter = time.gmtime
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root = logging.getLogger(_LOGGER_NAME)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name.upper(), logging.INFO))
    return handler


def load_document(path: Path) -> Dict[str, Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: layout document must be a JSON object")
    return data


def _ensure_gui_application() -> QGuiApplication:
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QGuiApplication.instance()
    if app is None:
        app = QGuiApplication(sys.argv[:1])
    return app


async def render_to_file(
    document: Dict[str, Any],
    settings: PosterSettings,
    output: Optional[Path] = None,
) -> int:
    converter = settings.converter()
    width = converter.to_physical(numeric(document.get("width")) or settings.design_width)
    height = converter.to_physical(numeric(document.get("height")) or settings.design_width)
    surface = QtPainterSurface(width, height)
    canvas = PosterCanvas(surface, settings)
    try:
        sources = collect_image_sources(document)
        if sources:
            preload = await canvas.load_images(sources)
            if not preload.ok:
                _CLIENT_LOGGER.error("Image preload failed: %s", preload.error)
                return 2
            apply_image_paths(document, preload.value)

        drawn = render_document(canvas, document)
        file_type = "jpg" if output is not None and output.suffix.lower() in {".jpg", ".jpeg"} else "png"
        result = await canvas.to_image(path=str(output) if output else None, file_type=file_type)
    finally:
        surface.close()
    if not result.ok:
        _CLIENT_LOGGER.error("Export failed: %s", result.error)
        return 3
    _CLIENT_LOGGER.info("Rendered %d item(s) to %s", drawn, result.value["path"])
    print(result.value["path"])
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Modern Poster renderer")
    parser.add_argument("layout", help="Path to a JSON layout document")
    parser.add_argument("-o", "--output", help="Output image path (defaults to a temporary file)")
    parser.add_argument("--settings", help="Path to a JSON settings file")
    parser.add_argument("--pixel-ratio", type=float, help="Override the device pixel ratio")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    settings = load_settings(Path(args.settings).expanduser() if args.settings else None)
    if args.pixel_ratio:
        settings = replace(settings, pixel_ratio=args.pixel_ratio)
    level = "DEBUG" if args.debug or is_dev_build() else settings.log_level
    configure_logging(level)
    _CLIENT_LOGGER.debug(
        "Session scale %.3f (pixel_ratio=%.3f supersample=%.3f)",
        settings.scale,
        settings.pixel_ratio,
        settings.supersample,
    )

    layout_path = Path(args.layout).expanduser()
    try:
        document = load_document(layout_path)
    except (OSError, ValueError) as exc:
        _CLIENT_LOGGER.error("Unable to read layout %s: %s", layout_path, exc)
        return 1

    _ensure_gui_application()
    output = Path(args.output).expanduser() if args.output else None
    return asyncio.run(render_to_file(document, settings, output))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
