"""Flush a poster canvas and write its committed raster to a file."""
from __future__ import annotations

import logging
import os
import tempfile
from typing import TYPE_CHECKING, Any, Dict, Optional

from poster_client.results import Failure, Result, Success

if TYPE_CHECKING:
    from poster_client.poster import PosterCanvas

LOGGER = logging.getLogger("ModernPoster.Export")


def _temp_path(file_type: str) -> str:
    suffix = ".jpg" if file_type.lower() in {"jpg", "jpeg"} else ".png"
    handle, path = tempfile.mkstemp(prefix="poster-", suffix=suffix)
    os.close(handle)
    return path


def _region(canvas: "PosterCanvas", x: Any, y: Any, width: Any, height: Any) -> Optional[tuple]:
    if x is None and y is None and width is None and height is None:
        return None
    surface_width = getattr(canvas.surface, "width", None)
    surface_height = getattr(canvas.surface, "height", None)
    left = float(x or 0)
    top = float(y or 0)
    if (width is None and surface_width is None) or (height is None and surface_height is None):
        return None
    return (
        left,
        top,
        float(width) if width is not None else float(surface_width) - left,
        float(height) if height is not None else float(surface_height) - top,
    )


async def export_raster(
    canvas: "PosterCanvas",
    *,
    path: Optional[str] = None,
    file_type: str = "png",
    quality: float = 1.0,
    x: Optional[float] = None,
    y: Optional[float] = None,
    width: Optional[float] = None,
    height: Optional[float] = None,
    dest_width: Optional[int] = None,
    dest_height: Optional[int] = None,
) -> Result[Dict[str, str]]:
    """Commit pending drawing, then save the raster.

    Region and destination sizes are physical pixels. Returns
    ``Success({"path": ...})`` or ``Failure(error)``; errors are never raised.
    """
    try:
        await canvas.flush()
        target = path or _temp_path(file_type)
        dest_size = None
        if dest_width and dest_height:
            dest_size = (int(dest_width), int(dest_height))
        written = canvas.surface.save_to_file(
            target,
            file_type=file_type,
            quality=quality,
            region=_region(canvas, x, y, width, height),
            dest_size=dest_size,
        )
    except Exception as exc:
        LOGGER.warning("Raster export failed: %s", exc)
        return Failure(exc)
    LOGGER.debug("Raster exported to %s", written)
    return Success({"path": written})
