"""Session configuration helpers for the Modern Poster renderer."""
from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

from poster_client.units import DEFAULT_FONT_FAMILY, UnitConverter

PIXEL_RATIO_ENV_VAR = "MODERN_POSTER_PIXEL_RATIO"
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class PosterSettings:
    """Values fixed for the lifetime of one rendering session."""

    pixel_ratio: float = 1.0
    supersample: float = 2.0
    design_width: float = 750.0
    font_family: str = DEFAULT_FONT_FAMILY
    image_cache_dir: Optional[str] = None
    fetch_timeout: float = 30.0
    log_level: str = "INFO"

    @property
    def scale(self) -> float:
        return self.pixel_ratio * self.supersample

    @classmethod
    def for_screen(cls, screen_width: float, **overrides: Any) -> "PosterSettings":
        """Derive the pixel ratio from a screen width measured in device-independent pixels."""
        settings = cls(**overrides)
        if screen_width <= 0 or settings.design_width <= 0:
            raise ValueError("screen_width and design_width must be > 0")
        return replace(settings, pixel_ratio=float(screen_width) / settings.design_width)

    def converter(self) -> UnitConverter:
        return UnitConverter(scale=self.scale, font_family=self.font_family)


def _float(value: Any, fallback: float) -> float:
    if value is None:
        return fallback
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(numeric):
        return fallback
    return numeric


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def load_settings(settings_path: Optional[Path] = None) -> PosterSettings:
    """Read session settings from a JSON file, falling back to defaults per key."""
    defaults = PosterSettings()
    data: Dict[str, Any] = {}
    if settings_path is not None:
        try:
            raw = settings_path.read_text(encoding="utf-8")
        except (FileNotFoundError, OSError):
            raw = ""
        if raw:
            try:
                loaded = json.loads(raw)
            except json.JSONDecodeError:
                loaded = {}
            if isinstance(loaded, dict):
                data = loaded

    env_ratio = os.getenv(PIXEL_RATIO_ENV_VAR)
    if env_ratio:
        data["pixel_ratio"] = env_ratio

    pixel_ratio = _clamp(_float(data.get("pixel_ratio"), defaults.pixel_ratio), 0.1, 8.0)
    supersample = _clamp(_float(data.get("supersample"), defaults.supersample), 0.5, 4.0)
    design_width = _float(data.get("design_width"), defaults.design_width)
    if design_width <= 0:
        design_width = defaults.design_width
    screen_width = _float(data.get("screen_width"), 0.0)
    if screen_width > 0:
        pixel_ratio = _clamp(screen_width / design_width, 0.1, 8.0)
    fetch_timeout = max(0.0, _float(data.get("fetch_timeout"), defaults.fetch_timeout))

    family = data.get("font_family")
    if not isinstance(family, str) or not family.strip():
        family = defaults.font_family
    cache_dir = data.get("image_cache_dir")
    if not isinstance(cache_dir, str) or not cache_dir.strip():
        cache_dir = defaults.image_cache_dir
    level = str(data.get("log_level") or defaults.log_level).strip().upper()
    if level not in _LOG_LEVELS:
        level = defaults.log_level

    return PosterSettings(
        pixel_ratio=pixel_ratio,
        supersample=supersample,
        design_width=design_width,
        font_family=family.strip(),
        image_cache_dir=cache_dir,
        fetch_timeout=fetch_timeout,
        log_level=level,
    )
