"""Virtual unit <-> physical pixel conversion for a rendering session."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Optional

DEFAULT_FONT_FAMILY = "sans-serif"

_RPX_TOKEN = re.compile(r"\b(\d+(?:\.\d+)?)rpx\b", re.IGNORECASE)
_TRAILING_SIZE = re.compile(r"\d+(?:\.\d+)?px\s*$", re.IGNORECASE)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class UnitConverter:
    """Maps caller (virtual) units onto device pixels with a fixed scale."""

    scale: float = 2.0
    font_family: str = DEFAULT_FONT_FAMILY

    def __post_init__(self) -> None:
        if not _is_number(self.scale) or not math.isfinite(self.scale) or self.scale <= 0:
            raise ValueError(f"scale must be a finite number > 0 (got {self.scale!r})")

    def to_physical(self, value: Any) -> Any:
        """Scale a virtual length; unset sentinels (None, 0, non-numbers) pass through."""
        if not _is_number(value) or not value:
            return value
        return value * self.scale

    def to_virtual(self, value: float) -> float:
        return value / self.scale

    def css_font(self, value: Any = None) -> Optional[str]:
        """Build a surface font string from a size in virtual units or a CSS-like spec.

        ``28`` becomes ``"56px sans-serif"`` at scale 2, and ``"bold 28rpx"``
        becomes ``"bold 56px sans-serif"``. Strings that already name a family
        keep it.
        """
        if value is None:
            return None
        if _is_number(value):
            return f"{_round_half_up(self.to_physical(value))}px {self.font_family}"
        text = str(value).strip()
        if text.endswith(";"):
            text = text[:-1].rstrip()
        if not text:
            return None
        text = _RPX_TOKEN.sub(lambda match: f"{_round_half_up(self.to_physical(float(match.group(1))))}px", text)
        if _TRAILING_SIZE.search(text):
            text = f"{text} {self.font_family}"
        return text
