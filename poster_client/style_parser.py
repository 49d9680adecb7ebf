"""Lenient parsing of border, shadow and corner-radius style arguments.

Style arguments arrive from callers in several shapes (a bare number, a
space-delimited token string, a tuple of corner values, or nothing). They are
coerced once into a tagged variant and then parsed into structured records.
Unrecognised tokens are dropped; parsing never raises.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

from poster_client.units import UnitConverter

LOGGER = logging.getLogger("ModernPoster.Style")

BORDER_STYLES = ("solid", "dashed")
DEFAULT_COLOR = "#000"

_COLOR_TOKEN = re.compile(r"^(?:#|rgba?|transparent)", re.IGNORECASE)
_LEADING_INT = re.compile(r"^[+-]?\d+")
_TOKEN = re.compile(r"[^\s(]*\([^)]*\)\S*|\S+")


@dataclass(frozen=True)
class Absent:
    pass


@dataclass(frozen=True)
class Scalar:
    value: float


@dataclass(frozen=True)
class Spec:
    text: str


@dataclass(frozen=True)
class Corners:
    values: Tuple[Any, ...]


StyleArg = Union[Absent, Scalar, Spec, Corners]
ABSENT = Absent()


@dataclass(frozen=True)
class Border:
    width: float = 1
    style: str = "solid"
    color: str = DEFAULT_COLOR

    @property
    def dashed(self) -> bool:
        return self.style == "dashed"

    def dash_pattern(self) -> Tuple[float, float]:
        return (self.width * 2, self.width * 4)


@dataclass(frozen=True)
class Shadow:
    offset_x: float = 0
    offset_y: float = 0
    blur: float = 0
    color: str = DEFAULT_COLOR


def coerce_style_arg(value: Any) -> StyleArg:
    """Tag a raw caller value; unsupported shapes count as absent."""
    if isinstance(value, (Absent, Scalar, Spec, Corners)):
        return value
    if value is None:
        return ABSENT
    if isinstance(value, bool):
        LOGGER.debug("Ignoring boolean style argument %r", value)
        return ABSENT
    if isinstance(value, (int, float)):
        return Scalar(value)
    if isinstance(value, str):
        if not value.strip():
            return ABSENT
        return Spec(value)
    if isinstance(value, (list, tuple)):
        return Corners(tuple(value))
    LOGGER.debug("Ignoring unsupported style argument of type %s", type(value).__name__)
    return ABSENT


def is_present(arg: StyleArg) -> bool:
    return not isinstance(arg, Absent)


def is_color(token: str) -> bool:
    return bool(_COLOR_TOKEN.match(token))


def is_border_style(token: str) -> bool:
    return token in BORDER_STYLES


def unitless(token: str) -> Optional[int]:
    """Leading-integer parse: ``"3px"`` -> 3, ``"#fff"`` -> None."""
    match = _LEADING_INT.match(token.strip())
    if match is None:
        return None
    return int(match.group(0))


def numeric(value: Any) -> Optional[float]:
    """Numbers and numeric strings (``"10"``, ``" 2.5 "``) as numbers; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def tokenize(text: str) -> List[str]:
    """Split on whitespace, keeping ``rgba(0, 0, 0, .5)`` style calls whole."""
    return _TOKEN.findall(text)


def parse_border(
    arg: Any,
    converter: UnitConverter,
    *,
    default_width: float = 1,
) -> Border:
    """Parse ``5`` or ``"3 dashed #fff"`` (any token order) into a Border."""
    arg = coerce_style_arg(arg)
    if isinstance(arg, Scalar):
        return Border(width=converter.to_physical(arg.value))
    width: float = default_width
    style = "solid"
    color = DEFAULT_COLOR
    if isinstance(arg, Spec):
        for token in tokenize(arg.text):
            if is_border_style(token):
                style = token
            elif is_color(token):
                color = token
            else:
                numeric = unitless(token)
                if numeric is None:
                    LOGGER.debug("Dropping unrecognised border token %r", token)
                    continue
                width = converter.to_physical(numeric)
    return Border(width=width, style=style, color=color)


def parse_shadow(arg: Any) -> Shadow:
    """Parse ``"2 3 4 #f00"`` into a Shadow.

    Numbers fill offset x, offset y and blur by their token position, so a
    leading colour leaves offset x at its default instead of shifting later
    numbers into it. Shadow values are surface units and are not scaled.
    """
    arg = coerce_style_arg(arg)
    values: List[float] = [0, 0, 0]
    color = DEFAULT_COLOR
    if isinstance(arg, Spec):
        for index, token in enumerate(tokenize(arg.text)):
            numeric = unitless(token)
            if numeric is not None:
                if index < 3:
                    values[index] = numeric
                else:
                    LOGGER.debug("Dropping surplus shadow number %r at position %d", token, index)
            elif is_color(token):
                color = token
            else:
                LOGGER.debug("Dropping unrecognised shadow token %r", token)
    return Shadow(offset_x=values[0], offset_y=values[1], blur=values[2], color=color)


def parse_radii(arg: Any, converter: UnitConverter) -> Tuple[float, float, float, float]:
    """Corner radii (top-left, top-right, bottom-right, bottom-left) in physical pixels.

    A scalar applies to every corner; a shorter sequence leaves the missing
    corners at 0.
    """
    arg = coerce_style_arg(arg)
    if isinstance(arg, Scalar):
        raw: Sequence[Any] = (arg.value,) * 4
    elif isinstance(arg, Corners):
        raw = arg.values[:4]
    elif isinstance(arg, Spec):
        raw = (arg.text,) * 4
    else:
        raw = ()
    radii = [0.0, 0.0, 0.0, 0.0]
    for index, value in enumerate(raw):
        number = numeric(value)
        if number is None:
            LOGGER.debug("Dropping non-numeric corner radius %r", value)
            continue
        radii[index] = converter.to_physical(number)
    return radii[0], radii[1], radii[2], radii[3]
