"""RGB / HSV / hex conversion helpers.

Channel math goes through OpenCV's float32 ``cvtColor`` so single-pixel
results agree with whole-frame conversions. In float mode OpenCV reports hue
in degrees [0, 360) and saturation/value in [0, 1]; this module rescales
saturation and value to percentages.

Achromatic colors: OpenCV reports hue 0 when saturation is 0, and saturation
0 when value is 0. That is the converter's rule. Preserving the previous hue
across an achromatic color is the picker's job, not the converter's.

Round trips: RGB to HSV and back returns every channel within 1. HSV to RGB
and back stays within 1 degree of hue and 1 point of saturation and value
when saturation and value are both at least 50%. Below that region the
8-bit RGB step can move hue by up to ``60 / (chroma - 1)`` degrees, where
chroma is the channel spread on the 0-255 scale.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, NamedTuple, Union

import cv2
import numpy as np

from ..errors import InvalidFormat

_HEX_PATTERN = re.compile(r"#?([0-9a-fA-F]{6})")

HUE_RANGE = 360.0
PERCENT_RANGE = 100.0
CHANNEL_MAX = 255


class RGB(NamedTuple):
    r: int
    g: int
    b: int


class HSV(NamedTuple):
    h: float  # degrees, [0, 360)
    s: float  # percent, [0, 100]
    v: float  # percent, [0, 100]


ColorLike = Union[RGB, HSV, str, tuple]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_rgb(values: Iterable[float]) -> RGB:
    """Round and clamp three channel values into [0, 255]."""
    r, g, b = (min(CHANNEL_MAX, max(0, _round_half_up(float(c)))) for c in values)
    return RGB(r, g, b)


def clamp_hsv(values: Iterable[float]) -> HSV:
    """Wrap hue into [0, 360) and clamp saturation/value into [0, 100]."""
    h, s, v = (float(c) for c in values)
    if not math.isfinite(h):
        h = 0.0
    h = h % HUE_RANGE
    s = min(PERCENT_RANGE, max(0.0, s)) if math.isfinite(s) else 0.0
    v = min(PERCENT_RANGE, max(0.0, v)) if math.isfinite(v) else 0.0
    return HSV(h, s, v)


def rgb_to_hsv(rgb: Iterable[float]) -> HSV:
    r, g, b = clamp_rgb(rgb)
    pixel = np.array([[[r, g, b]]], dtype=np.float32) / np.float32(CHANNEL_MAX)
    h, s, v = cv2.cvtColor(pixel, cv2.COLOR_RGB2HSV)[0, 0]
    return clamp_hsv((float(h), float(s) * PERCENT_RANGE, float(v) * PERCENT_RANGE))


def hsv_to_rgb(hsv: Iterable[float]) -> RGB:
    h, s, v = clamp_hsv(hsv)
    pixel = np.array(
        [[[h, s / PERCENT_RANGE, v / PERCENT_RANGE]]],
        dtype=np.float32,
    )
    r, g, b = cv2.cvtColor(pixel, cv2.COLOR_HSV2RGB)[0, 0]
    return clamp_rgb((float(r) * CHANNEL_MAX, float(g) * CHANNEL_MAX, float(b) * CHANNEL_MAX))


def to_hex(color: Union[RGB, HSV, Iterable[float]]) -> str:
    """Canonical hex (uppercase, no ``#``) for an RGB or HSV value.

    Plain tuples are treated as RGB.
    """
    rgb = hsv_to_rgb(color) if isinstance(color, HSV) else clamp_rgb(color)
    return f"{rgb.r:02X}{rgb.g:02X}{rgb.b:02X}"


def parse_hex(text: object) -> RGB:
    """Parse ``RRGGBB`` or ``#RRGGBB`` (any case).

    Raises:
        InvalidFormat: the input is not exactly six hex digits.
    """
    if not isinstance(text, str):
        raise InvalidFormat(text)
    match = _HEX_PATTERN.fullmatch(text.strip())
    if match is None:
        raise InvalidFormat(text)
    digits = match.group(1)
    return RGB(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def is_valid_hex(text: object) -> bool:
    try:
        parse_hex(text)
    except InvalidFormat:
        return False
    return True


def normalize_hex(text: str) -> str:
    return to_hex(parse_hex(text))


def coerce_rgb(color: ColorLike) -> RGB:
    """Accept a hex string, an HSV value or an RGB-like triple."""
    if isinstance(color, str):
        return parse_hex(color)
    if isinstance(color, HSV):
        return hsv_to_rgb(color)
    return clamp_rgb(color)


__all__ = [
    "CHANNEL_MAX",
    "HSV",
    "HUE_RANGE",
    "PERCENT_RANGE",
    "RGB",
    "clamp_hsv",
    "clamp_rgb",
    "coerce_rgb",
    "hsv_to_rgb",
    "is_valid_hex",
    "normalize_hex",
    "parse_hex",
    "rgb_to_hsv",
    "to_hex",
]
