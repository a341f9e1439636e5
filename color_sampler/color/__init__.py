"""Color module - representation conversions and white balance."""

from .convert import (
    HSV,
    RGB,
    clamp_hsv,
    clamp_rgb,
    coerce_rgb,
    hsv_to_rgb,
    is_valid_hex,
    normalize_hex,
    parse_hex,
    rgb_to_hsv,
    to_hex,
)
from .white_balance import WhiteBalanceCalibrator, make_correction

__all__ = [
    "HSV",
    "RGB",
    "WhiteBalanceCalibrator",
    "clamp_hsv",
    "clamp_rgb",
    "coerce_rgb",
    "hsv_to_rgb",
    "is_valid_hex",
    "make_correction",
    "normalize_hex",
    "parse_hex",
    "rgb_to_hsv",
    "to_hex",
]
