"""Color conversion, pixel sampling and white-balanced color capture."""

from __future__ import annotations

from importlib import metadata

from .color import HSV, RGB, WhiteBalanceCalibrator, hsv_to_rgb, parse_hex, rgb_to_hsv, to_hex
from .capture import PixelSampler, RasterSurface
from .errors import (
    CaptureErrorReason,
    ColorSamplerError,
    DeviceUnavailable,
    InvalidFormat,
    InvalidTransition,
    OutOfBounds,
    PermissionRevoked,
)
from .picker import PickerInteractionController
from .pointer import PointerPhase, PointerSample, Rect
from .workflow import CapturePhase, CaptureWorkflow

try:
    __version__ = metadata.version("color-sampler")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


__all__ = [
    "HSV",
    "RGB",
    "CaptureErrorReason",
    "CapturePhase",
    "CaptureWorkflow",
    "ColorSamplerError",
    "DeviceUnavailable",
    "InvalidFormat",
    "InvalidTransition",
    "OutOfBounds",
    "PermissionRevoked",
    "PickerInteractionController",
    "PixelSampler",
    "PointerPhase",
    "PointerSample",
    "RasterSurface",
    "Rect",
    "WhiteBalanceCalibrator",
    "__version__",
    "hsv_to_rgb",
    "parse_hex",
    "rgb_to_hsv",
    "to_hex",
]
