"""Error conditions raised by the color sampler core.

None of these are fatal. ``InvalidFormat`` and ``OutOfBounds`` are expected
during normal interaction (half-typed hex strings, pointers drifting past an
image edge) and are recovered by the caller. Device errors are surfaced to the
user as a dismissible notice through ``on_capture_error``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class CaptureErrorReason(str, Enum):
    """Coarse reason reported to ``on_capture_error`` listeners."""

    PERMISSION_DENIED = "permission-denied"
    NO_DEVICE = "no-device"
    UNKNOWN = "unknown"


class ColorSamplerError(Exception):
    """Base class for all color sampler conditions."""


class InvalidFormat(ColorSamplerError, ValueError):
    """A hex color string is not six hexadecimal digits."""

    def __init__(self, text: object) -> None:
        super().__init__(f"Invalid hex color: {text!r}")
        self.text = text


class OutOfBounds(ColorSamplerError, IndexError):
    """A display point maps outside the native pixel grid of a surface."""

    def __init__(self, x: float, y: float, size: tuple[int, int]) -> None:
        super().__init__(f"Point ({x}, {y}) outside surface {size[0]}x{size[1]}")
        self.x = x
        self.y = y
        self.size = size


class DeviceUnavailable(ColorSamplerError):
    """A capture device could not be acquired or stopped delivering frames."""

    def __init__(
        self,
        reason: CaptureErrorReason = CaptureErrorReason.UNKNOWN,
        detail: Optional[str] = None,
    ) -> None:
        message = reason.value if not detail else f"{reason.value}: {detail}"
        super().__init__(message)
        self.reason = reason
        self.detail = detail


class PermissionRevoked(DeviceUnavailable):
    """Capture permission was lost while a session was active."""

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(CaptureErrorReason.PERMISSION_DENIED, detail)


class InvalidTransition(ColorSamplerError):
    """An operation is not permitted in the workflow's current phase."""

    def __init__(self, operation: str, phase: object) -> None:
        super().__init__(f"Cannot {operation} while {phase}")
        self.operation = operation
        self.phase = phase


__all__ = [
    "CaptureErrorReason",
    "ColorSamplerError",
    "DeviceUnavailable",
    "InvalidFormat",
    "InvalidTransition",
    "OutOfBounds",
    "PermissionRevoked",
]
