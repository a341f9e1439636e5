"""State definitions for the direct color picker."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from ..color.convert import HSV, HUE_RANGE, PERCENT_RANGE
from ..pointer import Rect


class DragTarget(Enum):
    """Which input surface currently owns the pointer."""

    NONE = auto()
    PLANE = auto()  # saturation x brightness
    AXIS = auto()  # hue


class Authority(Enum):
    """Which side is the source of truth for the color."""

    AT_REST = auto()  # external color prop
    DRAGGING = auto()  # internal HSV snapshot


class AxisOrientation(Enum):
    HORIZONTAL = auto()
    VERTICAL = auto()


@dataclass(frozen=True, slots=True)
class PickerState:
    """Immutable snapshot of the picker."""

    hsv: HSV = HSV(0.0, 0.0, 0.0)
    drag_target: DragTarget = DragTarget.NONE
    hex_text: str = "000000"
    hex_editing: bool = False
    axis_orientation: Optional[AxisOrientation] = None

    @property
    def authority(self) -> Authority:
        if self.drag_target is DragTarget.NONE:
            return Authority.AT_REST
        return Authority.DRAGGING

    @property
    def is_dragging(self) -> bool:
        return self.drag_target is not DragTarget.NONE


# ---------------------------------------------------------------------------
# Pointer-to-value mapping


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def axis_orientation(rect: Rect) -> AxisOrientation:
    """Horizontal when the container is wider than tall, measured per event."""
    return AxisOrientation.HORIZONTAL if rect.is_horizontal else AxisOrientation.VERTICAL


def plane_values(rect: Rect, x: float, y: float) -> tuple[int, int]:
    """(saturation, value) for a point on the plane.

    Left edge is saturation 0, right edge 100; top edge is value 100, bottom 0.
    """
    fx, fy = rect.relative(x, y)
    return round_half_up(fx * PERCENT_RANGE), round_half_up((1.0 - fy) * PERCENT_RANGE)


def axis_hue(rect: Rect, x: float, y: float) -> tuple[int, AxisOrientation]:
    """Hue for a point on the axis, mapped along its longer dimension.

    The far end wraps back to 0 degrees, which is the same red as the start.
    """
    orientation = axis_orientation(rect)
    fx, fy = rect.relative(x, y)
    fraction = fx if orientation is AxisOrientation.HORIZONTAL else fy
    return round_half_up(fraction * HUE_RANGE) % int(HUE_RANGE), orientation


__all__ = [
    "Authority",
    "AxisOrientation",
    "DragTarget",
    "PickerState",
    "axis_hue",
    "axis_orientation",
    "plane_values",
    "round_half_up",
]
