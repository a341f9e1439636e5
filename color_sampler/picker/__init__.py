"""Picker module - direct manipulation of a color via HSV surfaces."""

from .controller import PickerInteractionController, derive_hsv
from .state import (
    Authority,
    AxisOrientation,
    DragTarget,
    PickerState,
    axis_hue,
    axis_orientation,
    plane_values,
)

__all__ = [
    "Authority",
    "AxisOrientation",
    "DragTarget",
    "PickerInteractionController",
    "PickerState",
    "axis_hue",
    "axis_orientation",
    "derive_hsv",
    "plane_values",
]
