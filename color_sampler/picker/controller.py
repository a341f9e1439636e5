"""Direct color picker controller - drag state machine and direct entry."""

from __future__ import annotations

import math
import re
from dataclasses import replace
from typing import Callable, Optional

from ..color.convert import (
    CHANNEL_MAX,
    HSV,
    HUE_RANGE,
    PERCENT_RANGE,
    RGB,
    ColorLike,
    clamp_hsv,
    coerce_rgb,
    hsv_to_rgb,
    is_valid_hex,
    parse_hex,
    rgb_to_hsv,
    to_hex,
)
from ..core.config import SamplerConfig
from ..core.logging_utils import LoggerLike, ensure_structured_logger
from ..pointer import PointerPhase, PointerSample, Rect
from .state import DragTarget, PickerState, axis_hue, plane_values

ColorCallback = Callable[[str], None]

_LEADING_INT = re.compile(r"\s*([-+]?\d+)")

_HSV_LIMITS = {"h": HUE_RANGE, "s": PERCENT_RANGE, "v": PERCENT_RANGE}
_RGB_FIELDS = ("r", "g", "b")


def _parse_int(value: object) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def derive_hsv(rgb: RGB, previous: HSV) -> HSV:
    """Convert ``rgb`` to HSV, keeping ``previous`` hue across achromatic colors.

    Grey keeps the previous hue; black keeps the previous hue and saturation,
    so a handle parked on a dark or grey color does not snap back to red.
    """
    h, s, v = rgb_to_hsv(rgb)
    if v <= 0:
        return HSV(previous.h, previous.s, v)
    if s <= 0:
        return HSV(previous.h, s, v)
    return HSV(h, s, v)


class PickerInteractionController:
    """Drives a saturation/brightness plane and a hue axis.

    The internal HSV snapshot is authoritative while a drag is active; the
    externally supplied color is authoritative at rest. External updates that
    arrive mid-drag are dropped, not queued.

    Without an explicit ``color`` the picker starts at
    ``config.picker.initial_color``.
    """

    def __init__(
        self,
        color: Optional[ColorLike] = None,
        *,
        config: Optional[SamplerConfig] = None,
        on_change: Optional[ColorCallback] = None,
        logger: LoggerLike = None,
    ) -> None:
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)
        if color is None:
            color = (config or SamplerConfig()).picker.initial_color
        rgb = coerce_rgb(color)
        self._state = PickerState(hsv=rgb_to_hsv(rgb), hex_text=to_hex(rgb))
        self._subscribers: list[ColorCallback] = []
        if on_change is not None:
            self._subscribers.append(on_change)

    # ------------------------------------------------------------------
    # Observers

    def subscribe(self, callback: ColorCallback) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: ColorCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self, hex_color: str) -> None:
        for sub in list(self._subscribers):
            try:
                sub(hex_color)
            except Exception as e:
                self._logger.error("Color subscriber error: %s", e)

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def state(self) -> PickerState:
        return self._state

    @property
    def hsv(self) -> HSV:
        return self._state.hsv

    @property
    def rgb(self) -> RGB:
        return hsv_to_rgb(self._state.hsv)

    @property
    def hex(self) -> str:
        return to_hex(self._state.hsv)

    @property
    def hue_color(self) -> str:
        """Fully saturated color of the current hue, used to paint the plane."""
        return to_hex(HSV(self._state.hsv.h, PERCENT_RANGE, PERCENT_RANGE))

    @property
    def drag_target(self) -> DragTarget:
        return self._state.drag_target

    @property
    def is_dragging(self) -> bool:
        return self._state.is_dragging

    @property
    def hex_text(self) -> str:
        return self._state.hex_text

    @property
    def hex_editing(self) -> bool:
        return self._state.hex_editing

    # ------------------------------------------------------------------
    # Internal updates

    def _apply_hsv(self, hsv: HSV) -> None:
        hsv = clamp_hsv(hsv)
        hex_color = to_hex(hsv)
        if self._state.hex_editing:
            self._state = replace(self._state, hsv=hsv)
        else:
            self._state = replace(self._state, hsv=hsv, hex_text=hex_color)
        self._notify(hex_color)

    def _apply_pointer(self, sample: PointerSample, rect: Rect) -> None:
        h, s, v = self._state.hsv
        target = self._state.drag_target
        if target is DragTarget.PLANE:
            s, v = plane_values(rect, sample.x, sample.y)
        elif target is DragTarget.AXIS:
            h, orientation = axis_hue(rect, sample.x, sample.y)
            if orientation is not self._state.axis_orientation:
                self._logger.debug("Hue axis orientation now %s", orientation.name.lower())
                self._state = replace(self._state, axis_orientation=orientation)
        else:
            return
        self._apply_hsv(HSV(h, s, v))

    # ------------------------------------------------------------------
    # Pointer transitions

    def pointer_down(self, target: DragTarget, sample: PointerSample, rect: Rect) -> None:
        """Engage ``target`` and apply the pointer position immediately."""
        if target is DragTarget.NONE:
            raise ValueError("pointer_down requires a plane or axis target")
        if self._state.drag_target is not target:
            self._logger.debug("Drag started on %s", target.name.lower())
        self._state = replace(self._state, drag_target=target)
        self._apply_pointer(sample, rect)

    def pointer_move(self, sample: PointerSample, rect: Rect) -> bool:
        """Update the dragged component(s). Returns False when idle."""
        if not self._state.is_dragging:
            return False
        self._apply_pointer(sample, rect)
        return True

    def pointer_up(self) -> None:
        if self._state.is_dragging:
            self._logger.debug("Drag ended on %s", self._state.drag_target.name.lower())
            self._state = replace(self._state, drag_target=DragTarget.NONE)

    pointer_leave = pointer_up

    def handle_pointer(self, target: DragTarget, sample: PointerSample, rect: Rect) -> None:
        """Dispatch a unified pointer sample by phase.

        ``target`` identifies the surface the event was delivered to; it only
        matters for ``DOWN``. Moves go to whichever surface owns the drag.
        """
        if sample.phase is PointerPhase.DOWN:
            self.pointer_down(target, sample, rect)
        elif sample.phase is PointerPhase.MOVE:
            self.pointer_move(sample, rect)
        else:
            self.pointer_up()

    # ------------------------------------------------------------------
    # External color

    def set_external_color(self, color: ColorLike) -> bool:
        """Re-derive the snapshot from the consumer's color.

        Ignored while dragging. Returns True when the update was accepted.

        Raises:
            InvalidFormat: ``color`` is a malformed hex string.
        """
        rgb = coerce_rgb(color)
        if self._state.is_dragging:
            self._logger.debug("External color #%s ignored during drag", to_hex(rgb))
            return False

        external_hex = to_hex(rgb)
        hsv = self._state.hsv
        if external_hex != to_hex(hsv):
            hsv = derive_hsv(rgb, hsv)
        if self._state.hex_editing:
            self._state = replace(self._state, hsv=hsv)
        else:
            self._state = replace(self._state, hsv=hsv, hex_text=external_hex)
        return True

    # ------------------------------------------------------------------
    # Direct entry

    def set_component(self, component: str, value: object) -> bool:
        """Numeric entry for one of ``h s v r g b``.

        Non-numeric input is ignored (returns False). Values are clamped to
        the component's range, converted and emitted.
        """
        key = component.strip().lower()
        number = _parse_int(value)
        if number is None:
            return False

        current = self._state.hsv
        if key in _HSV_LIMITS:
            limit = _HSV_LIMITS[key]
            safe = min(limit, max(0, number))
            self._apply_hsv(current._replace(**{key: float(safe)}))
        elif key in _RGB_FIELDS:
            safe = min(CHANNEL_MAX, max(0, number))
            rgb = hsv_to_rgb(current)._replace(**{key: safe})
            self._apply_hsv(derive_hsv(rgb, current))
        else:
            raise ValueError(f"Unknown color component: {component!r}")
        return True

    def focus_hex(self) -> None:
        self._state = replace(self._state, hex_editing=True)

    def edit_hex(self, text: str) -> bool:
        """Keep ``text`` verbatim in the field; apply it once it parses."""
        self._state = replace(self._state, hex_text=text, hex_editing=True)
        if not is_valid_hex(text):
            return False
        rgb = parse_hex(text)
        if to_hex(rgb) == to_hex(self._state.hsv):
            return True
        self._apply_hsv(derive_hsv(rgb, self._state.hsv))
        return True

    def blur_hex(self) -> None:
        """Stop editing and show the normalized form of the current color."""
        self._state = replace(self._state, hex_editing=False, hex_text=to_hex(self._state.hsv))


__all__ = ["ColorCallback", "PickerInteractionController", "derive_hsv"]
