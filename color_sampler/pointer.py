"""Input-agnostic pointer primitives.

Mouse, touch and pen events are reduced to a ``PointerSample`` by the
presentation layer so controllers never see a specific input API.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PointerPhase(Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    LEAVE = "leave"


@dataclass(frozen=True, slots=True)
class PointerSample:
    x: float
    y: float
    phase: PointerPhase = PointerPhase.MOVE


@dataclass(frozen=True, slots=True)
class Rect:
    """Rendered bounding rectangle in display coordinates."""

    left: float
    top: float
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def is_horizontal(self) -> bool:
        return self.width > self.height

    def relative(self, x: float, y: float) -> tuple[float, float]:
        """Position of ``(x, y)`` as fractions of the rect, clamped to [0, 1]."""
        if self.is_empty:
            return 0.0, 0.0
        fx = (x - self.left) / self.width
        fy = (y - self.top) / self.height
        return min(1.0, max(0.0, fx)), min(1.0, max(0.0, fy))


__all__ = ["PointerPhase", "PointerSample", "Rect"]
