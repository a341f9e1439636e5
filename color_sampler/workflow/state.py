"""State definitions for the capture/calibration workflow."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional, Union

from ..capture.frame import RasterSurface
from ..color.convert import RGB
from ..errors import CaptureErrorReason


class CapturePhase(Enum):
    """Workflow lifecycle phase."""

    IDLE = auto()
    STREAMING = auto()  # camera open, live feed shown by the presentation layer
    CAPTURED = auto()  # still or upload held, sampler not yet engaged
    CALIBRATING = auto()  # next pointer-up picks the white reference
    SAMPLING = auto()


IMAGE_PHASES = frozenset({CapturePhase.CAPTURED, CapturePhase.CALIBRATING, CapturePhase.SAMPLING})


@dataclass(frozen=True, slots=True)
class Preview:
    """Last successful sample under the pointer (the loupe)."""

    x: float  # display coordinates
    y: float
    hex: str  # what the user would pick
    raw_hex: str  # uncorrected pixel
    native: tuple[int, int]


@dataclass(frozen=True, slots=True)
class Ready:
    value: Any


@dataclass(frozen=True, slots=True)
class Failed:
    reason: CaptureErrorReason
    detail: str = ""
    cancelled: bool = False


AcquireResult = Union[Ready, Failed]


@dataclass
class WorkflowState:
    """Mutable workflow state, owned by CaptureWorkflow."""

    phase: CapturePhase = CapturePhase.IDLE
    acquiring: bool = False
    calibration_armed: bool = False
    surface: Optional[RasterSurface] = None
    white_reference: Optional[RGB] = None
    preview: Optional[Preview] = None
    selected_hex: Optional[str] = None
    error: str = ""

    @property
    def has_image(self) -> bool:
        return self.surface is not None

    @property
    def is_calibrated(self) -> bool:
        return self.white_reference is not None


__all__ = [
    "AcquireResult",
    "CapturePhase",
    "Failed",
    "IMAGE_PHASES",
    "Preview",
    "Ready",
    "WorkflowState",
]
