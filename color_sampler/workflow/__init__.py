"""Workflow module - capture, calibration and sampling session."""

from .acquisition import DeviceAcquisition
from .controller import CaptureWorkflow, DeviceFactory
from .state import (
    IMAGE_PHASES,
    AcquireResult,
    CapturePhase,
    Failed,
    Preview,
    Ready,
    WorkflowState,
)

__all__ = [
    "AcquireResult",
    "CapturePhase",
    "CaptureWorkflow",
    "DeviceAcquisition",
    "DeviceFactory",
    "Failed",
    "IMAGE_PHASES",
    "Preview",
    "Ready",
    "WorkflowState",
]
