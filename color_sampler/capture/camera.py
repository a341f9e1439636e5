"""Camera capture using OpenCV."""

from __future__ import annotations

import os
import sys

# Disable MSMF hardware transforms on Windows to fix slow camera initialization.
# See: https://github.com/opencv/opencv/issues/17687
if sys.platform == "win32":
    os.environ.setdefault("OPENCV_VIDEOIO_MSMF_ENABLE_HW_TRANSFORMS", "0")

import threading
import time
from typing import Optional, Protocol, runtime_checkable

import cv2
import numpy as np

from ..core.defaults import DEFAULT_CAMERA_DEVICE, DEFAULT_CAMERA_RESOLUTION
from ..core.logging_utils import get_module_logger
from ..errors import CaptureErrorReason, DeviceUnavailable, PermissionRevoked

logger = get_module_logger(__name__)


@runtime_checkable
class CaptureDevice(Protocol):
    """Blocking capture device. The workflow calls these from an executor."""

    @property
    def is_open(self) -> bool: ...

    def open(self) -> None:
        """Acquire the device. Raises DeviceUnavailable on failure."""

    def read_frame(self) -> np.ndarray:
        """Return one frame in OpenCV (BGR) byte order."""

    def close(self) -> None:
        """Release the device. Must be idempotent."""


class Camera:
    """Still-capture camera backed by ``cv2.VideoCapture``.

    ``resolution`` is a preference passed to the driver; the camera may
    deliver something smaller. ``close`` is idempotent and may be called from
    any thread.
    """

    def __init__(
        self,
        device: int | str = DEFAULT_CAMERA_DEVICE,
        resolution: tuple[int, int] = DEFAULT_CAMERA_RESOLUTION,
        *,
        read_attempts: int = 5,
    ) -> None:
        self._device = device
        self._resolution = resolution
        self._read_attempts = max(1, read_attempts)
        self._cap: Optional[cv2.VideoCapture] = None
        self._lock = threading.Lock()
        self._actual_resolution = resolution

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._cap is not None and self._cap.isOpened()

    @property
    def resolution(self) -> tuple[int, int]:
        """Actual camera resolution (requested value until opened)."""
        return self._actual_resolution

    def open(self) -> None:
        device = self._device
        if isinstance(device, str) and device.isdigit():
            device = int(device)

        start_time = time.time()
        try:
            if sys.platform == "win32":
                cap = cv2.VideoCapture(device, cv2.CAP_MSMF)
            else:
                cap = cv2.VideoCapture(device)
        except PermissionError as exc:
            raise DeviceUnavailable(CaptureErrorReason.PERMISSION_DENIED, str(exc)) from exc
        except cv2.error as exc:
            raise DeviceUnavailable(CaptureErrorReason.UNKNOWN, str(exc)) from exc
        logger.debug("cv2.VideoCapture(%s) took %.2f seconds", device, time.time() - start_time)

        if cap is None or not cap.isOpened():
            if cap is not None:
                cap.release()
            logger.error("Failed to open camera: %s", self._device)
            raise DeviceUnavailable(CaptureErrorReason.NO_DEVICE, f"camera {self._device!r} not available")

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._resolution[0])
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._resolution[1])
        # Reduce internal buffer so a still is the current scene, not a stale frame
        cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

        self._actual_resolution = (
            int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )
        with self._lock:
            self._cap = cap

        logger.info(
            "Camera opened: device=%s, resolution=%dx%d",
            self._device,
            *self._actual_resolution,
        )

    def read_frame(self) -> np.ndarray:
        with self._lock:
            cap = self._cap
        if cap is None or not cap.isOpened():
            raise PermissionRevoked("camera is no longer open")

        for _ in range(self._read_attempts):
            try:
                ret, frame = cap.read()
            except cv2.error as exc:
                raise DeviceUnavailable(CaptureErrorReason.UNKNOWN, str(exc)) from exc
            if ret and frame is not None:
                return frame
            time.sleep(0.01)
        raise DeviceUnavailable(CaptureErrorReason.UNKNOWN, "camera returned no frame")

    def close(self) -> None:
        with self._lock:
            cap, self._cap = self._cap, None
        if cap is not None:
            cap.release()
            logger.info("Camera closed")


__all__ = ["Camera", "CaptureDevice"]
