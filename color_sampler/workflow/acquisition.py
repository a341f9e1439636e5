"""Cancellation-safe opening of a blocking capture device."""

from __future__ import annotations

import threading

from ..capture.camera import CaptureDevice
from ..core.logging_utils import get_module_logger
from ..errors import CaptureErrorReason, DeviceUnavailable

logger = get_module_logger(__name__)


class DeviceAcquisition:
    """One attempt at opening ``device``.

    ``open`` runs in a worker thread; ``abandon`` runs on the event loop when
    the awaiting coroutine is cancelled or times out. Whichever side observes
    the other second closes the device, so an open that completes after the
    caller gave up never leaves the camera held.
    """

    def __init__(self, device: CaptureDevice) -> None:
        self.device = device
        self._lock = threading.Lock()
        self._abandoned = False
        self._opened = False

    @property
    def abandoned(self) -> bool:
        with self._lock:
            return self._abandoned

    def open(self) -> CaptureDevice:
        self.device.open()
        with self._lock:
            release = self._abandoned
            self._opened = not release
        if release:
            logger.info("Device opened after acquisition was abandoned; releasing")
            self.device.close()
            raise DeviceUnavailable(CaptureErrorReason.UNKNOWN, "acquisition abandoned")
        return self.device

    def abandon(self) -> None:
        with self._lock:
            self._abandoned = True
            opened = self._opened
        if opened:
            self.device.close()


__all__ = ["DeviceAcquisition"]
