"""Unit test fixtures: in-memory surfaces and scriptable capture devices.

Everything here runs without a camera. ``FakeDevice`` stands in for
``capture.camera.Camera`` and can block inside ``open`` until a test releases
it, which is how acquisition cancellation is exercised.
"""

from __future__ import annotations

import asyncio
import io
import threading
from typing import Callable, Optional

import numpy as np
import pytest


# =============================================================================
# Fake capture device
# =============================================================================

class FakeDevice:
    """CaptureDevice double with call counters and optional open and read gates."""

    def __init__(
        self,
        *,
        frame: Optional[np.ndarray] = None,
        open_error: Optional[BaseException] = None,
        read_error: Optional[BaseException] = None,
        block_open: bool = False,
        block_read: bool = False,
    ) -> None:
        self.frame = frame if frame is not None else np.zeros((2, 2, 3), dtype=np.uint8)
        self.open_error = open_error
        self.read_error = read_error
        self.gate = threading.Event()
        if not block_open:
            self.gate.set()
        self.open_started = threading.Event()
        self.read_gate = threading.Event()
        if not block_read:
            self.read_gate.set()
        self.read_started = threading.Event()
        self.open_calls = 0
        self.read_calls = 0
        self.close_calls = 0
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        self.open_calls += 1
        self.open_started.set()
        self.gate.wait(timeout=5.0)
        if self.open_error is not None:
            raise self.open_error
        self._open = True

    def read_frame(self) -> np.ndarray:
        self.read_calls += 1
        self.read_started.set()
        self.read_gate.wait(timeout=5.0)
        if self.read_error is not None:
            raise self.read_error
        return self.frame

    def close(self) -> None:
        self.close_calls += 1
        self._open = False


@pytest.fixture
def fake_device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def device_factory() -> Callable[..., FakeDevice]:
    """Build FakeDevice instances with custom behaviour."""
    return FakeDevice


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll ``predicate`` from the event loop without blocking worker threads."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            return False
        await asyncio.sleep(0.01)
    return True


@pytest.fixture
def wait_for_condition():
    return wait_until


# =============================================================================
# Raster fixtures
# =============================================================================

def make_rgb(width: int, height: int, fill=(0, 0, 0)) -> np.ndarray:
    data = np.empty((height, width, 3), dtype=np.uint8)
    data[:, :] = fill
    return data


@pytest.fixture
def rgb_array() -> Callable[..., np.ndarray]:
    """Factory for ``H x W x 3`` uint8 arrays filled with one color."""
    return make_rgb


@pytest.fixture
def calibration_surface():
    """4x4 surface: top-left pixel is an off-white card, (1, 1) a mid grey."""
    from color_sampler.capture.frame import RasterSurface

    data = make_rgb(4, 4, fill=(10, 20, 30))
    data[0, 0] = (200, 200, 200)
    data[1, 1] = (100, 100, 100)
    return RasterSurface(data)


@pytest.fixture
def png_bytes() -> Callable[..., bytes]:
    """Encode an RGB array as PNG bytes with Pillow."""
    from PIL import Image

    def encode(array: np.ndarray) -> bytes:
        buffer = io.BytesIO()
        Image.fromarray(array).save(buffer, format="PNG")
        return buffer.getvalue()

    return encode
