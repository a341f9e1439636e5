"""Raster surface data structure."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

import cv2
import numpy as np
from PIL import Image

SOURCE_CAMERA = "camera"
SOURCE_UPLOAD = "upload"


@dataclass(frozen=True, slots=True)
class RasterSurface:
    """Immutable decoded image held for sampling.

    ``data`` is an ``H x W x 3`` (RGB) or ``H x W x 4`` (RGBA) uint8 array and is
    held as a read-only view; the caller's array keeps its own flags.
    """

    data: np.ndarray
    source: str = SOURCE_UPLOAD
    wall_time: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        data = self.data
        if getattr(data, "ndim", None) != 3 or data.shape[2] not in (3, 4):
            raise ValueError(f"Expected RGB(A) image (H, W, 3|4), got shape {getattr(data, 'shape', None)}")
        if data.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {data.dtype}")
        view = data.view()
        view.flags.writeable = False
        object.__setattr__(self, "data", view)

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) in native pixels."""
        return self.width, self.height

    @classmethod
    def from_bgr(cls, frame: np.ndarray, *, source: str = SOURCE_CAMERA) -> "RasterSurface":
        """Wrap an OpenCV frame (BGR or BGRA byte order)."""
        if getattr(frame, "ndim", None) != 3:
            raise ValueError("Expected a 3-dimensional frame")
        if frame.shape[2] == 4:
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGRA2RGBA)
        else:
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        return cls(data=np.ascontiguousarray(rgb), source=source)

    @classmethod
    def from_image(cls, image: Image.Image, *, source: str = SOURCE_UPLOAD) -> "RasterSurface":
        """Wrap a Pillow image, converting palette/greyscale modes to RGB."""
        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA" if "A" in image.getbands() else "RGB")
        return cls(data=np.array(image, dtype=np.uint8), source=source)


__all__ = ["RasterSurface", "SOURCE_CAMERA", "SOURCE_UPLOAD"]
