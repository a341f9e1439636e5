"""Single-pixel sampling from a raster surface at a display coordinate."""

from __future__ import annotations

import math
from typing import Optional

from ..color.convert import RGB
from ..errors import OutOfBounds
from ..pointer import Rect
from .frame import RasterSurface


def map_to_native(
    size: tuple[int, int],
    x: float,
    y: float,
    display_rect: Rect,
) -> tuple[int, int]:
    """Map a display-space point to a native pixel index.

    ``size`` is the surface's native (width, height). The point is offset by
    the rect origin and scaled by ``native / display`` on each axis.

    Raises:
        OutOfBounds: the rect is degenerate or the pixel is outside the grid.
    """
    width, height = size
    if display_rect.is_empty or not (math.isfinite(x) and math.isfinite(y)):
        raise OutOfBounds(x, y, size)

    scale_x = width / display_rect.width
    scale_y = height / display_rect.height
    native_x = math.floor((x - display_rect.left) * scale_x)
    native_y = math.floor((y - display_rect.top) * scale_y)

    if not (0 <= native_x < width and 0 <= native_y < height):
        raise OutOfBounds(x, y, size)
    return native_x, native_y


def sample_pixel(surface: RasterSurface, x: float, y: float, display_rect: Rect) -> RGB:
    """Return the RGB value under a display point. Alpha is dropped."""
    native_x, native_y = map_to_native(surface.size, x, y, display_rect)
    pixel = surface.data[native_y, native_x]
    return RGB(int(pixel[0]), int(pixel[1]), int(pixel[2]))


class PixelSampler:
    """Sampler bound to one surface, used for every pointer event of a session.

    Keeps the last mapped native coordinate for overlay rendering.
    """

    def __init__(self, surface: RasterSurface) -> None:
        self._surface = surface
        self._last_native: Optional[tuple[int, int]] = None

    @property
    def surface(self) -> RasterSurface:
        return self._surface

    @property
    def last_native(self) -> Optional[tuple[int, int]]:
        return self._last_native

    def sample(self, x: float, y: float, display_rect: Rect) -> RGB:
        try:
            native_x, native_y = map_to_native(self._surface.size, x, y, display_rect)
        except OutOfBounds:
            self._last_native = None
            raise
        self._last_native = (native_x, native_y)
        pixel = self._surface.data[native_y, native_x]
        return RGB(int(pixel[0]), int(pixel[1]), int(pixel[2]))


__all__ = ["PixelSampler", "map_to_native", "sample_pixel"]
