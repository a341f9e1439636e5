"""Capture module - raster surfaces, pixel sampling and image acquisition."""

from .camera import Camera, CaptureDevice
from .frame import SOURCE_CAMERA, SOURCE_UPLOAD, RasterSurface
from .image_source import decode_image, decode_image_async
from .sampler import PixelSampler, map_to_native, sample_pixel

__all__ = [
    "Camera",
    "CaptureDevice",
    "PixelSampler",
    "RasterSurface",
    "SOURCE_CAMERA",
    "SOURCE_UPLOAD",
    "decode_image",
    "decode_image_async",
    "map_to_native",
    "sample_pixel",
]
