"""Decoding of user-provided images into raster surfaces."""

from __future__ import annotations

import asyncio
import io
from pathlib import Path
from typing import Union

from PIL import Image, ImageOps, UnidentifiedImageError

from ..core.logging_utils import get_module_logger
from .frame import SOURCE_UPLOAD, RasterSurface

logger = get_module_logger(__name__)

ImageInput = Union[str, Path, bytes, bytearray, Image.Image]


def decode_image(source: ImageInput) -> RasterSurface:
    """Decode a path, encoded bytes or Pillow image.

    EXIF orientation is applied so the sampled grid matches what the user sees.

    Raises:
        ValueError: the data is not a readable image, or its pixel data is
            truncated or corrupt.
        OSError: the path cannot be opened.
    """
    if isinstance(source, Image.Image):
        return RasterSurface.from_image(ImageOps.exif_transpose(source), source=SOURCE_UPLOAD)

    if isinstance(source, (bytes, bytearray)):
        stream = io.BytesIO(source)
        label = f"<{len(source)} bytes>"
    else:
        stream = Path(source)
        label = str(source)

    try:
        with Image.open(stream) as image:
            try:
                image.load()
            except OSError as exc:
                raise ValueError(f"Truncated or corrupt image: {label}") from exc
            surface = RasterSurface.from_image(ImageOps.exif_transpose(image), source=SOURCE_UPLOAD)
    except UnidentifiedImageError as exc:
        raise ValueError(f"Not a readable image: {label}") from exc

    logger.info("Decoded image %s (%dx%d)", label, surface.width, surface.height)
    return surface


async def decode_image_async(source: ImageInput) -> RasterSurface:
    return await asyncio.to_thread(decode_image, source)


__all__ = ["ImageInput", "decode_image", "decode_image_async"]
