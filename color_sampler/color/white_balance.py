"""Per-channel white-balance correction against a reference white pixel."""

from __future__ import annotations

import math
from typing import Callable, Iterable, Optional

from ..core.defaults import DEFAULT_MIN_REFERENCE_LEVEL
from ..core.logging_utils import LoggerLike, ensure_structured_logger
from .convert import CHANNEL_MAX, RGB, clamp_rgb, to_hex

Correction = Callable[[Iterable[float]], RGB]


def _identity(sampled: Iterable[float]) -> RGB:
    return clamp_rgb(sampled)


def channel_scales(reference: Iterable[float]) -> tuple[float, float, float]:
    """Gain per channel that maps ``reference`` to pure white."""
    ref = clamp_rgb(reference)
    return tuple(CHANNEL_MAX / max(channel, 1) for channel in ref)  # type: ignore[return-value]


def make_correction(reference: Optional[Iterable[float]]) -> Correction:
    """Build a correction function for a reference white.

    ``scale = 255 / max(reference, 1)`` per channel and the corrected channel
    is ``round(min(255, sampled * scale))``, rounding halves up. Without a
    reference the correction is the identity.

    A black or near-black reference yields very large gains that saturate
    almost every sample to white. That is accepted; callers decide whether to
    warn about it (see ``is_degenerate_reference``).
    """
    if reference is None:
        return _identity

    # Multiply before dividing so 100 * 255 / 200 stays exactly 127.5.
    div_r, div_g, div_b = (max(channel, 1) for channel in clamp_rgb(reference))

    def correct(sampled: Iterable[float]) -> RGB:
        r, g, b = clamp_rgb(sampled)
        return RGB(
            math.floor(min(CHANNEL_MAX, r * CHANNEL_MAX / div_r) + 0.5),
            math.floor(min(CHANNEL_MAX, g * CHANNEL_MAX / div_g) + 0.5),
            math.floor(min(CHANNEL_MAX, b * CHANNEL_MAX / div_b) + 0.5),
        )

    return correct


def is_degenerate_reference(reference: Iterable[float], min_level: int = DEFAULT_MIN_REFERENCE_LEVEL) -> bool:
    return max(clamp_rgb(reference)) < min_level


class WhiteBalanceCalibrator:
    """Holds the session's reference white and the derived correction."""

    def __init__(
        self,
        *,
        min_reference_level: int = DEFAULT_MIN_REFERENCE_LEVEL,
        logger: LoggerLike = None,
    ) -> None:
        self._reference: Optional[RGB] = None
        self._correction: Correction = _identity
        self._min_reference_level = min_reference_level
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)

    @property
    def reference(self) -> Optional[RGB]:
        return self._reference

    @property
    def has_reference(self) -> bool:
        return self._reference is not None

    def set_reference(self, reference: Iterable[float]) -> RGB:
        ref = clamp_rgb(reference)
        if is_degenerate_reference(ref, self._min_reference_level):
            self._logger.warning(
                "White reference #%s is very dark; corrected colors will saturate",
                to_hex(ref),
            )
        self._reference = ref
        self._correction = make_correction(ref)
        self._logger.info("White reference set to #%s", to_hex(ref))
        return ref

    def clear(self) -> None:
        if self._reference is not None:
            self._logger.info("White reference cleared")
        self._reference = None
        self._correction = _identity

    def correct(self, sampled: Iterable[float]) -> RGB:
        return self._correction(sampled)


__all__ = [
    "Correction",
    "WhiteBalanceCalibrator",
    "channel_scales",
    "is_degenerate_reference",
    "make_correction",
]
