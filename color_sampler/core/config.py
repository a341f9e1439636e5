"""Typed configuration for the color sampler."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .defaults import (
    DEFAULT_CAMERA_DEVICE,
    DEFAULT_CAMERA_OPEN_TIMEOUT_S,
    DEFAULT_CAMERA_RESOLUTION,
    DEFAULT_INITIAL_COLOR,
    DEFAULT_LOG_FILE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MIN_REFERENCE_LEVEL,
)
from .logging_utils import LoggerLike, ensure_structured_logger, get_module_logger

logger = get_module_logger(__name__)

Resolution = Tuple[int, int]


@dataclass(slots=True)
class CameraSettings:
    device: int | str = DEFAULT_CAMERA_DEVICE
    resolution: Resolution = DEFAULT_CAMERA_RESOLUTION
    open_timeout_s: float = DEFAULT_CAMERA_OPEN_TIMEOUT_S


@dataclass(slots=True)
class PickerSettings:
    initial_color: str = DEFAULT_INITIAL_COLOR


@dataclass(slots=True)
class CalibrationSettings:
    min_reference_level: int = DEFAULT_MIN_REFERENCE_LEVEL


@dataclass(slots=True)
class LoggingSettings:
    level: str = DEFAULT_LOG_LEVEL
    file: Optional[Path] = DEFAULT_LOG_FILE


@dataclass(slots=True)
class SamplerConfig:
    camera: CameraSettings = field(default_factory=CameraSettings)
    picker: PickerSettings = field(default_factory=PickerSettings)
    calibration: CalibrationSettings = field(default_factory=CalibrationSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# ---------------------------------------------------------------------------
# Public API


def load_config(
    values: Optional[Dict[str, Any]] = None,
    overrides: Optional[Dict[str, Any]] = None,
    *,
    logger: LoggerLike = None,
) -> SamplerConfig:
    """Build a typed config from flat ``section.key`` values + optional overrides."""

    log = ensure_structured_logger(logger, fallback_name=__name__)
    merged: Dict[str, Any] = dict(values or {})
    if overrides:
        for key, value in overrides.items():
            if value is not None:
                merged[key] = value

    camera = CameraSettings(
        device=_coerce_device(merged, ("camera.device", "camera_device"), DEFAULT_CAMERA_DEVICE),
        resolution=_coerce_resolution(
            merged,
            ("camera.resolution", "camera_resolution"),
            default=DEFAULT_CAMERA_RESOLUTION,
            logger=log,
        ),
        open_timeout_s=_coerce_float(
            merged,
            ("camera.open_timeout_s",),
            DEFAULT_CAMERA_OPEN_TIMEOUT_S,
            logger=log,
        ),
    )

    picker = PickerSettings(
        initial_color=_coerce_hex(merged, ("picker.initial_color", "initial_color"), DEFAULT_INITIAL_COLOR, logger=log),
    )

    calibration = CalibrationSettings(
        min_reference_level=_coerce_int(
            merged,
            ("calibration.min_reference_level",),
            DEFAULT_MIN_REFERENCE_LEVEL,
            logger=log,
        ),
    )

    logging_settings = LoggingSettings(
        level=_coerce_str(merged, ("logging.level", "log_level"), DEFAULT_LOG_LEVEL),
        file=_coerce_optional_path(merged, ("logging.file", "log_file"), DEFAULT_LOG_FILE),
    )

    return SamplerConfig(
        camera=camera,
        picker=picker,
        calibration=calibration,
        logging=logging_settings,
    )


def flatten_config(config: SamplerConfig) -> Dict[str, Any]:
    """Inverse of :func:`load_config`, suitable for ``ConfigLoader.write``."""
    return {
        "camera.device": config.camera.device,
        "camera.resolution": f"{config.camera.resolution[0]}x{config.camera.resolution[1]}",
        "camera.open_timeout_s": config.camera.open_timeout_s,
        "picker.initial_color": config.picker.initial_color,
        "calibration.min_reference_level": config.calibration.min_reference_level,
        "logging.level": config.logging.level,
        "logging.file": str(config.logging.file) if config.logging.file else "",
    }


class ConfigLoader:
    """Reader/writer for ``key = value`` config text files."""

    @staticmethod
    async def load_async(config_path: Path) -> Dict[str, Any]:
        return await asyncio.to_thread(ConfigLoader.load, config_path)

    @staticmethod
    def load(config_path: Path) -> Dict[str, Any]:
        config: Dict[str, Any] = {}
        config_path = Path(config_path)

        if not config_path.exists():
            logger.debug("Config file not found at %s, using defaults", config_path)
            return config

        logger.debug("Loading config from: %s", config_path)

        with open(config_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()

                if not line or line.startswith("#"):
                    continue

                if "=" not in line:
                    logger.warning(
                        "Invalid config line %d (missing '='): %s",
                        line_num, line
                    )
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()

                # Trailing comments need whitespace before '#' so hex colors survive.
                if " #" in value:
                    value = value.split(" #", 1)[0].strip()

                config[key] = value

        logger.info("Loaded config from %s (%d values)", config_path, len(config))
        return config

    @staticmethod
    def write(config_path: Path, values: Dict[str, Any]) -> None:
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [f"{key} = {value}" for key, value in sorted(values.items())]
        config_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        logger.debug("Wrote %d values to %s", len(values), config_path)


def load_config_file(
    config_path: Optional[Path],
    overrides: Optional[Dict[str, Any]] = None,
) -> SamplerConfig:
    values = ConfigLoader.load(config_path) if config_path else {}
    return load_config(values, overrides)


# ---------------------------------------------------------------------------
# Internal helpers


def _first_present(data: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _coerce_str(data: Dict[str, Any], keys: Tuple[str, ...], default: str) -> str:
    raw = _first_present(data, keys)
    if raw is None:
        return default
    text = str(raw).strip()
    return text or default


def _coerce_int(data: Dict[str, Any], keys: Tuple[str, ...], default: int, *, logger) -> int:
    raw = _first_present(data, keys)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning("Failed to parse int from %r, using default %s", raw, default)
        return default


def _coerce_float(data: Dict[str, Any], keys: Tuple[str, ...], default: float, *, logger) -> float:
    raw = _first_present(data, keys)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning("Failed to parse float from %r, using default %s", raw, default)
        return default


def _coerce_device(data: Dict[str, Any], keys: Tuple[str, ...], default: int | str) -> int | str:
    raw = _first_present(data, keys)
    if raw is None or raw == "":
        return default
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    return int(text) if text.isdigit() else text


def _coerce_hex(data: Dict[str, Any], keys: Tuple[str, ...], default: str, *, logger) -> str:
    from ..color.convert import is_valid_hex, normalize_hex

    raw = _first_present(data, keys)
    if raw is None or raw == "":
        return default
    if not is_valid_hex(str(raw)):
        logger.warning("Ignoring invalid color %r, using default %s", raw, default)
        return default
    return normalize_hex(str(raw))


def _coerce_optional_path(data: Dict[str, Any], keys: Tuple[str, ...], default: Optional[Path]) -> Optional[Path]:
    raw = _first_present(data, keys)
    if raw is None or raw == "":
        return default
    return Path(str(raw))


def _coerce_resolution(
    data: Dict[str, Any],
    keys: Tuple[str, ...],
    *,
    default: Resolution,
    logger,
) -> Resolution:
    raw = _first_present(data, keys)
    if raw is None:
        return default
    try:
        width, height = _parse_resolution(raw)
    except (TypeError, ValueError):
        logger.warning("Failed to parse resolution from %r, using default %s", raw, default)
        return default
    if width <= 0 or height <= 0:
        logger.warning("Resolution %r must be positive, using default %s", raw, default)
        return default
    return width, height


def _parse_resolution(raw: Any) -> Resolution:
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        return int(raw[0]), int(raw[1])
    if isinstance(raw, str) and "x" in raw.lower():
        width, height = raw.lower().split("x", 1)
        return int(width.strip()), int(height.strip())
    if isinstance(raw, str) and "," in raw:
        width, height = raw.split(",", 1)
        return int(width.strip()), int(height.strip())
    raise ValueError(f"Unsupported resolution value: {raw!r}")


__all__ = [
    "CalibrationSettings",
    "CameraSettings",
    "ConfigLoader",
    "LoggingSettings",
    "PickerSettings",
    "SamplerConfig",
    "flatten_config",
    "load_config",
    "load_config_file",
]
