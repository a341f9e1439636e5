"""Core module - logging, defaults and configuration."""

from .config import (
    CalibrationSettings,
    CameraSettings,
    ConfigLoader,
    LoggingSettings,
    PickerSettings,
    SamplerConfig,
    flatten_config,
    load_config,
    load_config_file,
)
from .logging_utils import (
    StructuredLogger,
    configure_logging,
    ensure_structured_logger,
    get_module_logger,
)

__all__ = [
    "CalibrationSettings",
    "CameraSettings",
    "ConfigLoader",
    "LoggingSettings",
    "PickerSettings",
    "SamplerConfig",
    "StructuredLogger",
    "configure_logging",
    "ensure_structured_logger",
    "flatten_config",
    "get_module_logger",
    "load_config",
    "load_config_file",
]
