"""
Shared default values for the color sampler.

Keep this module lightweight - it's imported by the CLI before OpenCV loads.
"""

DEFAULT_CAMERA_DEVICE = 0
DEFAULT_CAMERA_RESOLUTION = (1920, 1080)  # ideal constraint, camera may deliver less
DEFAULT_CAMERA_OPEN_TIMEOUT_S = 10.0
DEFAULT_INITIAL_COLOR = "8B4513"
DEFAULT_MIN_REFERENCE_LEVEL = 32
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = None
