"""
Centralized configuration for the sensor level dashboard.

This module provides all configuration constants and runtime settings for:
- Sensor smoothing (exponential moving average factor)
- Render throttling (frame clock refresh rate, snapshot rounding)
- Bubble level presentation values (level threshold, bubble gain, gauges)
- Logging (level and session directory)

The Config class contains all constants as class attributes, making them
accessible throughout the application without instantiation. A handful of
values can be overridden with SENSOR_* environment variables, which is handy
when replaying the mock platform with different tuning.

Usage:
    from utils.config import Config

    factor = Config.SMOOTHING_FACTOR
    if abs(visual_beta) < Config.LEVEL_THRESHOLD_DEG:
        # Front/back axis is level
"""

import os
import logging

log = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    """
    Read a float override from the environment.

    Invalid values are reported and ignored so a typo in the shell never
    prevents the pipeline from starting.

    Returns:
        float: Parsed override or the default
    """
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        log.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


class Config:
    """System configuration constants for the sensor level dashboard."""

    # ==========================================================================
    # SMOOTHING: Exponential moving average applied to every raw axis
    # ==========================================================================

    # Weight of the newest raw sample (0 < factor <= 1, 1.0 = pass-through)
    SMOOTHING_FACTOR = _env_float("SENSOR_SMOOTHING_FACTOR", 0.15)

    # ==========================================================================
    # RENDER: Snapshot publishing
    # ==========================================================================

    # Display refresh rate used by the threaded frame clock
    RENDER_REFRESH_HZ = _env_float("SENSOR_REFRESH_HZ", 60.0)

    # Published precision (orientation in whole degrees, vectors in tenths)
    ORIENTATION_DECIMALS = 0
    MOTION_DECIMALS = 1

    # ==========================================================================
    # LEVEL: Bubble level view
    # ==========================================================================

    # Both screen-frame tilts must be strictly below this to count as level
    LEVEL_THRESHOLD_DEG = _env_float("SENSOR_LEVEL_THRESHOLD", 2.0)

    # Bubble offset = tilt * gain, clamped to +/- limit (percent of radius)
    BUBBLE_GAIN = 2.0
    BUBBLE_LIMIT = 100.0

    # Tilt at which the level gauges read 100%
    GAUGE_MAX_TILT_DEG = 90.0

    # Sensor detail bars: percent per unit of the raw value, capped at 100%
    DETAIL_GAUGE_GAIN = 10.0

    # ==========================================================================
    # LOGGING
    # ==========================================================================

    LOG_LEVEL = os.environ.get("SENSOR_LOG_LEVEL", "INFO").upper()
    LOG_DIR = os.environ.get("SENSOR_LOG_DIR", "logs")

    # ==========================================================================
    # DEMO: Headless mock platform run (src/main.py)
    # ==========================================================================

    DEMO_SENSOR_HZ = 100.0          # Raw event rate emitted by the mock platform
    DEMO_MAX_FRAMES = int(os.environ.get("DEBUG_MAX_FRAMES", "0") or 0)  # 0 = until Ctrl+C
    DEMO_REPORT_EVERY = 30          # Log one level reading every N published frames
