"""
Sensor Signal-Conditioning Module

Turns noisy, high-frequency device orientation / motion events into a
stable state for the bubble level and sensor dashboard.

Components:
- smooth / smooth_axes: exponential smoothing per axis
- SignalAggregator: latest smoothed orientation, motion, rotation rate
- RenderScheduler: at most one published snapshot per frame
- PermissionGate: user consent before sensor streams open
- remap_axes / read_level: device-frame tilt to screen-frame tilt
- SensorPipeline: everything wired to a SensorPlatform
"""

from .aggregator import SignalAggregator
from .permission import ConsentError, PermissionGate
from .pipeline import SensorPipeline
from .platform import MockPlatform, SensorPlatform
from .remapper import LevelReading, ScreenOrientationTracker, is_level, read_level, remap_axes
from .scheduler import ManualFrameClock, RenderScheduler, ThreadedFrameClock
from .smoothing import DEFAULT_SMOOTHING_FACTOR, smooth, smooth_axes
from .types import (
    MotionSample,
    OrientationSample,
    PermissionState,
    RotationRateSample,
    SensorSnapshot,
)

__all__ = [
    'SignalAggregator',
    'ConsentError',
    'PermissionGate',
    'SensorPipeline',
    'MockPlatform',
    'SensorPlatform',
    'LevelReading',
    'ScreenOrientationTracker',
    'is_level',
    'read_level',
    'remap_axes',
    'ManualFrameClock',
    'RenderScheduler',
    'ThreadedFrameClock',
    'DEFAULT_SMOOTHING_FACTOR',
    'smooth',
    'smooth_axes',
    'MotionSample',
    'OrientationSample',
    'PermissionState',
    'RotationRateSample',
    'SensorSnapshot',
]
__version__ = '0.1.0'
