"""
Value types shared by the sensor pipeline.

All samples are device-frame readings. Snapshots are immutable and replaced
wholesale on every publish, so a consumer holding a reference never sees a
partially updated state.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


@dataclass(frozen=True)
class OrientationSample:
    """Device orientation in degrees"""
    alpha: float = 0.0  # Compass heading (0-360, wraps)
    beta: float = 0.0   # Front/back tilt (-180..180)
    gamma: float = 0.0  # Left/right tilt (-90..90)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.alpha, self.beta, self.gamma)


@dataclass(frozen=True)
class MotionSample:
    """Acceleration including gravity, m/s²"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class RotationRateSample:
    """Gyroscope rotation rate, degrees/second"""
    alpha: float = 0.0
    beta: float = 0.0
    gamma: float = 0.0

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.alpha, self.beta, self.gamma)


@dataclass(frozen=True)
class SensorSnapshot:
    """The single published state consumed by views."""
    orientation: OrientationSample = field(default_factory=OrientationSample)
    motion: MotionSample = field(default_factory=MotionSample)
    rotation_rate: RotationRateSample = field(default_factory=RotationRateSample)


class PermissionState(Enum):
    """Lifecycle of the sensor consent gate."""
    NOT_REQUIRED = "not_required"
    REQUIRED = "required"
    GRANTED = "granted"

    @property
    def streams_allowed(self) -> bool:
        return self is not PermissionState.REQUIRED


class EventKind:
    """Event names understood by SensorPlatform.subscribe()."""
    ORIENTATION = "deviceorientation"
    MOTION = "devicemotion"
    SCREEN_CHANGE = "change"
    ORIENTATION_CHANGE = "orientationchange"
    RESIZE = "resize"

    SCREEN_EVENTS = (SCREEN_CHANGE, ORIENTATION_CHANGE, RESIZE)


# Canonical screen rotation angles
SCREEN_ANGLES = (0, 90, 180, 270)
LANDSCAPE_ANGLES = (90, 270)
