"""
Ingestion adapter between platform events and the smoothing pipeline.

Browsers report every axis as an optional number: a device without a
gyroscope sends motion events with no rotation rate, some platforms send
null orientation angles until the sensor warms up. Everything is normalised
here to plain floats (missing -> 0.0) so the filter never sees None.

Non-finite values (NaN/inf) are passed through untouched; the smoothing
filter treats them as invalid samples and keeps the previous value.

Accepted event shapes:
- RawOrientationEvent / RawMotionEvent dataclasses
- dicts or objects using the browser attribute names
  (alpha/beta/gamma, accelerationIncludingGravity, rotationRate)
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from core.sensors.types import MotionSample, OrientationSample, RotationRateSample


@dataclass(frozen=True)
class RawOrientationEvent:
    """Orientation event as delivered by the platform (axes may be absent)"""
    alpha: Optional[float] = None
    beta: Optional[float] = None
    gamma: Optional[float] = None


@dataclass(frozen=True)
class RawVector:
    """Optional x/y/z vector"""
    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None


@dataclass(frozen=True)
class RawRotationRate:
    """Optional alpha/beta/gamma rotation rate"""
    alpha: Optional[float] = None
    beta: Optional[float] = None
    gamma: Optional[float] = None


@dataclass(frozen=True)
class RawMotionEvent:
    """Motion event: acceleration including gravity plus rotation rate"""
    acceleration_including_gravity: Optional[Any] = None
    rotation_rate: Optional[Any] = None


def _field(source: Any, *names: str) -> Any:
    """Look up the first present attribute/key among names."""
    if source is None:
        return None
    for name in names:
        if isinstance(source, dict):
            if name in source:
                return source[name]
        elif hasattr(source, name):
            return getattr(source, name)
    return None


def _axis(source: Any, name: str) -> float:
    value = _field(source, name)
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def to_orientation_sample(event: Any) -> OrientationSample:
    """Normalize an orientation event into an OrientationSample."""
    return OrientationSample(
        alpha=_axis(event, "alpha"),
        beta=_axis(event, "beta"),
        gamma=_axis(event, "gamma"),
    )


def to_motion_samples(event: Any) -> Tuple[MotionSample, RotationRateSample]:
    """
    Normalize a motion event into its two vectors.

    Args:
        event: RawMotionEvent, dict or object with browser attribute names

    Returns:
        (MotionSample, RotationRateSample), absent vectors become all zeros
    """
    accel = _field(event, "acceleration_including_gravity", "accelerationIncludingGravity")
    rate = _field(event, "rotation_rate", "rotationRate")

    motion = MotionSample(x=_axis(accel, "x"), y=_axis(accel, "y"), z=_axis(accel, "z"))
    rotation = RotationRateSample(
        alpha=_axis(rate, "alpha"),
        beta=_axis(rate, "beta"),
        gamma=_axis(rate, "gamma"),
    )
    return motion, rotation
