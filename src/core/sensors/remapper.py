"""
Device-frame to screen-frame tilt mapping for the bubble level.

Orientation angles are reported relative to the device's physical axes:
- beta: rotation around X (front/back tilt while held in portrait)
- gamma: rotation around Y (left/right tilt while held in portrait)

Once the screen content is rotated, what the user perceives as front/back
and left/right no longer matches those axes:

    screen angle | visual beta | visual gamma
    -------------+-------------+-------------
    0, 180       | beta        | gamma
    90           | -gamma      | beta
    270          | gamma       | -beta

Features:
- remap_axes / is_level: the mapping above and the level test (strictly
  below 2 degrees on both axes, no hysteresis)
- read_level: everything the level view draws (bubble offset, readouts, gauges)
- ScreenOrientationTracker: current screen angle kept in sync with the
  platform's rotation and resize notifications
"""

import logging
import math
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from core.sensors.types import EventKind, LANDSCAPE_ANGLES, OrientationSample, SCREEN_ANGLES

log = logging.getLogger(__name__)

LEVEL_THRESHOLD_DEG = 2.0


def normalize_screen_angle(value) -> int:
    """
    Coerce a platform rotation value to 0 / 90 / 180 / 270.

    The legacy window.orientation value is signed (-90 for landscape-right),
    so values are wrapped into 0..359 first. Anything else unknown is 0.
    """
    try:
        angle = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    if angle != value:
        return 0
    angle = (angle + 360) % 360
    return angle if angle in SCREEN_ANGLES else 0


def is_landscape(screen_angle: int) -> bool:
    return screen_angle in LANDSCAPE_ANGLES


def remap_axes(beta: float, gamma: float, screen_angle: int) -> Tuple[float, float]:
    """Project device-frame (beta, gamma) onto screen-frame (visual_beta, visual_gamma)."""
    if screen_angle == 90:
        return -gamma, beta
    if screen_angle == 270:
        return gamma, -beta
    return beta, gamma


def is_level(visual_beta: float, visual_gamma: float, threshold: float = LEVEL_THRESHOLD_DEG) -> bool:
    return abs(visual_beta) < threshold and abs(visual_gamma) < threshold


def _clamp(value: float, limit: float) -> float:
    return max(min(value, limit), -limit)


def _round_display(value: float) -> int:
    # Half-up, matching the snapshot rounding
    return int(math.floor(value + 0.5))


def tilt_gauge(value: float, max_tilt: float = 90.0) -> float:
    """Level gauge fill in percent: |tilt| relative to max_tilt, capped at 100."""
    return min(abs(value), max_tilt) / max_tilt * 100.0


def axis_gauge(value: float, gain: float = 10.0) -> float:
    """Sensor detail bar fill in percent: |value| * gain, capped at 100."""
    return min(abs(value) * gain, 100.0)


@dataclass(frozen=True)
class LevelReading:
    """What the bubble level view displays for one snapshot."""
    visual_beta: float
    visual_gamma: float
    is_level: bool
    bubble_x: float         # Horizontal offset, percent of radius (from visual gamma)
    bubble_y: float         # Vertical offset, percent of radius (from visual beta)
    beta_display: int       # Front/back readout, degrees (sign flipped for display)
    gamma_display: int      # Left/right readout, degrees
    beta_gauge: float       # Percent
    gamma_gauge: float      # Percent
    screen_angle: int = 0

    @property
    def is_landscape(self) -> bool:
        return is_landscape(self.screen_angle)


def read_level(
    orientation: OrientationSample,
    screen_angle: int = 0,
    threshold: float = LEVEL_THRESHOLD_DEG,
    bubble_gain: float = 2.0,
    bubble_limit: float = 100.0,
    gauge_max_tilt: float = 90.0,
) -> LevelReading:
    """
    Build the level view reading for a published orientation.

    Args:
        orientation: Device-frame orientation from the latest snapshot
        screen_angle: Current screen rotation (0/90/180/270)

    Returns:
        LevelReading in screen frame
    """
    visual_beta, visual_gamma = remap_axes(orientation.beta, orientation.gamma, screen_angle)
    return LevelReading(
        visual_beta=visual_beta,
        visual_gamma=visual_gamma,
        is_level=is_level(visual_beta, visual_gamma, threshold),
        bubble_x=_clamp(visual_gamma * bubble_gain, bubble_limit),
        bubble_y=_clamp(visual_beta * bubble_gain, bubble_limit),
        beta_display=_round_display(-visual_beta),
        gamma_display=_round_display(visual_gamma),
        beta_gauge=tilt_gauge(visual_beta, gauge_max_tilt),
        gamma_gauge=tilt_gauge(visual_gamma, gauge_max_tilt),
        screen_angle=screen_angle,
    )


class ScreenOrientationTracker:
    """
    Keeps the current screen angle in sync with the platform.

    Listens to the screen "change" event plus the legacy "orientationchange"
    and "resize" events; on each one the angle is queried again. Listeners
    are only notified when the canonical angle actually changes.
    """

    def __init__(self, platform) -> None:
        self.platform = platform
        self._lock = threading.Lock()
        self._listeners: List[Callable[[int], None]] = []
        self._unsubscribers: List[Callable[[], None]] = []
        self.angle = normalize_screen_angle(platform.query_screen_angle())

    @property
    def is_landscape(self) -> bool:
        return is_landscape(self.angle)

    def start(self) -> None:
        if self._unsubscribers:
            return
        for kind in EventKind.SCREEN_EVENTS:
            self._unsubscribers.append(self.platform.subscribe(kind, self._on_screen_event))
        self.refresh()

    def add_listener(self, callback: Callable[[int], None]) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(callback)

        def remove() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return remove

    def refresh(self) -> int:
        """Query the platform angle, notify listeners if it changed."""
        angle = normalize_screen_angle(self.platform.query_screen_angle())
        with self._lock:
            changed = angle != self.angle
            self.angle = angle
            listeners = list(self._listeners) if changed else []
        if changed:
            log.debug("Screen angle now %d", angle)
        for callback in listeners:
            try:
                callback(angle)
            except Exception:
                log.exception("Screen angle listener %r failed", callback)
        return angle

    def _on_screen_event(self, _event: Optional[object] = None) -> None:
        self.refresh()

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        with self._lock:
            self._listeners.clear()
