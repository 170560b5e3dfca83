"""
Render scheduling: coalesce sensor updates into one publish per frame.

Sensors fire far more often than a screen refreshes (DeviceMotion commonly
at 60-100 Hz per stream, two streams). The RenderScheduler turns any number
of publish requests between two frames into exactly one flush on the next
frame tick. A flush reads the aggregator once, rounds the values for display
and replaces the published SensorSnapshot wholesale.

Frame clocks:
- FrameClock: protocol (request_frame / cancel_frame), the Python side of a
  display-refresh callback
- ManualFrameClock: frames fire when tick() is called (tests, replays)
- ThreadedFrameClock: daemon thread ticking at a fixed refresh rate

Usage:
    clock = ThreadedFrameClock(refresh_hz=60)
    scheduler = RenderScheduler(aggregator, clock)
    unsubscribe = scheduler.subscribe(lambda snapshot: print(snapshot.orientation))
    ...
    scheduler.close()
    clock.stop()
"""

import itertools
import logging
import math
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Protocol

import numpy as np

from core.sensors.aggregator import MOTION, ORIENTATION, ROTATION_RATE, SignalAggregator
from core.sensors.types import (
    MotionSample,
    OrientationSample,
    RotationRateSample,
    SensorSnapshot,
)

log = logging.getLogger(__name__)

SnapshotCallback = Callable[[SensorSnapshot], None]

# Marks a flush being requested from the clock (re-entrant requests are no-ops)
_REQUESTING = object()


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round to the given decimals with halves going up (2.5 -> 3, -2.5 -> -2)."""
    scale = 10 ** decimals
    return math.floor(value * scale + 0.5) / scale


class FrameClock(Protocol):
    """Display-refresh callback source."""

    def request_frame(self, callback: Callable[[], None]) -> Any:
        ...

    def cancel_frame(self, handle: Any) -> None:
        ...


class ManualFrameClock:
    """
    Frame clock driven by explicit tick() calls.

    Like a browser's animation-frame queue, callbacks requested during a
    tick run on the following tick, not the current one.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._pending: Dict[int, Callable[[], None]] = {}
        self._lock = threading.Lock()
        self.frame_count = 0

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        with self._lock:
            self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        with self._lock:
            self._pending.pop(handle, None)

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def tick(self) -> int:
        """Run the callbacks queued before this tick. Returns how many ran."""
        with self._lock:
            due = list(self._pending.values())
            self._pending.clear()
            self.frame_count += 1
        for callback in due:
            callback()
        return len(due)


class ThreadedFrameClock(ManualFrameClock):
    """Frame clock ticking on a daemon thread at refresh_hz."""

    def __init__(self, refresh_hz: float = 60.0) -> None:
        super().__init__()
        if refresh_hz <= 0:
            raise ValueError(f"refresh_hz must be positive, got {refresh_hz}")
        self.interval = 1.0 / refresh_hz
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            log.warning("Frame clock already running")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="FrameClock-Thread",
            daemon=True,
        )
        self._thread.start()
        log.debug("Frame clock started at %.1f Hz", 1.0 / self.interval)

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=1.0)
        self._thread = None

    def _run(self) -> None:
        next_tick = time.monotonic()
        while not self._stop_event.is_set():
            next_tick += self.interval
            try:
                self.tick()
            except Exception:
                log.exception("Error in frame callback")
            delay = next_tick - time.monotonic()
            if delay > 0:
                self._stop_event.wait(delay)
            else:
                # Fell behind, skip the missed frames
                next_tick = time.monotonic()


class RenderScheduler:
    """Publishes at most one SensorSnapshot per frame."""

    def __init__(
        self,
        aggregator: SignalAggregator,
        clock: FrameClock,
        orientation_decimals: int = 0,
        motion_decimals: int = 1,
    ) -> None:
        self.aggregator = aggregator
        self.clock = clock
        self.orientation_decimals = orientation_decimals
        self.motion_decimals = motion_decimals

        self._lock = threading.Lock()
        self._pending_handle: Optional[Any] = None
        self._closed = False
        self._subscribers: List[SnapshotCallback] = []

        self.snapshot = SensorSnapshot()
        self.publish_count = 0

        aggregator.bind(self.request_publish)

    @property
    def has_pending_flush(self) -> bool:
        with self._lock:
            return self._pending_handle is not None

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        """Register a consumer. Returns a function that unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def request_publish(self) -> None:
        """Schedule one flush on the next frame unless one is already pending."""
        with self._lock:
            if self._closed or self._pending_handle is not None:
                return
            self._pending_handle = _REQUESTING
        handle = self.clock.request_frame(self._flush)
        with self._lock:
            if self._pending_handle is _REQUESTING:
                self._pending_handle = handle
            elif self._closed:
                self.clock.cancel_frame(handle)

    def _flush(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._pending_handle = None

        values = self.aggregator.values()
        snapshot = self._build_snapshot(values)

        with self._lock:
            self.snapshot = snapshot
            self.publish_count += 1
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(snapshot)
            except Exception:
                log.exception("Snapshot subscriber %r failed", callback)

    def _build_snapshot(self, values: np.ndarray) -> SensorSnapshot:
        o = [round_half_up(v, self.orientation_decimals) for v in values[ORIENTATION]]
        m = [round_half_up(v, self.motion_decimals) for v in values[MOTION]]
        r = [round_half_up(v, self.motion_decimals) for v in values[ROTATION_RATE]]
        return SensorSnapshot(
            orientation=OrientationSample(alpha=o[0], beta=o[1], gamma=o[2]),
            motion=MotionSample(x=m[0], y=m[1], z=m[2]),
            rotation_rate=RotationRateSample(alpha=r[0], beta=r[1], gamma=r[2]),
        )

    def close(self) -> None:
        """Cancel any pending flush; nothing is published afterwards."""
        with self._lock:
            self._closed = True
            handle = self._pending_handle
            self._pending_handle = None
            self._subscribers.clear()
        if handle is not None and handle is not _REQUESTING:
            self.clock.cancel_frame(handle)
        log.debug("Render scheduler closed after %d publishes", self.publish_count)
