"""
Sensor pipeline wiring: platform events -> smoothing -> throttled snapshots.

Flow:
1. PermissionGate checks the platform capability; sensor listeners are registered only
   when consent is not required or has been granted (never twice)
2. Orientation / motion events are normalised (core.sensors.events) and fed
   to the SignalAggregator, which smooths every axis
3. RenderScheduler coalesces the updates into one SensorSnapshot per frame
4. Consumers read `snapshot` or subscribe(); the level view goes through
   level_reading(), which applies the screen-angle remapping

Teardown (close) deregisters both sensor listeners and the screen listeners
and cancels the pending flush, so no callback writes into a discarded state.

Usage:
    with SensorPipeline(platform, clock=ThreadedFrameClock(60)) as pipeline:
        pipeline.subscribe(render)
        ...
"""

import logging
from concurrent.futures import Future
from typing import Any, Callable, List, Optional

from core.sensors.aggregator import SignalAggregator
from core.sensors.events import to_motion_samples, to_orientation_sample
from core.sensors.permission import PermissionGate
from core.sensors.platform import SensorPlatform
from core.sensors.remapper import LevelReading, ScreenOrientationTracker, axis_gauge, read_level
from core.sensors.scheduler import FrameClock, ManualFrameClock, RenderScheduler
from core.sensors.types import EventKind, PermissionState, SensorSnapshot
from utils.config_sections import PipelineConfig, load_pipeline_config

log = logging.getLogger(__name__)


class SensorPipeline:
    """Owns the gate, aggregator, scheduler and screen tracker for one view."""

    def __init__(
        self,
        platform: SensorPlatform,
        clock: Optional[FrameClock] = None,
        config: Optional[PipelineConfig] = None,
    ) -> None:
        self.platform = platform
        self.config = config if config else load_pipeline_config()
        self.clock = clock if clock is not None else ManualFrameClock()

        self.aggregator = SignalAggregator(factor=self.config.smoothing.factor)
        self.scheduler = RenderScheduler(
            self.aggregator,
            self.clock,
            orientation_decimals=self.config.render.orientation_decimals,
            motion_decimals=self.config.render.motion_decimals,
        )
        self.screen = ScreenOrientationTracker(platform)
        self.gate = PermissionGate(platform, on_granted=self._open_streams)

        self._sensor_unsubscribers: List[Callable[[], None]] = []
        self._started = False
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> "SensorPipeline":
        if self._closed:
            raise RuntimeError("SensorPipeline already closed")
        if self._started:
            return self
        self._started = True

        start_clock = getattr(self.clock, "start", None)
        if callable(start_clock):
            start_clock()

        self.screen.start()
        if not self.gate.open_if_allowed():
            log.info("Sensor streams waiting for user consent")
        return self

    def request_permission(self) -> "Future[PermissionState]":
        """Forward a user gesture to the consent gate."""
        return self.gate.request_consent()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._close_streams()
        self.screen.close()
        self.scheduler.close()

        stop_clock = getattr(self.clock, "stop", None)
        if callable(stop_clock):
            stop_clock()
        log.info("Sensor pipeline closed (%s)", self.aggregator.stats())

    def __enter__(self) -> "SensorPipeline":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Sensor streams
    # ------------------------------------------------------------------

    @property
    def streams_open(self) -> bool:
        return bool(self._sensor_unsubscribers)

    @property
    def permission_state(self) -> PermissionState:
        return self.gate.state

    def _open_streams(self) -> None:
        if self._closed or self._sensor_unsubscribers:
            return
        self._sensor_unsubscribers = [
            self.platform.subscribe(EventKind.ORIENTATION, self._on_orientation_event),
            self.platform.subscribe(EventKind.MOTION, self._on_motion_event),
        ]
        log.info("Sensor streams opened")

    def _close_streams(self) -> None:
        for unsubscribe in self._sensor_unsubscribers:
            unsubscribe()
        if self._sensor_unsubscribers:
            log.info("Sensor streams closed")
        self._sensor_unsubscribers = []

    def _on_orientation_event(self, event: Any) -> None:
        self.aggregator.on_orientation(to_orientation_sample(event))

    def _on_motion_event(self, event: Any) -> None:
        motion, rotation_rate = to_motion_samples(event)
        self.aggregator.on_motion_event(motion, rotation_rate)

    # ------------------------------------------------------------------
    # Consumers
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> SensorSnapshot:
        return self.scheduler.snapshot

    def subscribe(self, callback: Callable[[SensorSnapshot], None]) -> Callable[[], None]:
        return self.scheduler.subscribe(callback)

    def level_reading(self, snapshot: Optional[SensorSnapshot] = None) -> LevelReading:
        """Bubble level reading for a snapshot (latest by default) at the current screen angle."""
        snapshot = snapshot if snapshot is not None else self.snapshot
        level = self.config.level
        return read_level(
            snapshot.orientation,
            self.screen.angle,
            threshold=level.threshold_deg,
            bubble_gain=level.bubble_gain,
            bubble_limit=level.bubble_limit,
            gauge_max_tilt=level.gauge_max_tilt_deg,
        )

    def detail_gauges(self, snapshot: Optional[SensorSnapshot] = None) -> dict:
        """
        Bar fill percentages for the sensor detail view.

        Returns:
            dict: {"motion": {...}, "rotation_rate": {...}, "orientation": {"alpha": ...}}
        """
        snapshot = snapshot if snapshot is not None else self.snapshot
        gain = self.config.level.detail_gauge_gain
        motion = snapshot.motion
        rate = snapshot.rotation_rate
        return {
            "motion": {axis: axis_gauge(getattr(motion, axis), gain) for axis in ("x", "y", "z")},
            "rotation_rate": {axis: axis_gauge(getattr(rate, axis), gain) for axis in ("alpha", "beta", "gamma")},
            "orientation": {"alpha": axis_gauge(snapshot.orientation.alpha, gain)},
        }
