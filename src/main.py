#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Headless bubble level demo on the mock platform.

A synthetic device is tilted slowly back and forth with sensor noise and
occasional dropped axes; its events go through the full pipeline (consent
gate, smoothing, frame throttling, screen remapping) and one level reading is
logged every Config.DEMO_REPORT_EVERY published frames. Halfway through a
rotation sweep the mock screen turns to landscape so the remapping shows up
in the readouts.

Modes (see run.py):
- main(): portrait start, no consent required
- main_consent(): iOS-style flow, consent requested as if from a tap
"""

import logging
import math
import threading
import time

import numpy as np

from core.sensors.events import RawMotionEvent, RawOrientationEvent, RawRotationRate, RawVector
from core.sensors.pipeline import SensorPipeline
from core.sensors.platform import MockPlatform
from core.sensors.scheduler import ThreadedFrameClock
from core.sensors.types import EventKind, SensorSnapshot
from core.telemetry.loggers.sensor_logger import get_sensor_logger
from utils.config import Config
from utils.config_sections import load_pipeline_config
from utils.ctrl_handler import CtrlCHandler

log = logging.getLogger("main")

GRAVITY = 9.81


class SyntheticDevice:
    """Emits noisy orientation / motion events for a slowly tilting device."""

    def __init__(self, platform: MockPlatform, rate_hz: float, seed: int = 7) -> None:
        self.platform = platform
        self.interval = 1.0 / rate_hz
        self.rng = np.random.default_rng(seed)
        self._stop_event = threading.Event()
        self._thread = None
        self.events_sent = 0

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="SyntheticDevice", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=1.0)

    def _run(self) -> None:
        start = time.monotonic()
        while not self._stop_event.is_set():
            t = time.monotonic() - start
            beta = 8.0 * math.sin(t * 0.6)
            gamma = 5.0 * math.sin(t * 0.4 + 1.0)
            noise = self.rng.normal(0.0, 0.8, size=6)

            # Some platforms drop an axis now and then
            dropped = self.rng.random() < 0.02
            self.platform.emit(EventKind.ORIENTATION, RawOrientationEvent(
                alpha=(t * 3.0) % 360.0,
                beta=None if dropped else beta + noise[0],
                gamma=gamma + noise[1],
            ))

            accel = RawVector(
                x=GRAVITY * math.sin(math.radians(gamma)) + noise[2] * 0.1,
                y=GRAVITY * math.sin(math.radians(beta)) + noise[3] * 0.1,
                z=GRAVITY * math.cos(math.radians(beta)) + noise[4] * 0.1,
            )
            rate = RawRotationRate(alpha=noise[5], beta=4.8 * math.cos(t * 0.6), gamma=2.0 * math.cos(t * 0.4 + 1.0))
            self.platform.emit(EventKind.MOTION, RawMotionEvent(accel, rate))

            self.events_sent += 2
            self._stop_event.wait(self.interval)


def _setup_logging():
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )
    sensor_logger = get_sensor_logger()
    sensor_logger.attach("core.sensors.pipeline", "pipeline")
    sensor_logger.attach("core.sensors.aggregator", "pipeline")
    sensor_logger.attach("core.sensors.permission", "permission")
    sensor_logger.attach("core.sensors.scheduler", "render")
    log.info("Session logs in %s", sensor_logger.log_dir)
    return sensor_logger


def run_demo(requires_consent: bool = False) -> None:
    sensor_logger = _setup_logging()
    ctrl_handler = CtrlCHandler()

    config = load_pipeline_config()
    platform = MockPlatform(requires_consent=requires_consent)
    clock = ThreadedFrameClock(refresh_hz=config.render.refresh_hz)
    pipeline = SensorPipeline(platform, clock=clock, config=config)
    device = SyntheticDevice(platform, rate_hz=Config.DEMO_SENSOR_HZ)

    frames = {'count': 0}

    def on_snapshot(snapshot: SensorSnapshot) -> None:
        frames['count'] += 1
        if frames['count'] % Config.DEMO_REPORT_EVERY:
            return
        reading = pipeline.level_reading(snapshot)
        log.info(
            "[LEVEL] %s screen=%d° beta=%+d° gamma=%+d° bubble=(%.0f, %.0f) accel=(%.1f, %.1f, %.1f)",
            "LEVEL   " if reading.is_level else "ADJUST  ",
            reading.screen_angle,
            reading.beta_display,
            reading.gamma_display,
            reading.bubble_x,
            reading.bubble_y,
            snapshot.motion.x, snapshot.motion.y, snapshot.motion.z,
        )

    try:
        pipeline.start()
        pipeline.subscribe(on_snapshot)
        device.start()

        if requires_consent:
            # Stands in for the "enable" button tap
            state = pipeline.request_permission().result(timeout=5.0)
            log.info("Permission state after tap: %s", state.value)

        rotated = False
        while not ctrl_handler.should_stop:
            if Config.DEMO_MAX_FRAMES and frames['count'] >= Config.DEMO_MAX_FRAMES:
                break
            if not rotated and frames['count'] >= 300:
                log.info("Rotating screen to landscape (90°)")
                platform.set_screen_angle(90)
                rotated = True
            time.sleep(0.05)
    finally:
        device.stop()
        pipeline.close()
        log.info("Published %d frames from %d raw events", pipeline.scheduler.publish_count, device.events_sent)
        sensor_logger.close()


def main():
    run_demo(requires_consent=False)


def main_consent():
    run_demo(requires_consent=True)


if __name__ == "__main__":
    main()
