"""Smoke test: synthetic device feeding the full pipeline on the mock platform."""

from __future__ import annotations

import time

from core.sensors.pipeline import SensorPipeline
from core.sensors.platform import MockPlatform
from core.sensors.scheduler import ManualFrameClock
from main import SyntheticDevice


def test_synthetic_device_drives_pipeline():
    platform = MockPlatform()
    clock = ManualFrameClock()
    pipeline = SensorPipeline(platform, clock=clock).start()
    device = SyntheticDevice(platform, rate_hz=500.0, seed=1)

    device.start()
    try:
        deadline = time.monotonic() + 2.0
        while device.events_sent < 20 and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        device.stop()

    clock.tick()

    assert device.events_sent >= 20
    assert pipeline.scheduler.publish_count == 1
    # Gravity dominates the smoothed z axis after a few samples
    assert pipeline.snapshot.motion.z > 0.0
    reading = pipeline.level_reading()
    assert -100.0 <= reading.bubble_x <= 100.0
    pipeline.close()
