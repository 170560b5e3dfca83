"""Tests for screen-frame remapping, level detection and screen tracking."""

from __future__ import annotations

import math

import pytest

from core.sensors.platform import MockPlatform
from core.sensors.remapper import (
    ScreenOrientationTracker,
    axis_gauge,
    is_level,
    normalize_screen_angle,
    read_level,
    remap_axes,
    tilt_gauge,
)
from core.sensors.types import EventKind, OrientationSample


@pytest.mark.parametrize("angle", [0, 180])
def test_remap_portrait_and_upside_down_are_identity(angle):
    assert remap_axes(10.0, 20.0, angle) == (10.0, 20.0)


def test_remap_90():
    assert remap_axes(10, 20, 90) == (-20, 10)


def test_remap_270():
    assert remap_axes(10, 20, 270) == (20, -10)


def test_level_threshold_is_exclusive():
    assert is_level(1.9, 1.9)
    assert not is_level(2.0, 0)
    assert not is_level(0, -2.0)
    assert is_level(-1.99, 1.99)


@pytest.mark.parametrize("raw,expected", [
    (0, 0), (90, 90), (180, 180), (270, 270),
    (-90, 270), (360, 0), (45, 0), (None, 0), ("portrait", 0), (90.5, 0), (90.0, 90),
    (math.inf, 0), (-math.inf, 0), (math.nan, 0),
])
def test_normalize_screen_angle(raw, expected):
    assert normalize_screen_angle(raw) == expected


def test_read_level_uses_screen_frame():
    reading = read_level(OrientationSample(beta=10.0, gamma=1.0), screen_angle=90)

    assert reading.visual_beta == -1.0
    assert reading.visual_gamma == 10.0
    assert reading.is_level is False
    assert reading.is_landscape
    assert reading.bubble_x == 20.0
    assert reading.bubble_y == -2.0
    assert reading.beta_display == 1
    assert reading.gamma_display == 10


def test_read_level_clamps_bubble_and_gauges():
    reading = read_level(OrientationSample(beta=-120.0, gamma=75.0))

    assert reading.bubble_x == 100.0
    assert reading.bubble_y == -100.0
    assert reading.beta_gauge == 100.0
    assert reading.gamma_gauge == pytest.approx(75.0 / 90.0 * 100.0)
    assert reading.beta_display == 120


def test_read_level_flat_device_is_level():
    reading = read_level(OrientationSample(alpha=200.0, beta=1.0, gamma=-1.0), screen_angle=270)
    assert reading.is_level
    assert not read_level(OrientationSample(beta=1.0, gamma=-1.0), threshold=1.0).is_level


def test_gauges():
    assert tilt_gauge(45.0) == 50.0
    assert tilt_gauge(-180.0) == 100.0
    assert axis_gauge(-0.5) == 5.0
    assert axis_gauge(9.8) == pytest.approx(98.0)
    assert axis_gauge(42.0) == 100.0


def test_tracker_follows_rotation_events():
    platform = MockPlatform(screen_angle=0)
    tracker = ScreenOrientationTracker(platform)
    seen = []
    tracker.add_listener(seen.append)
    tracker.start()

    platform.set_screen_angle(90)
    assert tracker.angle == 90
    assert tracker.is_landscape

    platform.set_screen_angle(-90)
    assert tracker.angle == 270

    # Each rotation fires three notifications but listeners hear one change
    assert seen == [90, 270]


def test_tracker_close_unsubscribes():
    platform = MockPlatform()
    tracker = ScreenOrientationTracker(platform)
    tracker.start()
    assert platform.listener_count(EventKind.RESIZE) == 1

    tracker.close()

    for kind in EventKind.SCREEN_EVENTS:
        assert platform.listener_count(kind) == 0
    platform.set_screen_angle(180)
    assert tracker.angle == 0


def test_tracker_defaults_unknown_angle_to_portrait():
    tracker = ScreenOrientationTracker(MockPlatform(screen_angle=33))
    assert tracker.angle == 0
    assert not tracker.is_landscape


def test_tracker_survives_non_finite_angle():
    platform = MockPlatform(screen_angle=math.inf)
    tracker = ScreenOrientationTracker(platform)
    tracker.start()
    assert tracker.angle == 0

    platform.set_screen_angle(90)
    platform.set_screen_angle(math.nan)
    assert tracker.angle == 0
