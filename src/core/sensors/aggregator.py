"""
Signal aggregation for the three sensor streams.

The aggregator owns the filter state: one persisted float per axis per
signal (orientation, acceleration including gravity, rotation rate), stored
as a 3x3 array initialised to zero and never reset. Raw samples arrive at
sensor-event rate, are smoothed per axis against the last filtered value and
stored. Nothing is emitted synchronously; every update only asks the bound
publisher (normally RenderScheduler.request_publish) for a publish.

The orientation stream and the motion stream are independent. Either can be
silent forever (a device without a gyroscope, a desktop browser without
orientation events) and the other keeps updating.

Usage:
    aggregator = SignalAggregator(factor=0.15)
    aggregator.bind(scheduler.request_publish)
    aggregator.on_orientation(OrientationSample(alpha=10, beta=5, gamma=3))
"""

import logging
import threading
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from core.sensors.smoothing import DEFAULT_SMOOTHING_FACTOR, smooth_axes, validate_factor
from core.sensors.types import MotionSample, OrientationSample, RotationRateSample

log = logging.getLogger(__name__)

# Rows of the filter state
ORIENTATION = 0
MOTION = 1
ROTATION_RATE = 2


class SignalAggregator:
    """Latest smoothed orientation / motion / rotation-rate vectors."""

    def __init__(self, factor: float = DEFAULT_SMOOTHING_FACTOR,
                 publish_request: Optional[Callable[[], None]] = None) -> None:
        self.factor = validate_factor(factor)
        self._publish_request = publish_request

        self._lock = threading.Lock()
        self._state = np.zeros((3, 3), dtype=float)

        self.sample_counts = {
            'orientation': 0,
            'motion': 0,
            'rotation_rate': 0,
        }
        self.invalid_axes = 0

    def bind(self, publish_request: Callable[[], None]) -> None:
        """Set the callable invoked after every update."""
        self._publish_request = publish_request

    # ------------------------------------------------------------------
    # Raw sample ingestion
    # ------------------------------------------------------------------

    def on_orientation(self, sample: OrientationSample) -> None:
        self._update((ORIENTATION, sample.as_tuple(), 'orientation'))
        self._request_publish()

    def on_motion(self, sample: MotionSample) -> None:
        self._update((MOTION, sample.as_tuple(), 'motion'))
        self._request_publish()

    def on_rotation_rate(self, sample: RotationRateSample) -> None:
        self._update((ROTATION_RATE, sample.as_tuple(), 'rotation_rate'))
        self._request_publish()

    def on_motion_event(self, motion: MotionSample, rotation_rate: RotationRateSample) -> None:
        """Both vectors of one physical motion event, one publish request."""
        self._update(
            (MOTION, motion.as_tuple(), 'motion'),
            (ROTATION_RATE, rotation_rate.as_tuple(), 'rotation_rate'),
        )
        self._request_publish()

    def _update(self, *updates: Tuple[int, Tuple[float, float, float], str]) -> None:
        """Apply (row, raw, stream) updates under a single lock acquisition."""
        prepared = [(row, np.asarray(raw, dtype=float), stream) for row, raw, stream in updates]
        invalid = [(stream, int(np.count_nonzero(~np.isfinite(raw)))) for _, raw, stream in prepared]
        with self._lock:
            for row, raw, stream in prepared:
                self._state[row] = smooth_axes(self._state[row], raw, self.factor)
                self.sample_counts[stream] += 1
            self.invalid_axes += sum(count for _, count in invalid)
        for stream, count in invalid:
            if count:
                log.debug("Skipped %d non-finite %s axes", count, stream)

    def _request_publish(self) -> None:
        if self._publish_request is not None:
            self._publish_request()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def values(self) -> np.ndarray:
        """
        Copy of the current filtered values.

        Returns:
            np.ndarray: 3x3 array, rows ORIENTATION / MOTION / ROTATION_RATE,
            read under one lock so all three signals belong to the same instant
        """
        with self._lock:
            return self._state.copy()

    def stats(self) -> Dict[str, int]:
        with self._lock:
            stats = dict(self.sample_counts)
            stats['invalid_axes'] = self.invalid_axes
        return stats
