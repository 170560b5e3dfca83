"""
Single-pole exponential smoothing for sensor axes.

    result = factor * raw + (1 - factor) * previous

The output is always a convex combination of the previous output and the new
raw value, so it never overshoots the range of the inputs. A factor of 1.0
is a pass-through; smaller factors are smoother but lag more.

Raw values that are not finite (NaN, +/-inf) are invalid samples: the update
is skipped and the previous value kept. Some platforms report undefined axes
for a few events after the sensor starts.
"""

import math

import numpy as np

DEFAULT_SMOOTHING_FACTOR = 0.15


def validate_factor(factor: float) -> float:
    """Raise ValueError unless 0 < factor <= 1."""
    if not (0.0 < factor <= 1.0):
        raise ValueError(f"Smoothing factor must be in (0, 1], got {factor}")
    return float(factor)


def smooth(previous: float, raw: float, factor: float = DEFAULT_SMOOTHING_FACTOR) -> float:
    """Blend a raw sample into the previous filtered value."""
    if not math.isfinite(raw):
        return previous
    return factor * raw + (1.0 - factor) * previous


def smooth_axes(previous: np.ndarray, raw: np.ndarray,
                factor: float = DEFAULT_SMOOTHING_FACTOR) -> np.ndarray:
    """
    Element-wise smooth() over a vector of axes.

    Each non-finite raw axis keeps its own previous value; the other axes of
    the same sample are still updated.

    Args:
        previous: Last filtered values
        raw: New raw values, same shape

    Returns:
        np.ndarray: New filtered values (previous is not modified)
    """
    previous = np.asarray(previous, dtype=float)
    raw = np.asarray(raw, dtype=float)
    valid = np.isfinite(raw)
    blended = factor * np.where(valid, raw, 0.0) + (1.0 - factor) * previous
    return np.where(valid, blended, previous)
