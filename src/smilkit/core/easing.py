from __future__ import annotations

from typing import Sequence

import numpy as np

from .interpolate import keyframe_vector
from .records import AnimationBase, parse_float_list, parse_key_splines, split_list

# Binary-search inversion of the timing curve's x(t).
SPLINE_TOLERANCE = 1e-5
SPLINE_MAX_ITERATIONS = 24

Spline = tuple[float, float, float, float]


def cubic_bezier(progress: float, x1: float, y1: float, x2: float, y2: float) -> float:
    """Evaluate a CSS/SMIL timing curve with control points (x1, y1), (x2, y2).

    Finds the curve parameter whose x equals `progress` by bisection, then returns
    the matching y.
    """

    if progress <= 0.0:
        return 0.0
    if progress >= 1.0:
        return 1.0

    cx = 3.0 * x1
    bx = 3.0 * (x2 - x1) - cx
    ax = 1.0 - cx - bx
    cy = 3.0 * y1
    by = 3.0 * (y2 - y1) - cy
    ay = 1.0 - cy - by

    def sample_x(t: float) -> float:
        return ((ax * t + bx) * t + cx) * t

    def sample_y(t: float) -> float:
        return ((ay * t + by) * t + cy) * t

    low, high = 0.0, 1.0
    mid = progress
    for _ in range(SPLINE_MAX_ITERATIONS):
        x = sample_x(mid)
        if abs(x - progress) < SPLINE_TOLERANCE:
            break
        if x < progress:
            low = mid
        else:
            high = mid
        mid = (low + high) / 2.0
    return sample_y(mid)


def paced_key_times(values: Sequence[str]) -> list[float] | None:
    """Segment boundaries proportional to the distance between consecutive keyframes.

    Returns None when a keyframe is not numeric (or a color), dimensions differ,
    or the total distance is zero.
    """

    if len(values) < 2:
        return None
    vectors = [keyframe_vector(v) for v in values]
    if any(v is None for v in vectors):
        return None
    if len({len(v) for v in vectors}) != 1:  # type: ignore[arg-type]
        return None

    arr = np.asarray(vectors, dtype=np.float64)
    dists = np.linalg.norm(np.diff(arr, axis=0), axis=1)
    total = float(dists.sum())
    if not np.isfinite(total) or total <= 0.0:
        return None
    cum = np.concatenate([[0.0], np.cumsum(dists)]) / total
    cum[-1] = 1.0
    return [float(c) for c in cum]


def _segment_ease(progress: float, key_times: Sequence[float], splines: Sequence[Spline]) -> float:
    """Locate the keyTimes segment holding `progress`, ease within it, and map back
    onto an evenly spaced segment grid (the grid the value interpolators index)."""

    segments = len(key_times) - 1
    for i in range(segments):
        if progress <= key_times[i + 1] or i == segments - 1:
            start, end = key_times[i], key_times[i + 1]
            span = end - start
            local = (progress - start) / span if span > 0.0 else 1.0
            local = float(np.clip(local, 0.0, 1.0))
            if i < len(splines):
                local = cubic_bezier(local, *splines[i])
            return (i + local) / segments
    return progress


def apply_easing(record: AnimationBase, progress: float) -> float:
    """Remap raw iteration progress through the record's calcMode/keyTimes/keySplines."""

    mode = record.calc_mode or "linear"
    if mode == "discrete":
        # Discrete changes the value selection, not the timing curve.
        return progress

    if mode == "paced":
        key_times = paced_key_times(split_list(record.values))
        if key_times is None:
            return progress
        return float(np.clip(_segment_ease(progress, key_times, ()), 0.0, 1.0))

    splines = parse_key_splines(record.key_splines) if mode == "spline" else []
    key_times = parse_float_list(record.key_times)

    if key_times is None or len(key_times) < 2:
        if splines:
            # A single curve spans the whole iteration when no keyTimes partition it.
            return float(np.clip(cubic_bezier(progress, *splines[0]), 0.0, 1.0))
        return progress

    return float(np.clip(_segment_ease(progress, key_times, splines), 0.0, 1.0))
