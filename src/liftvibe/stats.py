from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from liftvibe.models import TIME_COLUMN, Axis, Point, WindowStats

logger = logging.getLogger(__name__)

A95_PERCENTILE = 0.95


@dataclass(frozen=True)
class LocalPeak:
    index: int
    value: float

    @property
    def magnitude(self) -> float:
        return abs(self.value)


def _rms(x: np.ndarray) -> float:
    x = np.asarray(x, dtype=float)
    if x.size == 0:
        return 0.0
    return float(math.sqrt(float(np.mean(x * x))))


def zero_crossing_segments(values: np.ndarray) -> list[tuple[int, int]]:
    """
    Split `values` into half-cycles at sign changes.

    Samples are classed as non-negative (v >= 0) or negative (v < 0); a new
    segment starts wherever two consecutive samples fall in different classes.
    Returns half-open (start, end) index ranges covering the whole series.
    """

    if values.size == 0:
        return []
    negative = values < 0
    starts = np.flatnonzero(negative[1:] != negative[:-1]) + 1
    bounds = [0, *starts.tolist(), int(values.size)]
    return list(zip(bounds[:-1], bounds[1:]))


def local_peaks(values: np.ndarray) -> list[LocalPeak]:
    peaks: list[LocalPeak] = []
    for start, end in zero_crossing_segments(values):
        idx = start + int(np.argmax(np.abs(values[start:end])))
        peaks.append(LocalPeak(index=idx, value=float(values[idx])))
    return peaks


def pair_adjacent_peaks(peaks: list[LocalPeak]) -> list[tuple[float, LocalPeak, LocalPeak]]:
    """Pair each local peak with the next one when their signs are strictly opposite."""

    pairs: list[tuple[float, LocalPeak, LocalPeak]] = []
    for p1, p2 in zip(peaks, peaks[1:]):
        if (p1.value > 0 and p2.value < 0) or (p1.value < 0 and p2.value > 0):
            pairs.append((p1.magnitude + p2.magnitude, p1, p2))
    return pairs


def a95(pair_values: list[float]) -> float:
    if not pair_values:
        return 0.0
    ordered = sorted(pair_values)
    idx = min(int(math.floor(len(ordered) * A95_PERCENTILE)), len(ordered) - 1)
    return float(ordered[idx])


def _kinematic_stats(values: np.ndarray, times: np.ndarray, rms: float) -> WindowStats:
    # Percentiles of half-cycle pairs are not meaningful for velocity/displacement;
    # a95 and peak_val both fall back to the max absolute value.
    peak_idx = int(np.argmax(np.abs(values)))
    zero_pk = float(abs(values[peak_idx]))
    return WindowStats(
        peak_val=zero_pk,
        peak_time=float(times[peak_idx]),
        rms=rms,
        pk_pk=float(np.max(values) - np.min(values)),
        zero_pk=zero_pk,
        a95=zero_pk,
        max_0pk_point=Point(float(times[peak_idx]), float(values[peak_idx])),
    )


def _acceleration_stats(values: np.ndarray, times: np.ndarray, rms: float) -> WindowStats:
    peak_idx = int(np.argmax(np.abs(values)))
    zero_pk = float(abs(values[peak_idx]))
    max_0pk_point = Point(float(times[peak_idx]), float(values[peak_idx]))

    peaks = local_peaks(values)
    pairs = pair_adjacent_peaks(peaks)
    if not pairs:
        logger.debug("No opposite-sign peak pairs in %d samples", values.size)
        return WindowStats(
            peak_val=zero_pk,
            peak_time=max_0pk_point.time,
            rms=rms,
            pk_pk=0.0,
            zero_pk=zero_pk,
            a95=0.0,
            max_0pk_point=max_0pk_point,
        )

    pair_values = [v for v, _, _ in pairs]
    best_value, p1, p2 = pairs[int(np.argmax(pair_values))]
    first, second = sorted((p1, p2), key=lambda p: times[p.index])
    return WindowStats(
        peak_val=zero_pk,
        peak_time=max_0pk_point.time,
        rms=rms,
        pk_pk=float(best_value),
        zero_pk=zero_pk,
        a95=a95(pair_values),
        max_0pk_point=max_0pk_point,
        max_pkpk_pair=(
            Point(float(times[first.index]), first.value),
            Point(float(times[second.index]), second.value),
        ),
    )


def compute_stats(series: pd.DataFrame, axis: Axis | str) -> WindowStats:
    """
    Ride-quality statistics of one axis over `series` (a full recording or a window).

    Acceleration axes follow GB/T 24474 / ISO 18738 Appendix A:
    - local peaks are the max-|v| samples between consecutive zero crossings;
    - Max Pk-Pk is the largest |p1|+|p2| over adjacent opposite-sign peaks;
    - A95 is the 95th-percentile pair value; Max 0-Pk the global max |v|.

    Velocity/displacement axes use max-min for Pk-Pk and report the max
    absolute value for both A95 and the peak (an approximation, not a standard metric).
    """

    axis = Axis.parse(axis)
    if len(series) == 0:
        return WindowStats.empty()

    values = series[axis.value].to_numpy(dtype=float)
    times = series[TIME_COLUMN].to_numpy(dtype=float)
    rms = _rms(values)
    if axis.is_acceleration:
        return _acceleration_stats(values, times, rms)
    return _kinematic_stats(values, times, rms)
