from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from liftvibe.models import ACCEL_COLUMNS

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_POINTS = 8000


def downsample(series: pd.DataFrame, target_count: int = DEFAULT_DISPLAY_POINTS) -> pd.DataFrame:
    """
    Reduce `series` to at most `target_count` rows for display while keeping spikes.

    The series is cut into target_count // 2 buckets (the last one takes the
    remainder). Each bucket contributes its first row and, when different, the
    row with the largest max(|ax|, |ay|, |az|), so a peak on any acceleration
    axis survives whatever axis is being shown.
    """

    n = len(series)
    if n <= target_count:
        return series
    if target_count <= 0:
        return series.iloc[0:0]
    buckets = target_count // 2
    if buckets == 0:
        return series.iloc[0:1]

    step = n // buckets
    strength = np.max(np.abs(series[list(ACCEL_COLUMNS)].to_numpy(dtype=float)), axis=1)

    keep: list[int] = []
    for b in range(buckets):
        start = b * step
        end = n if b == buckets - 1 else start + step
        peak = start + int(np.argmax(strength[start:end]))
        keep.append(start)
        if peak != start:
            keep.append(peak)

    logger.debug("Downsampled %d rows to %d (%d buckets of %d)", n, len(keep), buckets, step)
    return series.iloc[keep]
