from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from scipy import integrate as sp_integrate

from liftvibe.models import ACCEL_COLUMNS, GALS_PER_MPS2, PROCESSED_COLUMNS, TIME_COLUMN

logger = logging.getLogger(__name__)


def cumulative_trapezoid(y: np.ndarray, dt: float) -> np.ndarray:
    """Running trapezoidal integral with the integration constant pinned to 0 at the first sample."""

    y = np.asarray(y, dtype=float)
    if y.size < 2:
        return np.zeros_like(y)
    return sp_integrate.cumulative_trapezoid(y, dx=dt, initial=0.0)


def integrate(samples: pd.DataFrame, sample_rate: float) -> pd.DataFrame:
    """
    Remove per-axis DC and integrate az twice into velocity and displacement.

    Notes:
    - ax/ay/az are returned mean-subtracted, still in Gals.
    - vz (m/s) and sz (m) are integrated from the mean-subtracted az converted to m/s^2.
    - vz[0] = sz[0] = 0; long recordings accumulate integration drift.
    """

    if len(samples) == 0:
        return pd.DataFrame({c: pd.Series(dtype=float) for c in PROCESSED_COLUMNS})

    dt = 1.0 / sample_rate
    out = pd.DataFrame({TIME_COLUMN: samples[TIME_COLUMN].to_numpy(dtype=float)})
    for axis in ACCEL_COLUMNS:
        values = samples[axis].to_numpy(dtype=float)
        out[axis] = values - float(np.mean(values))

    az_mps2 = out["az"].to_numpy() / GALS_PER_MPS2
    vz = cumulative_trapezoid(az_mps2, dt)
    sz = cumulative_trapezoid(vz, dt)
    out["vz"] = vz
    out["sz"] = sz

    logger.debug("Integrated %d samples at %.1f Hz", len(out), sample_rate)
    return out
