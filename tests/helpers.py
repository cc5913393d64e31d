from __future__ import annotations

import math

import numpy as np
import pandas as pd


def raw_df(
    az: np.ndarray,
    sample_rate_hz: float,
    ax: np.ndarray | None = None,
    ay: np.ndarray | None = None,
) -> pd.DataFrame:
    az = np.asarray(az, dtype=float)
    t = np.arange(az.size, dtype=float) / sample_rate_hz
    return pd.DataFrame(
        {
            "time": t,
            "ax": np.zeros_like(az) if ax is None else np.asarray(ax, dtype=float),
            "ay": np.zeros_like(az) if ay is None else np.asarray(ay, dtype=float),
            "az": az,
        }
    )


def sine(freq_hz: float, sample_rate_hz: float, n: int, amplitude: float = 1.0) -> np.ndarray:
    t = np.arange(n, dtype=float) / sample_rate_hz
    return amplitude * np.sin(2 * math.pi * freq_hz * t)
