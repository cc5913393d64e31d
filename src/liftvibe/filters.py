from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy import signal as sp_signal

from liftvibe.models import ConfigurationError, FilterConfig

logger = logging.getLogger(__name__)

BUTTER_ORDER = 4


@dataclass(frozen=True)
class WeightingCurve:
    """
    ISO 2631-1 / ISO 8041 frequency weighting parameters (Hz and quality factors).

    Only the acceleration-velocity transition (f3, f4, q4) and the upward step
    (f5, q5, f6, q6) are used; band limiting comes from the configured cutoffs.
    """

    name: str
    f3: float
    f4: float
    q4: float
    f5: float = math.inf
    q5: float = 1.0
    f6: float = math.inf
    q6: float = 1.0


# Vertical (z) and horizontal (x, y) curves referenced by ISO 18738-1.
WK = WeightingCurve(name="Wk", f3=12.5, f4=12.5, q4=0.63, f5=2.37, q5=0.91, f6=3.35, q6=0.91)
WD = WeightingCurve(name="Wd", f3=2.0, f4=2.0, q4=0.63)

AXIS_WEIGHTING: dict[str, WeightingCurve] = {"ax": WD, "ay": WD, "az": WK}


def _highpass_active(cfg: FilterConfig) -> bool:
    return cfg.highpass_hz > 0


def _lowpass_active(cfg: FilterConfig, nyquist: float) -> bool:
    return math.isfinite(cfg.lowpass_hz) and 0 < cfg.lowpass_hz < nyquist


def validate_filter_config(cfg: FilterConfig, sample_rate: float) -> None:
    """Raise ConfigurationError when `cfg` cannot be realized at `sample_rate`."""

    if not math.isfinite(sample_rate) or sample_rate <= 0:
        raise ConfigurationError(f"Sample rate must be > 0 Hz, got {sample_rate}")
    if not cfg.enabled:
        return

    nyquist = 0.5 * sample_rate
    if math.isnan(cfg.highpass_hz) or cfg.highpass_hz < 0:
        raise ConfigurationError(f"High-pass cutoff must be >= 0 Hz, got {cfg.highpass_hz}")
    if math.isnan(cfg.lowpass_hz) or cfg.lowpass_hz < 0:
        raise ConfigurationError(f"Low-pass cutoff must be >= 0 Hz, got {cfg.lowpass_hz}")
    if _highpass_active(cfg) and cfg.highpass_hz >= nyquist:
        raise ConfigurationError(
            f"High-pass cutoff {cfg.highpass_hz} Hz must be below Nyquist ({nyquist:.1f} Hz)"
        )
    if _highpass_active(cfg) and _lowpass_active(cfg, nyquist) and cfg.highpass_hz >= cfg.lowpass_hz:
        raise ConfigurationError(
            f"High-pass cutoff ({cfg.highpass_hz} Hz) must be below "
            f"low-pass cutoff ({cfg.lowpass_hz} Hz)"
        )


def butter_sos(sample_rate: float, cut: float, btype: str) -> np.ndarray:
    nyq = 0.5 * sample_rate
    return sp_signal.butter(BUTTER_ORDER, cut / nyq, btype=btype, output="sos")


def weighting_sos(curve: WeightingCurve, sample_rate: float) -> np.ndarray:
    """Discretize the analog weighting prototype with the bilinear transform."""

    w3 = 2 * math.pi * curve.f3
    w4 = 2 * math.pi * curve.f4
    num = np.array([1.0 / w3, 1.0])
    den = np.array([1.0 / (w4 * w4), 1.0 / (curve.q4 * w4), 1.0])

    if math.isfinite(curve.f5) and math.isfinite(curve.f6):
        w5 = 2 * math.pi * curve.f5
        w6 = 2 * math.pi * curve.f6
        # Unity at high frequency, (f5/f6)^2 at DC.
        num = np.polymul(num, np.array([1.0, w5 / curve.q5, w5 * w5]))
        den = np.polymul(den, np.array([1.0, w6 / curve.q6, w6 * w6]))

    b, a = sp_signal.bilinear(num, den, fs=sample_rate)
    return sp_signal.tf2sos(b, a)


def causal_sosfilt(sos: np.ndarray, x: np.ndarray) -> np.ndarray:
    # Start in steady state for the first sample so a constant input has no transient.
    zi = sp_signal.sosfilt_zi(sos) * x[0]
    y, _ = sp_signal.sosfilt(sos, x, zi=zi)
    return y


def filter_signal(
    x: np.ndarray, sample_rate: float, cfg: FilterConfig, weighting: WeightingCurve | None
) -> np.ndarray:
    x = np.asarray(x, dtype=float)
    if x.size == 0:
        return x.copy()
    nyquist = 0.5 * sample_rate
    y = x
    if _highpass_active(cfg):
        y = causal_sosfilt(butter_sos(sample_rate, cfg.highpass_hz, "highpass"), y)
    if _lowpass_active(cfg, nyquist):
        y = causal_sosfilt(butter_sos(sample_rate, cfg.lowpass_hz, "lowpass"), y)
    if cfg.standard_weighting and weighting is not None:
        y = causal_sosfilt(weighting_sos(weighting, sample_rate), y)
    return y


def apply_filters(raw: pd.DataFrame, sample_rate: float, cfg: FilterConfig) -> pd.DataFrame:
    """
    Filter the acceleration axes of `raw` according to `cfg`.

    Disabled configs return `raw` itself. Otherwise a new frame of the same
    length is returned; `time` and untargeted axes are copied unchanged.
    """

    if not cfg.enabled:
        return raw
    validate_filter_config(cfg, sample_rate)

    filtered = raw.copy()
    if len(filtered) == 0:
        logger.warning("Filter stage received an empty series")
        return filtered

    for axis in cfg.target_axes.columns:
        filtered[axis] = filter_signal(
            filtered[axis].to_numpy(dtype=float),
            sample_rate,
            cfg,
            AXIS_WEIGHTING[axis],
        )
    logger.debug(
        "Filtered %d samples on %s (hp=%s Hz, lp=%s Hz, weighting=%s)",
        len(filtered),
        ",".join(cfg.target_axes.columns),
        cfg.highpass_hz,
        cfg.lowpass_hz,
        cfg.standard_weighting,
    )
    return filtered
