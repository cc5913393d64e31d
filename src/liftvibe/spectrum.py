from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np

from liftvibe.models import SpectrumPoint

logger = logging.getLogger(__name__)

BAND_MIN_HZ = 1.0
BAND_MAX_HZ = 200.0


def bit_reverse_indices(n: int) -> np.ndarray:
    """Bit-reversed ordering of 0..n-1 for a power-of-two `n`."""

    bits = n.bit_length() - 1
    idx = np.arange(n)
    rev = np.zeros(n, dtype=np.int64)
    for _ in range(bits):
        rev = (rev << 1) | (idx & 1)
        idx = idx >> 1
    return rev


def radix2_fft(x: np.ndarray) -> np.ndarray:
    """
    Iterative radix-2 Cooley-Tukey FFT.

    `x` must have a power-of-two length. Each stage combines blocks of size
    m = 2*m2 with the twiddle step (cos(pi/m2), -sin(pi/m2)); the butterflies
    inside a stage are evaluated with numpy across all blocks at once.
    """

    n = x.size
    data = np.asarray(x, dtype=complex)[bit_reverse_indices(n)]
    m2 = 1
    while m2 < n:
        m = m2 * 2
        wm = complex(math.cos(math.pi / m2), -math.sin(math.pi / m2))
        twiddles = wm ** np.arange(m2)
        blocks = data.reshape(-1, m)
        upper = blocks[:, :m2].copy()
        t = twiddles * blocks[:, m2:]
        blocks[:, :m2] = upper + t
        blocks[:, m2:] = upper - t
        data = blocks.reshape(-1)
        m2 = m
    return data


def compute_spectrum(
    window: Sequence[float] | np.ndarray,
    sample_rate: float,
    *,
    min_hz: float = BAND_MIN_HZ,
    max_hz: float = BAND_MAX_HZ,
) -> list[SpectrumPoint]:
    """
    One-sided magnitude spectrum of `window` restricted to [min_hz, max_hz].

    Only the first N = 2**floor(log2(len(window))) samples are used (truncation,
    no zero padding). Magnitudes are |X[i]| / N, doubled for every bin but DC.
    Windows shorter than 2 samples yield an empty spectrum.
    """

    values = np.asarray(window, dtype=float)
    n = values.size
    if n < 2:
        logger.debug("Spectrum skipped: %d sample(s)", n)
        return []

    p = n.bit_length() - 1
    big_n = 1 << p
    if big_n != n:
        logger.debug("Spectrum truncating %d samples to %d", n, big_n)
    spectrum = radix2_fft(values[:big_n])

    half = big_n // 2
    freqs = np.arange(half) * sample_rate / big_n
    magnitudes = np.abs(spectrum[:half]) / big_n
    magnitudes[1:] *= 2.0

    band = (freqs >= min_hz) & (freqs <= max_hz)
    return [
        SpectrumPoint(frequency=float(f), magnitude=float(m))
        for f, m in zip(freqs[band], magnitudes[band])
    ]


def dominant_frequency(spectrum: Sequence[SpectrumPoint]) -> SpectrumPoint | None:
    """Largest-magnitude bin (lowest frequency wins ties), or None when no bin rises above 0."""

    best: SpectrumPoint | None = None
    for point in spectrum:
        if point.magnitude > (best.magnitude if best is not None else 0.0):
            best = point
    return best


def top_bins(spectrum: Sequence[SpectrumPoint], count: int) -> list[SpectrumPoint]:
    ordered = sorted(spectrum, key=lambda p: p.magnitude, reverse=True)
    return ordered[: max(0, count)]
