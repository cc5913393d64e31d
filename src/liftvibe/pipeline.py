from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import pandas as pd

from liftvibe.downsample import DEFAULT_DISPLAY_POINTS, downsample
from liftvibe.filters import apply_filters, validate_filter_config
from liftvibe.integration import integrate
from liftvibe.models import (
    AdvisoryInput,
    Axis,
    ConfigurationError,
    FilterConfig,
    SpectrumPoint,
    WindowStats,
    advisory_input,
)
from liftvibe.spectrum import compute_spectrum, dominant_frequency
from liftvibe.stats import compute_stats

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 1600.0


@dataclass(frozen=True)
class AnalysisOptions:
    sample_rate: float = DEFAULT_SAMPLE_RATE
    axis: Axis = Axis.AZ
    window_start: float = 0.0
    window_size: float = 4.0
    display_points: int = DEFAULT_DISPLAY_POINTS
    filter: FilterConfig = field(default_factory=FilterConfig)

    def validate(self) -> None:
        validate_filter_config(self.filter, self.sample_rate)
        if not self.axis.is_acceleration:
            raise ConfigurationError(f"Analysis axis must be ax, ay or az, got {self.axis.value}")
        if not math.isfinite(self.window_start) or self.window_start < 0:
            raise ConfigurationError(f"Window start must be >= 0 s, got {self.window_start}")
        if not math.isfinite(self.window_size) or self.window_size <= 0:
            raise ConfigurationError(f"Window size must be > 0 s, got {self.window_size}")


@dataclass(frozen=True)
class WindowAnalysis:
    axis: Axis
    start: float
    size: float
    samples: int
    spectrum: list[SpectrumPoint]
    stats: WindowStats
    dominant: SpectrumPoint | None
    advisory: AdvisoryInput


@dataclass(frozen=True)
class RideAnalysis:
    options: AnalysisOptions
    processed: pd.DataFrame
    display: pd.DataFrame
    global_stats: WindowStats
    velocity_stats: WindowStats
    displacement_stats: WindowStats
    window: WindowAnalysis

    @property
    def duration(self) -> float:
        return len(self.processed) / self.options.sample_rate


def process(raw: pd.DataFrame, sample_rate: float, cfg: FilterConfig) -> pd.DataFrame:
    """Filter then integrate; raises ConfigurationError before any work on a bad config."""

    validate_filter_config(cfg, sample_rate)
    filtered = apply_filters(raw, sample_rate, cfg)
    return integrate(filtered, sample_rate)


def slice_window(
    processed: pd.DataFrame, sample_rate: float, start: float, size: float
) -> pd.DataFrame:
    start_idx = max(0, int(math.floor(start * sample_rate)))
    end_idx = min(int(math.floor((start + size) * sample_rate)), len(processed))
    if start_idx >= end_idx:
        return processed.iloc[0:0]
    return processed.iloc[start_idx:end_idx]


def analyze_window(
    processed: pd.DataFrame,
    sample_rate: float,
    axis: Axis | str,
    start: float,
    size: float,
) -> WindowAnalysis:
    axis = Axis.parse(axis)
    window = slice_window(processed, sample_rate, start, size)
    if len(window) == 0:
        logger.warning("Analysis window %.3f s + %.3f s is outside the recording", start, size)
    spectrum = compute_spectrum(window[axis.value].to_numpy(dtype=float), sample_rate)
    stats = compute_stats(window, axis)
    dominant = dominant_frequency(spectrum)
    return WindowAnalysis(
        axis=axis,
        start=start,
        size=size,
        samples=len(window),
        spectrum=spectrum,
        stats=stats,
        dominant=dominant,
        advisory=advisory_input(axis, stats, dominant),
    )


def analyze(raw: pd.DataFrame, options: AnalysisOptions) -> RideAnalysis:
    """
    Run the full chain on one recording.

    Filter -> integrate, then global stats, the analysis window (spectrum,
    local stats, advisory input) and the display series, all read from the
    same processed frame.
    """

    options.validate()
    processed = process(raw, options.sample_rate, options.filter)
    logger.info(
        "Processed %d samples at %.1f Hz (filter %s)",
        len(processed),
        options.sample_rate,
        "on" if options.filter.enabled else "off",
    )
    return RideAnalysis(
        options=options,
        processed=processed,
        display=downsample(processed, options.display_points),
        global_stats=compute_stats(processed, options.axis),
        velocity_stats=compute_stats(processed, Axis.VZ),
        displacement_stats=compute_stats(processed, Axis.SZ),
        window=analyze_window(
            processed,
            options.sample_rate,
            options.axis,
            options.window_start,
            options.window_size,
        ),
    )
