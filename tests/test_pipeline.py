from __future__ import annotations

import numpy as np
import pytest
from scipy import signal as sp_signal

from helpers import raw_df, sine
from liftvibe.models import Axis, ConfigurationError, FilterConfig
from liftvibe.pipeline import AnalysisOptions, analyze, analyze_window, process, slice_window
from liftvibe.spectrum import compute_spectrum, dominant_frequency

FS = 1600.0
BIN_WIDTH = FS / 4096


def _elevator_raw():
    # 3 s at 1600 Hz: 50 Gal, 5 Hz on az riding on a 10 Gal offset.
    return raw_df(sine(5.0, FS, 4800, 50.0) + 10.0, FS)


def test_end_to_end_sine_with_dc_offset():
    processed = process(_elevator_raw(), FS, FilterConfig(enabled=False))
    assert len(processed) == 4800
    assert abs(float(processed["az"].mean())) < 1e-9

    az = processed["az"].to_numpy()
    peak = dominant_frequency(compute_spectrum(az[:4096], FS))
    assert peak is not None
    assert peak.frequency == pytest.approx(5.0, abs=BIN_WIDTH)

    result = analyze(_elevator_raw(), AnalysisOptions(sample_rate=FS))
    g = result.global_stats
    assert g.zero_pk == pytest.approx(50.0, abs=0.5)
    assert g.pk_pk == pytest.approx(100.0, abs=1.0)
    assert g.a95 <= g.pk_pk
    assert g.a95 == pytest.approx(100.0, abs=1.0)


def test_integrated_series_oscillate_at_input_frequency():
    processed = process(_elevator_raw(), FS, FilterConfig())
    vz = processed["vz"].to_numpy()
    sz = processed["sz"].to_numpy()
    assert vz[0] == 0.0 and sz[0] == 0.0

    v_peak = dominant_frequency(compute_spectrum(vz[:4096], FS))
    assert v_peak is not None
    assert v_peak.frequency == pytest.approx(5.0, abs=BIN_WIDTH)

    # Displacement carries the integration drift ramp; remove it before looking.
    s_peak = dominant_frequency(compute_spectrum(sp_signal.detrend(sz[:4096]), FS))
    assert s_peak is not None
    assert s_peak.frequency == pytest.approx(5.0, abs=BIN_WIDTH)


def test_analysis_window_and_advisory_input():
    options = AnalysisOptions(sample_rate=FS, axis=Axis.AZ, window_start=0.5, window_size=2.0)
    result = analyze(_elevator_raw(), options)

    w = result.window
    assert w.samples == 3200
    assert w.dominant is not None
    assert w.dominant.frequency == pytest.approx(5.0, abs=FS / 2048)
    assert w.stats.zero_pk == pytest.approx(50.0, abs=0.5)

    advisory = w.advisory.to_json()
    assert advisory["axis"] == "az"
    assert advisory["rms"] == pytest.approx(w.stats.rms)
    assert advisory["peak_val"] == pytest.approx(w.stats.peak_val)
    assert advisory["dominant_frequency"] == pytest.approx(w.dominant.frequency)
    assert advisory["dominant_magnitude"] == pytest.approx(w.dominant.magnitude)


def test_global_kinematic_stats_and_display_series():
    result = analyze(_elevator_raw(), AnalysisOptions(sample_rate=FS, display_points=1000))
    assert result.velocity_stats.pk_pk > 0
    assert result.velocity_stats.a95 == result.velocity_stats.zero_pk
    assert result.displacement_stats.pk_pk > 0
    assert len(result.display) <= 1000
    assert result.duration == pytest.approx(3.0)


def test_display_series_is_full_series_when_small():
    result = analyze(_elevator_raw(), AnalysisOptions(sample_rate=FS))
    assert result.display is result.processed


def test_slice_window_bounds():
    processed = process(_elevator_raw(), FS, FilterConfig())
    assert len(slice_window(processed, FS, 0.0, 1.0)) == 1600
    assert len(slice_window(processed, FS, 2.5, 4.0)) == 800
    assert len(slice_window(processed, FS, 10.0, 1.0)) == 0


def test_window_outside_recording_is_empty_not_an_error():
    processed = process(_elevator_raw(), FS, FilterConfig())
    w = analyze_window(processed, FS, "az", 10.0, 2.0)
    assert w.samples == 0
    assert w.spectrum == []
    assert w.dominant is None
    assert w.stats.pk_pk == 0.0
    assert w.advisory.dominant_frequency == 0.0


def test_invalid_filter_config_stops_the_pipeline():
    cfg = FilterConfig(enabled=True, highpass_hz=30.0, lowpass_hz=10.0)
    with pytest.raises(ConfigurationError):
        process(_elevator_raw(), FS, cfg)
    with pytest.raises(ConfigurationError):
        analyze(_elevator_raw(), AnalysisOptions(sample_rate=FS, filter=cfg))


def test_analysis_axis_must_be_acceleration():
    with pytest.raises(ConfigurationError):
        analyze(_elevator_raw(), AnalysisOptions(sample_rate=FS, axis=Axis.VZ))


def test_filtered_pipeline_keeps_in_band_signal():
    cfg = FilterConfig(enabled=True, highpass_hz=0.5, lowpass_hz=40.0)
    result = analyze(_elevator_raw(), AnalysisOptions(sample_rate=FS, filter=cfg))
    assert np.all(np.isfinite(result.processed[["az", "vz", "sz"]].to_numpy()))
    assert result.window.dominant is not None
    assert result.window.dominant.frequency == pytest.approx(5.0, abs=BIN_WIDTH)


def test_empty_recording_runs_to_completion():
    result = analyze(raw_df(np.array([]), FS), AnalysisOptions(sample_rate=FS))
    assert len(result.processed) == 0
    assert result.global_stats.pk_pk == 0.0
    assert result.window.spectrum == []


def test_flat_window_has_no_dominant_frequency():
    processed = process(raw_df(np.full(4096, 5.0), FS), FS, FilterConfig())
    w = analyze_window(processed, FS, "az", 0.0, 2.56)
    assert w.spectrum
    assert w.dominant is None
    assert w.advisory.dominant_frequency == 0.0
    assert w.advisory.dominant_magnitude == 0.0
